from __future__ import annotations

import io

import qrcode

from .model import SessionToken


def render_token_qr(token: SessionToken, *, box_size: int = 10, border: int = 2) -> bytes:
    """Render the token value as a PNG QR code for the instructor's display."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(token.value)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(stream) -> str | None:
    """Decode the first QR code in an uploaded photo; None when nothing is found."""
    from PIL import Image
    from pyzbar.pyzbar import decode as pyzbar_decode

    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()
