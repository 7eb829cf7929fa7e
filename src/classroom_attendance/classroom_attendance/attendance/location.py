from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Tuple

from ..core.constants import DEFAULT_LOCATION_TIMEOUT_SECONDS
from ..core.enums import ErrorKind
from ..core.exceptions import VerificationError
from .model import LocationEvidence

logger = logging.getLogger(__name__)

LocationProvider = Callable[[], Tuple[float, float]]


def acquire_location(
    provider: LocationProvider,
    *,
    timeout: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
    clock: Optional[Callable] = None,
) -> LocationEvidence:
    """Ask a device provider for a fix, giving up after ``timeout`` seconds.

    A provider that hangs or fails turns into ``LocationUnavailable``. Each
    call gets its own daemon thread, so a hung provider never holds up the
    next caller.
    """
    outcome: dict = {}

    def _run() -> None:
        try:
            outcome["fix"] = provider()
        except Exception as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_run, name="location-fix", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        logger.info("Location provider timed out after %ss", timeout)
        raise VerificationError(ErrorKind.LOCATION_UNAVAILABLE, "Timed out waiting for a location fix")
    if "error" in outcome:
        logger.info("Location provider failed: %s", outcome["error"])
        raise VerificationError(ErrorKind.LOCATION_UNAVAILABLE, "Location could not be determined")

    try:
        latitude, longitude = outcome["fix"]
    except (TypeError, ValueError):
        raise VerificationError(ErrorKind.LOCATION_UNAVAILABLE, "Location could not be determined")

    return LocationEvidence(
        latitude=latitude,
        longitude=longitude,
        captured_at=clock() if clock else None,
    )
