from __future__ import annotations

import ipaddress
from typing import Iterable, Sequence, Union

from ..core.exceptions import ValidationError

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def require_latitude(value: float, field_name: str = "latitude") -> float:
    if not -90.0 <= float(value) <= 90.0:
        raise ValidationError(f"{field_name} must be between -90 and 90")
    return float(value)


def require_longitude(value: float, field_name: str = "longitude") -> float:
    if not -180.0 <= float(value) <= 180.0:
        raise ValidationError(f"{field_name} must be between -180 and 180")
    return float(value)


def require_positive(value: float, field_name: str) -> float:
    if float(value) <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return float(value)


def parse_address_ranges(ranges: Iterable[str]) -> Sequence[IPNetwork]:
    """Parse CIDR ranges or single addresses into networks.

    A bare address becomes a single-host network (/32 or /128).
    """
    networks: list[IPNetwork] = []
    for item in ranges:
        candidate = (item or "").strip()
        if not candidate:
            continue
        try:
            networks.append(ipaddress.ip_network(candidate, strict=False))
        except ValueError:
            raise ValidationError(f"Invalid address range: {candidate!r}")
    if not networks:
        raise ValidationError("At least one allowed address range is required")
    return tuple(networks)
