from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.validators import (
    IPNetwork,
    parse_address_ranges,
    require_latitude,
    require_longitude,
    require_positive,
)
from ..core.enums import VerificationMethod
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeofenceConfig:
    latitude: float
    longitude: float
    radius_meters: float

    def __post_init__(self):
        require_latitude(self.latitude, "center latitude")
        require_longitude(self.longitude, "center longitude")
        require_positive(self.radius_meters, "radius_meters")


@dataclass(frozen=True)
class NetworkConfig:
    allowed_ranges: Sequence[str]
    networks: Sequence[IPNetwork] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "allowed_ranges", tuple(self.allowed_ranges))
        object.__setattr__(self, "networks", parse_address_ranges(self.allowed_ranges))


@dataclass(frozen=True)
class SessionToken:
    """Short-lived check-in credential bound to one session."""

    session_id: int
    value: str
    serial: int
    issued_at: datetime
    expires_at: datetime
    superseded_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "token": self.value,
            "serial": self.serial,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class Session:
    """Domain entity: one scheduled class meeting.

    ``current_token`` is only set for token sessions and only written by the
    token rotator.
    """

    session_id: int
    course_id: int
    instructor_id: int
    session_date: date
    start_time: time
    end_time: time
    method: VerificationMethod
    title: str = ""
    geofence: Optional[GeofenceConfig] = None
    network: Optional[NetworkConfig] = None
    is_active: bool = True
    current_token: Optional[SessionToken] = None

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValidationError("Session start time must be before end time")
        if self.method == VerificationMethod.GEOFENCE and self.geofence is None:
            raise ValidationError("Geofence sessions need a center and radius")
        if self.method == VerificationMethod.NETWORK and self.network is None:
            raise ValidationError("Network sessions need allowed address ranges")
        if self.current_token is not None and self.current_token.session_id != self.session_id:
            raise ValidationError("Current token belongs to another session")

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.session_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.session_date, self.end_time)
