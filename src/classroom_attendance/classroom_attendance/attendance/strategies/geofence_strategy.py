from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import to_canonical
from ...core.constants import DEFAULT_TIMEZONE, EARTH_RADIUS_METERS
from ...core.enums import ErrorKind, VerificationMethod
from ...core.exceptions import VerificationError
from ...sessions.model import Session
from ..model import Evidence, LocationEvidence
from .base import MethodMatch, Verifier


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters (spherical earth)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _usable(value: Optional[float], limit: float) -> bool:
    return value is not None and math.isfinite(value) and -limit <= value <= limit


class GeofenceVerifier(Verifier):
    method = VerificationMethod.GEOFENCE

    def __init__(self, *, max_fix_age: Optional[timedelta] = None, timezone: str = DEFAULT_TIMEZONE):
        self._max_fix_age = max_fix_age
        self._timezone = timezone

    def verify(self, session: Session, evidence: Evidence, *, now: datetime) -> MethodMatch:
        if not isinstance(evidence, LocationEvidence):
            raise VerificationError(ErrorKind.LOCATION_UNAVAILABLE, "Location evidence expected")
        if not (_usable(evidence.latitude, 90.0) and _usable(evidence.longitude, 180.0)):
            raise VerificationError(ErrorKind.LOCATION_UNAVAILABLE, "Location could not be read")

        if self._max_fix_age is not None and evidence.captured_at is not None:
            age = to_canonical(now, self._timezone) - to_canonical(evidence.captured_at, self._timezone)
            if age > self._max_fix_age:
                raise VerificationError(ErrorKind.LOCATION_UNAVAILABLE, "Location fix is too old, try again")

        fence = session.geofence
        distance = haversine_meters(evidence.latitude, evidence.longitude, fence.latitude, fence.longitude)
        if distance > fence.radius_meters:
            raise VerificationError(
                ErrorKind.OUTSIDE_GEOFENCE,
                f"You are {distance:.0f} m from the classroom (allowed {fence.radius_meters:.0f} m)",
            )
        return MethodMatch(method=self.method, detail={"distance_meters": round(distance, 1)})
