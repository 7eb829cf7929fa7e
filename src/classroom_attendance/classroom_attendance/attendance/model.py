from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from ..core.enums import AttendanceStatus, ErrorKind, RecordMethod, VerificationMethod
from ..core.exceptions import CheckInError


@dataclass(frozen=True)
class TokenEvidence:
    token: str

    def snapshot(self) -> dict:
        return {"token": self.token}


@dataclass(frozen=True)
class LocationEvidence:
    """A location fix; coordinates stay optional so a failed fix can still be submitted."""

    latitude: Optional[float]
    longitude: Optional[float]
    captured_at: Optional[datetime] = None
    accuracy_meters: Optional[float] = None

    def snapshot(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class NetworkEvidence:
    address: Optional[str]

    def snapshot(self) -> dict:
        return {"address": self.address}


Evidence = Union[TokenEvidence, LocationEvidence, NetworkEvidence]


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: outcome of one student's attendance for one session."""

    record_id: int
    session_id: int
    student_id: int
    status: AttendanceStatus
    check_in_time: Optional[datetime]
    method: RecordMethod
    evidence: Mapping[str, Any]
    is_manual_override: bool
    created_at: datetime
    updated_at: datetime
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "session_id": self.session_id,
            "student_id": self.student_id,
            "status": self.status.value,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "method": self.method.value,
            "evidence": dict(self.evidence),
            "is_manual_override": self.is_manual_override,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "note": self.note,
        }


@dataclass(frozen=True)
class NewAttendanceRecord:
    """Write-model handed to the repository."""

    session_id: int
    student_id: int
    status: AttendanceStatus
    check_in_time: Optional[datetime]
    method: RecordMethod
    evidence: Mapping[str, Any]
    created_at: datetime
    is_manual_override: bool = False
    note: Optional[str] = None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_evidence(method: VerificationMethod, payload: Optional[Mapping[str, Any]]) -> Evidence:
    """Build evidence from the small structured value sent by a client.

    Unreadable coordinates are kept as None so the geofence check reports
    them as an unavailable location.
    """
    payload = payload or {}
    if method == VerificationMethod.TOKEN:
        token = payload.get("token")
        if not isinstance(token, str) or not token.strip():
            raise CheckInError(ErrorKind.INVALID_EVIDENCE, "A token is required")
        return TokenEvidence(token=token.strip())

    if method == VerificationMethod.GEOFENCE:
        captured_at = payload.get("captured_at")
        if isinstance(captured_at, str):
            try:
                captured_at = datetime.fromisoformat(captured_at)
            except ValueError:
                captured_at = None
        return LocationEvidence(
            latitude=_optional_float(payload.get("latitude")),
            longitude=_optional_float(payload.get("longitude")),
            captured_at=captured_at if isinstance(captured_at, datetime) else None,
            accuracy_meters=_optional_float(payload.get("accuracy")),
        )

    address = payload.get("address")
    return NetworkEvidence(address=address.strip() if isinstance(address, str) else None)
