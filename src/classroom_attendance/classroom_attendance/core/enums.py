from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization checks."""

    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"

    @property
    def attended(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class VerificationMethod(str, Enum):
    """How a session verifies that a student is really in the room."""

    TOKEN = "token"
    GEOFENCE = "geofence"
    NETWORK = "network"


class RecordMethod(str, Enum):
    """Method stored on a record: a verification method, or a manual override."""

    TOKEN = "token"
    GEOFENCE = "geofence"
    NETWORK = "network"
    MANUAL = "manual"

    @classmethod
    def from_verification(cls, method: VerificationMethod) -> "RecordMethod":
        return cls(method.value)


class WindowPhase(str, Enum):
    TOO_EARLY = "too-early"
    OPEN = "open"
    LATE = "late"
    CLOSED = "closed"


class ErrorKind(str, Enum):
    """Terminal, user-facing outcomes of a single check-in attempt."""

    SESSION_NOT_FOUND = "SessionNotFound"
    SESSION_INACTIVE = "SessionInactive"
    NOT_ENROLLED = "NotEnrolled"
    ALREADY_RECORDED = "AlreadyRecorded"
    OUTSIDE_WINDOW = "OutsideWindow"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    INVALID_EVIDENCE = "InvalidEvidence"
    TOKEN_EXPIRED = "TokenExpired"
    TOKEN_MISMATCH = "TokenMismatch"
    LOCATION_UNAVAILABLE = "LocationUnavailable"
    OUTSIDE_GEOFENCE = "OutsideGeofence"
    ORIGIN_NOT_ALLOWED = "OriginNotAllowed"
