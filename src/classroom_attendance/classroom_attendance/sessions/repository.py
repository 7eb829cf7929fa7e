from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Session, SessionToken


class SessionRepository(Protocol):
    """Session catalog. Scheduling itself happens elsewhere; this side only reads."""

    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def list_active_for_course(self, course_id: int, session_date: date) -> Sequence[Session]:
        raise NotImplementedError

    def list_for_date(self, session_date: date) -> Sequence[Session]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[Session]:
        raise NotImplementedError

    def list_in_range(self, start: Optional[date], end: Optional[date]) -> Sequence[Session]:
        """Sessions dated within [start, end]; a missing bound is open."""

        raise NotImplementedError


class SessionTokenRepository(Protocol):
    def get_current(self, session_id: int) -> Optional[SessionToken]:
        raise NotImplementedError

    def find_by_value(self, session_id: int, value: str) -> Optional[SessionToken]:
        raise NotImplementedError

    def get_history(self, session_id: int) -> Sequence[SessionToken]:
        raise NotImplementedError

    def save_rotation(self, token: SessionToken, *, superseded_at: datetime) -> None:
        """Mark the current token (if any) superseded and store ``token`` as current.

        Both writes happen in one transaction.
        """

        raise NotImplementedError
