from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, NewAttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_session_and_student(self, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(self, record: NewAttendanceRecord) -> AttendanceRecord:
        """Insert a record.

        Raises ``DuplicateRecordError`` if the (session, student) pair exists.
        """

        raise NotImplementedError

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_recent_for_student(self, student_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def update_override(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        updated_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        """Admin/instructor override; the only mutation a record ever sees."""

        raise NotImplementedError
