from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceFact:
    """One (session, student) outcome, either recorded or implied absent."""

    session_id: int
    course_id: int
    session_date: date
    student_id: int
    status: AttendanceStatus
    recorded: bool = True


@dataclass(frozen=True)
class AttendanceStat:
    """Derived read-model, never persisted."""

    total: int = 0
    present: int = 0
    late: int = 0
    absent: int = 0
    rate: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "late": self.late,
            "absent": self.absent,
            "rate": self.rate,
        }


@dataclass(frozen=True)
class TrendPoint:
    day: date
    rate: int
    total: int

    def to_dict(self) -> dict:
        return {"date": self.day.strftime("%Y-%m-%d"), "rate": self.rate, "total": self.total}


@dataclass(frozen=True)
class AtRiskStudent:
    student_id: int
    absences: int
    stat: AttendanceStat

    def to_dict(self) -> dict:
        return {"student_id": self.student_id, "absences": self.absences, **self.stat.to_dict()}


@dataclass(frozen=True)
class CourseProgress:
    course_id: int
    stat: AttendanceStat
    last_session_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "course_id": self.course_id,
            "last_session_date": self.last_session_date.strftime("%Y-%m-%d") if self.last_session_date else None,
            **self.stat.to_dict(),
        }
