from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import to_canonical
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import AttendanceStatus, WindowPhase
from ..core.exceptions import ValidationError
from ..sessions.model import Session


@dataclass(frozen=True)
class WindowDecision:
    eligible: bool
    phase: WindowPhase

    @property
    def status(self) -> Optional[AttendanceStatus]:
        """Status a successful check-in gets in this phase."""
        if self.phase == WindowPhase.OPEN:
            return AttendanceStatus.PRESENT
        if self.phase == WindowPhase.LATE:
            return AttendanceStatus.LATE
        return None


@dataclass(frozen=True)
class CheckInWindow:
    """Decides where an instant falls relative to a session's check-in window.

    - before ``start - grace_before``: too early
    - until ``start + late_threshold``: open (present)
    - until ``end``: late
    - from ``end`` on: closed
    """

    grace_before: timedelta
    late_threshold: timedelta
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self):
        if self.grace_before < timedelta(0) or self.late_threshold < timedelta(0):
            raise ValidationError("Window offsets cannot be negative")

    def evaluate(self, session: Session, now: datetime) -> WindowDecision:
        now = to_canonical(now, self.timezone)
        start = session.starts_at
        end = session.ends_at

        if now >= end:
            return WindowDecision(eligible=False, phase=WindowPhase.CLOSED)
        if now < start - self.grace_before:
            return WindowDecision(eligible=False, phase=WindowPhase.TOO_EARLY)
        if now < start + self.late_threshold:
            return WindowDecision(eligible=True, phase=WindowPhase.OPEN)
        return WindowDecision(eligible=True, phase=WindowPhase.LATE)

    def is_closed(self, session: Session, now: datetime) -> bool:
        return self.evaluate(session, now).phase == WindowPhase.CLOSED
