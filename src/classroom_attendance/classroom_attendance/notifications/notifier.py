from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverrideNotification:
    """Tells a student that an instructor or admin changed their attendance."""

    student_id: int
    session_id: int
    actor_id: int
    status: AttendanceStatus
    previous_status: Optional[AttendanceStatus]
    created_at: datetime
    note: Optional[str] = None

    @property
    def subject(self) -> str:
        return "Attendance updated"

    @property
    def content(self) -> str:
        before = self.previous_status.value if self.previous_status else "no record"
        text = f"Your attendance for session {self.session_id} changed from {before} to {self.status.value}."
        if self.note:
            text += f"\n\nNote: {self.note}"
        return text


class Notifier(Protocol):
    def notify(self, event: OverrideNotification) -> None:
        raise NotImplementedError


class LogNotifier:
    """Fallback notifier that only writes the event to the log."""

    def notify(self, event: OverrideNotification) -> None:
        logger.info("Notify student %s: %s", event.student_id, event.content)


def send_quietly(notifier: Notifier, event: OverrideNotification) -> None:
    """Fire-and-forget delivery: a failing notifier never fails the caller."""
    try:
        notifier.notify(event)
    except Exception:
        logger.exception("Could not deliver notification to student %s", event.student_id)
