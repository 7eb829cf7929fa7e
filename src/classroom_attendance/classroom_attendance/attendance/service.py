from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import to_canonical
from ..common.locks import KeyedLockTable
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, ErrorKind, RecordMethod, Role, VerificationMethod, WindowPhase
from ..core.exceptions import AuthorizationError, CheckInError, DuplicateRecordError, ValidationError
from ..enrollment.repository import EnrollmentRepository
from ..notifications.notifier import LogNotifier, Notifier, OverrideNotification, send_quietly
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from .factory import VerifierFactory
from .location import LocationProvider, acquire_location
from .model import AttendanceRecord, Evidence, NewAttendanceRecord
from .repository import AttendanceRepository
from .window import CheckInWindow

logger = logging.getLogger(__name__)


class CheckInService:
    """Decides whether a student's check-in is accepted and records the outcome.

    One (session, student) pair gets at most one record. The lookup for an
    existing record and the insert run under a per-pair lock; the storage
    UNIQUE key covers writers in other processes.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
        *,
        window: CheckInWindow,
        verifiers: VerifierFactory,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = datetime.now,
        locks: Optional[KeyedLockTable] = None,
        location_timeout: float = 10.0,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._enrollments = enrollments
        self._window = window
        self._verifiers = verifiers
        self._notifier = notifier or LogNotifier()
        self._clock = clock
        self._locks = locks or KeyedLockTable()
        self._location_timeout = location_timeout

    def attempt_check_in(
        self,
        student_id: int,
        session_id: int,
        method: VerificationMethod,
        evidence: Evidence,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = self._now(now)
        try:
            record = self._attempt(int(student_id), int(session_id), VerificationMethod(method), evidence, now)
        except CheckInError as e:
            logger.info(
                "Check-in rejected: student=%s session=%s kind=%s", student_id, session_id, e.kind.value
            )
            raise
        logger.info(
            "Check-in accepted: student=%s session=%s status=%s", student_id, session_id, record.status.value
        )
        return record

    def check_in_with_location(
        self,
        student_id: int,
        session_id: int,
        provider: LocationProvider,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Geofence check-in for kiosks and devices that read a fix server-side."""
        evidence = acquire_location(provider, timeout=self._location_timeout, clock=self._clock)
        return self.attempt_check_in(student_id, session_id, VerificationMethod.GEOFENCE, evidence, now=now)

    def _attempt(
        self,
        student_id: int,
        session_id: int,
        method: VerificationMethod,
        evidence: Evidence,
        now: datetime,
    ) -> AttendanceRecord:
        session = self._require_session(session_id)
        if not session.is_active:
            raise CheckInError(ErrorKind.SESSION_INACTIVE, "This session has been closed")

        if not self._enrollments.is_enrolled(student_id, session.course_id):
            raise CheckInError(ErrorKind.NOT_ENROLLED, "You are not enrolled in this course")

        with self._locks.hold((session_id, student_id)):
            if self._attendance.get_for_session_and_student(session_id, student_id):
                raise CheckInError(ErrorKind.ALREADY_RECORDED, "You have already checked in for this session")

            decision = self._window.evaluate(session, now)
            if not decision.eligible:
                message = (
                    "Check-in has not opened yet"
                    if decision.phase == WindowPhase.TOO_EARLY
                    else "Check-in for this session is closed"
                )
                raise CheckInError(ErrorKind.OUTSIDE_WINDOW, message)

            if method != session.method:
                raise CheckInError(
                    ErrorKind.METHOD_NOT_ALLOWED, f"This session only accepts {session.method.value} check-in"
                )

            match = self._verifiers.for_method(session.method).verify(session, evidence, now=now)

            snapshot = dict(evidence.snapshot())
            snapshot.update(match.detail)
            try:
                return self._attendance.create_record(
                    NewAttendanceRecord(
                        session_id=session_id,
                        student_id=student_id,
                        status=decision.status,
                        check_in_time=now,
                        method=RecordMethod.from_verification(method),
                        evidence=snapshot,
                        created_at=now,
                    )
                )
            except DuplicateRecordError:
                raise CheckInError(ErrorKind.ALREADY_RECORDED, "You have already checked in for this session")

    def record_absences(self, session_id: int, *, now: Optional[datetime] = None) -> list[AttendanceRecord]:
        """Write an explicit ``absent`` record for every enrolled student who never checked in.

        Only allowed once the window is closed or the session was closed
        explicitly. Safe to call repeatedly.
        """
        now = self._now(now)
        session = self._require_session(session_id)
        if session.is_active and not self._window.is_closed(session, now):
            raise CheckInError(ErrorKind.OUTSIDE_WINDOW, "Absences can be recorded only after the session ends")

        created: list[AttendanceRecord] = []
        for student_id in self._enrollments.list_students(session.course_id):
            with self._locks.hold((session_id, student_id)):
                if self._attendance.get_for_session_and_student(session_id, student_id):
                    continue
                try:
                    created.append(
                        self._attendance.create_record(
                            NewAttendanceRecord(
                                session_id=session_id,
                                student_id=student_id,
                                status=AttendanceStatus.ABSENT,
                                check_in_time=None,
                                method=RecordMethod.from_verification(session.method),
                                evidence={},
                                created_at=now,
                            )
                        )
                    )
                except DuplicateRecordError:
                    continue

        logger.info("Recorded %s absences for session %s", len(created), session_id)
        return created

    def apply_override(
        self,
        *,
        actor_id: int,
        actor_role: Role,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Manual override by an instructor or admin; notifies the student."""
        if actor_role not in (Role.INSTRUCTOR, Role.ADMIN):
            raise AuthorizationError("Only instructors and admins can change attendance")

        now = self._now(now)
        session = self._require_session(session_id)
        if actor_role == Role.INSTRUCTOR and session.instructor_id != int(actor_id):
            raise AuthorizationError("You can only change attendance for your own sessions")
        if not self._enrollments.is_enrolled(student_id, session.course_id):
            raise ValidationError("The student is not enrolled in this course")

        status = AttendanceStatus(status)
        note = (note or "").strip() or None

        with self._locks.hold((session_id, student_id)):
            existing = self._attendance.get_for_session_and_student(session_id, student_id)
            previous_status = existing.status if existing else None
            if existing:
                if not self._attendance.update_override(
                    record_id=existing.record_id, status=status, updated_at=now, note=note
                ):
                    raise ValidationError("Updating the attendance record failed")
                record = self._attendance.get_by_id(existing.record_id)
            else:
                record = self._attendance.create_record(
                    NewAttendanceRecord(
                        session_id=session_id,
                        student_id=student_id,
                        status=status,
                        check_in_time=now if status.attended else None,
                        method=RecordMethod.MANUAL,
                        evidence={},
                        created_at=now,
                        is_manual_override=True,
                        note=note,
                    )
                )

        logger.info(
            "Override: actor=%s session=%s student=%s %s -> %s",
            actor_id,
            session_id,
            student_id,
            previous_status.value if previous_status else None,
            status.value,
        )
        send_quietly(
            self._notifier,
            OverrideNotification(
                student_id=student_id,
                session_id=session_id,
                actor_id=int(actor_id),
                status=status,
                previous_status=previous_status,
                created_at=now,
                note=note,
            ),
        )
        return record

    def get_history(self, student_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRecord]:
        return list(self._attendance.list_recent_for_student(int(student_id), int(limit)))

    def _now(self, now: Optional[datetime]) -> datetime:
        # Sessions, tokens and records all hold naive canonical-time instants
        return to_canonical(now or self._clock(), self._window.timezone)

    def _require_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if session is None:
            raise CheckInError(ErrorKind.SESSION_NOT_FOUND, "Session not found")
        return session
