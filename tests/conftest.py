from __future__ import annotations

import threading
import time as time_module
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

import pytest

from classroom_attendance.attendance.factory import VerifierFactory
from classroom_attendance.attendance.model import AttendanceRecord, NewAttendanceRecord
from classroom_attendance.attendance.service import CheckInService
from classroom_attendance.attendance.window import CheckInWindow
from classroom_attendance.core.enums import AttendanceStatus, Role, VerificationMethod
from classroom_attendance.core.exceptions import DuplicateRecordError
from classroom_attendance.enrollment.model import Enrollment
from classroom_attendance.sessions.model import GeofenceConfig, NetworkConfig, Session, SessionToken
from classroom_attendance.users.model import User

SESSION_DATE = date(2025, 3, 3)
CLASSROOM = (10.762622, 106.660172)


class InMemoryTokens:
    def __init__(self):
        self._by_session: dict[int, list[SessionToken]] = {}

    def get_current(self, session_id: int) -> Optional[SessionToken]:
        for t in self._by_session.get(session_id, []):
            if t.superseded_at is None:
                return t
        return None

    def find_by_value(self, session_id: int, value: str) -> Optional[SessionToken]:
        for t in self._by_session.get(session_id, []):
            if t.value == value:
                return t
        return None

    def get_history(self, session_id: int):
        return sorted(self._by_session.get(session_id, []), key=lambda t: t.serial)

    def save_rotation(self, token: SessionToken, *, superseded_at: datetime) -> None:
        items = self._by_session.setdefault(token.session_id, [])
        for i, t in enumerate(items):
            if t.superseded_at is None:
                items[i] = replace(t, superseded_at=superseded_at)
        items.append(token)


class InMemorySessions:
    """Session catalog that joins in the current token like the MySQL repository."""

    def __init__(self, tokens: InMemoryTokens, sessions: Iterable[Session] = ()):
        self._tokens = tokens
        self._sessions: dict[int, Session] = {}
        for s in sessions:
            self.add(s)

    def add(self, session: Session) -> Session:
        self._sessions[session.session_id] = session
        return session

    def get_by_id(self, session_id: int) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return replace(session, current_token=self._tokens.get_current(session_id))

    def list_active_for_course(self, course_id: int, session_date: date):
        return [s for s in self._all() if s.course_id == course_id and s.session_date == session_date and s.is_active]

    def list_for_date(self, session_date: date):
        return [s for s in self._all() if s.session_date == session_date]

    def list_for_course(self, course_id: int):
        return [s for s in self._all() if s.course_id == course_id]

    def list_in_range(self, start: Optional[date], end: Optional[date]):
        return [
            s
            for s in self._all()
            if (start is None or s.session_date >= start) and (end is None or s.session_date <= end)
        ]

    def _all(self):
        return [self.get_by_id(sid) for sid in sorted(self._sessions)]


class InMemoryAttendance:
    def __init__(self, *, unique: bool = True, delay: float = 0.0):
        self._records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._unique = unique
        self._delay = delay
        self._mutex = threading.Lock()
        self.create_calls = 0

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._records.get(record_id)

    def get_for_session_and_student(self, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        found = None
        for r in self._records.values():
            if r.session_id == session_id and r.student_id == student_id:
                found = r
                break
        if self._delay:
            # Widen the gap between "look" and "insert" so races show up
            time_module.sleep(self._delay)
        return found

    def create_record(self, record: NewAttendanceRecord) -> AttendanceRecord:
        with self._mutex:
            self.create_calls += 1
            if self._unique and any(
                r.session_id == record.session_id and r.student_id == record.student_id
                for r in self._records.values()
            ):
                raise DuplicateRecordError("duplicate (session_id, student_id)")
            self._id += 1
            rec = AttendanceRecord(
                record_id=self._id,
                session_id=record.session_id,
                student_id=record.student_id,
                status=record.status,
                check_in_time=record.check_in_time,
                method=record.method,
                evidence=dict(record.evidence),
                is_manual_override=record.is_manual_override,
                created_at=record.created_at,
                updated_at=record.created_at,
                note=record.note,
            )
            self._records[rec.record_id] = rec
            return rec

    def list_for_sessions(self, session_ids):
        ids = set(session_ids)
        return [r for r in self._records.values() if r.session_id in ids]

    def list_recent_for_student(self, student_id: int, limit: int):
        items = [r for r in self._records.values() if r.student_id == student_id]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items[:limit]

    def update_override(self, *, record_id: int, status: AttendanceStatus, updated_at: datetime, note=None) -> bool:
        rec = self._records.get(record_id)
        if rec is None:
            return False
        self._records[record_id] = replace(
            rec, status=status, is_manual_override=True, updated_at=updated_at, note=note or rec.note
        )
        return True

    def all(self) -> list[AttendanceRecord]:
        return list(self._records.values())


class InMemoryEnrollments:
    def __init__(self, pairs: Iterable[tuple[int, int]] = ()):
        self._pairs = set(pairs)

    def enroll(self, student_id: int, course_id: int) -> None:
        self._pairs.add((student_id, course_id))

    def is_enrolled(self, student_id: int, course_id: int) -> bool:
        return (student_id, course_id) in self._pairs

    def list_enrollments(self, student_id: int):
        return [Enrollment(student_id=s, course_id=c) for s, c in sorted(self._pairs) if s == student_id]

    def list_students(self, course_id: int):
        return sorted(s for s, c in self._pairs if c == course_id)


class InMemoryUsers:
    def __init__(self, users: Iterable[User] = ()):
        self._users = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_department(self, user_id: int) -> Optional[str]:
        user = self._users.get(user_id)
        return user.department if user else None

    def departments_for(self, user_ids):
        return {uid: self.get_department(uid) for uid in user_ids}


class RecordingNotifier:
    def __init__(self, *, fail: bool = False):
        self.events = []
        self._fail = fail

    def notify(self, event) -> None:
        if self._fail:
            raise RuntimeError("mail server down")
        self.events.append(event)


def student(user_id: int, department: Optional[str] = "Computer Science") -> User:
    return User(
        user_id=user_id,
        full_name=f"Student {user_id}",
        email=f"s{user_id}@school.test",
        role=Role.STUDENT,
        department=department,
    )


def make_session(
    session_id: int = 1,
    *,
    method: VerificationMethod = VerificationMethod.TOKEN,
    course_id: int = 10,
    instructor_id: int = 100,
    session_date: date = SESSION_DATE,
    start: time = time(9, 0),
    end: time = time(10, 0),
    radius: float = 100.0,
    ranges=("192.168.10.0/24",),
    is_active: bool = True,
) -> Session:
    return Session(
        session_id=session_id,
        course_id=course_id,
        instructor_id=instructor_id,
        session_date=session_date,
        start_time=start,
        end_time=end,
        method=method,
        title=f"Lecture {session_id}",
        geofence=GeofenceConfig(latitude=CLASSROOM[0], longitude=CLASSROOM[1], radius_meters=radius)
        if method == VerificationMethod.GEOFENCE
        else None,
        network=NetworkConfig(allowed_ranges=list(ranges)) if method == VerificationMethod.NETWORK else None,
        is_active=is_active,
    )


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 3, 9, 10, 0)


@pytest.fixture
def window():
    return CheckInWindow(grace_before=timedelta(minutes=5), late_threshold=timedelta(minutes=15))


@pytest.fixture
def tokens():
    return InMemoryTokens()


@pytest.fixture
def sessions(tokens):
    return InMemorySessions(tokens)


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def enrollments():
    return InMemoryEnrollments()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def checkin_service(attendance, sessions, enrollments, tokens, window, notifier, fixed_now):
    return CheckInService(
        attendance,
        sessions,
        enrollments,
        window=window,
        verifiers=VerifierFactory.standard(tokens, max_fix_age=timedelta(seconds=60)),
        notifier=notifier,
        clock=lambda: fixed_now,
        location_timeout=0.2,
    )
