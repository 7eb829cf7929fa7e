from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..attendance.window import CheckInWindow
from ..core.constants import DEFAULT_AT_RISK_THRESHOLD, DEFAULT_TREND_DAYS, UNKNOWN_DEPARTMENT
from ..core.enums import AttendanceStatus
from ..enrollment.repository import EnrollmentRepository
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..users.repository import UserRepository
from .calculator.base import RateCalculator
from .calculator.standard_calculator import StandardRateCalculator
from .model import AtRiskStudent, AttendanceFact, AttendanceStat, CourseProgress, TrendPoint


class AttendanceAnalyticsService:
    """Attendance statistics for dashboards.

    Every statistic is built from facts: one per stored record, plus an
    implied ``absent`` for each enrolled student without a record in a
    session whose window has closed. Missing data yields zero stats.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
        users: UserRepository,
        *,
        window: CheckInWindow,
        calculator: Optional[RateCalculator] = None,
        clock: Callable[[], datetime] = datetime.now,
        at_risk_threshold: int = DEFAULT_AT_RISK_THRESHOLD,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._enrollments = enrollments
        self._users = users
        self._window = window
        self._calculator = calculator or StandardRateCalculator()
        self._clock = clock
        self._at_risk_threshold = int(at_risk_threshold)

    def for_session(self, session_id: int, *, now: Optional[datetime] = None) -> AttendanceStat:
        session = self._sessions.get_by_id(int(session_id))
        if session is None:
            return AttendanceStat()
        return self.summarize(self._facts([session], now))

    def for_course(
        self,
        course_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceStat:
        sessions = _in_range(self._sessions.list_for_course(int(course_id)), start, end)
        return self.summarize(self._facts(sessions, now))

    def for_student(
        self,
        student_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceStat:
        student_id = int(student_id)
        facts = self._facts(self._student_sessions(student_id, start, end), now)
        return self.summarize(f for f in facts if f.student_id == student_id)

    def for_department(
        self,
        department: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceStat:
        return self.by_department(start=start, end=end, now=now).get(department, AttendanceStat())

    def by_department(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, AttendanceStat]:
        facts = self._facts(self._sessions.list_in_range(start, end), now)
        departments = self._users.departments_for({f.student_id for f in facts})

        grouped: Dict[str, List[AttendanceFact]] = defaultdict(list)
        for f in facts:
            grouped[departments.get(f.student_id) or UNKNOWN_DEPARTMENT].append(f)
        return {dept: self.summarize(items) for dept, items in sorted(grouped.items())}

    def overall(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceStat:
        return self.summarize(self._facts(self._sessions.list_in_range(start, end), now))

    def daily_trend(
        self,
        days: int = DEFAULT_TREND_DAYS,
        *,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> List[TrendPoint]:
        now = now or self._clock()
        today = today or now.date()
        first = today - timedelta(days=max(int(days), 1) - 1)

        by_day: Dict[date, List[AttendanceFact]] = defaultdict(list)
        for f in self._facts(self._sessions.list_in_range(first, today), now):
            by_day[f.session_date].append(f)

        points = []
        for offset in range((today - first).days + 1):
            day = first + timedelta(days=offset)
            stat = self.summarize(by_day.get(day, []))
            points.append(TrendPoint(day=day, rate=stat.rate, total=stat.total))
        return points

    def at_risk_students(
        self,
        course_id: int,
        *,
        threshold: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[AtRiskStudent]:
        """Students whose absence count in the course reached the threshold."""
        threshold = self._at_risk_threshold if threshold is None else int(threshold)
        facts = self._facts(self._sessions.list_for_course(int(course_id)), now)

        per_student: Dict[int, List[AttendanceFact]] = defaultdict(list)
        for f in facts:
            per_student[f.student_id].append(f)

        out = []
        for student_id, items in per_student.items():
            stat = self.summarize(items)
            if stat.absent >= threshold:
                out.append(AtRiskStudent(student_id=student_id, absences=stat.absent, stat=stat))
        out.sort(key=lambda s: (-s.absences, s.student_id))
        return out

    def student_progress(self, student_id: int, *, now: Optional[datetime] = None) -> List[CourseProgress]:
        student_id = int(student_id)
        progress = []
        for enrollment in self._enrollments.list_enrollments(student_id):
            sessions = self._sessions.list_for_course(enrollment.course_id)
            facts = [f for f in self._facts(sessions, now) if f.student_id == student_id]
            progress.append(
                CourseProgress(
                    course_id=enrollment.course_id,
                    stat=self.summarize(facts),
                    last_session_date=max((f.session_date for f in facts), default=None),
                )
            )
        return progress

    def summarize(self, facts: Iterable[AttendanceFact]) -> AttendanceStat:
        counts = {status: 0 for status in AttendanceStatus}
        for f in facts:
            counts[f.status] += 1

        total = sum(counts.values())
        present = counts[AttendanceStatus.PRESENT]
        late = counts[AttendanceStatus.LATE]
        return AttendanceStat(
            total=total,
            present=present,
            late=late,
            absent=counts[AttendanceStatus.ABSENT],
            rate=self._calculator.rate(present + late, total),
        )

    def _student_sessions(self, student_id: int, start: Optional[date], end: Optional[date]) -> List[Session]:
        sessions: List[Session] = []
        for enrollment in self._enrollments.list_enrollments(student_id):
            sessions.extend(_in_range(self._sessions.list_for_course(enrollment.course_id), start, end))
        return sessions

    def _facts(self, sessions: Sequence[Session], now: Optional[datetime]) -> List[AttendanceFact]:
        now = now or self._clock()
        sessions = list(sessions)
        if not sessions:
            return []

        recorded: Dict[int, Dict[int, AttendanceStatus]] = defaultdict(dict)
        for r in self._attendance.list_for_sessions([s.session_id for s in sessions]):
            recorded[r.session_id][r.student_id] = r.status

        roster_cache: Dict[int, Sequence[int]] = {}
        facts: List[AttendanceFact] = []
        for s in sessions:
            statuses = recorded.get(s.session_id, {})
            for student_id, status in statuses.items():
                facts.append(_fact(s, student_id, status))

            if s.is_active and not self._window.is_closed(s, now):
                continue
            if s.course_id not in roster_cache:
                roster_cache[s.course_id] = self._enrollments.list_students(s.course_id)
            for student_id in roster_cache[s.course_id]:
                if student_id not in statuses:
                    facts.append(_fact(s, student_id, AttendanceStatus.ABSENT, recorded=False))
        return facts


def _fact(session: Session, student_id: int, status: AttendanceStatus, *, recorded: bool = True) -> AttendanceFact:
    return AttendanceFact(
        session_id=session.session_id,
        course_id=session.course_id,
        session_date=session.session_date,
        student_id=student_id,
        status=status,
        recorded=recorded,
    )


def _in_range(sessions: Iterable[Session], start: Optional[date], end: Optional[date]) -> List[Session]:
    return [
        s
        for s in sessions
        if (start is None or s.session_date >= start) and (end is None or s.session_date <= end)
    ]
