from __future__ import annotations

from typing import Protocol, Sequence

from .model import Enrollment


class EnrollmentRepository(Protocol):
    """Enrollment registry, owned by the course catalog."""

    def is_enrolled(self, student_id: int, course_id: int) -> bool:
        raise NotImplementedError

    def list_enrollments(self, student_id: int) -> Sequence[Enrollment]:
        raise NotImplementedError

    def list_students(self, course_id: int) -> Sequence[int]:
        """Ids of every student enrolled in the course."""

        raise NotImplementedError
