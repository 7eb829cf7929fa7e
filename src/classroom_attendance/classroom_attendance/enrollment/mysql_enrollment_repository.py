from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Enrollment
from .repository import EnrollmentRepository


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_enrolled(self, student_id: int, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM enrollments WHERE student_id=%s AND course_id=%s",
                (int(student_id), int(course_id)),
            )
            return fetchone(cur) is not None

    def list_enrollments(self, student_id: int) -> Sequence[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, course_id, enrolled_at
                FROM enrollments
                WHERE student_id=%s
                ORDER BY course_id
                """,
                (int(student_id),),
            )
            return [
                Enrollment(
                    student_id=int(r["student_id"]),
                    course_id=int(r["course_id"]),
                    enrolled_at=r.get("enrolled_at"),
                )
                for r in fetchall(cur)
            ]

    def list_students(self, course_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM enrollments WHERE course_id=%s ORDER BY student_id",
                (int(course_id),),
            )
            return [int(r["student_id"]) for r in fetchall(cur)]
