from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, role, department, is_approved
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return User(
                user_id=int(row["user_id"]),
                full_name=row["full_name"],
                email=row["email"],
                role=Role(row["role"]),
                department=row.get("department"),
                is_approved=bool(row.get("is_approved", True)),
            )

    def departments_for(self, user_ids: Iterable[int]) -> Mapping[int, Optional[str]]:
        ids = sorted({int(u) for u in user_ids})
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT user_id, department FROM users WHERE user_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            found = {int(r["user_id"]): r.get("department") for r in fetchall(cur)}
        return {uid: found.get(uid) for uid in ids}

    def get_department(self, user_id: int) -> Optional[str]:
        user = self.get_by_id(user_id)
        return user.department if user else None
