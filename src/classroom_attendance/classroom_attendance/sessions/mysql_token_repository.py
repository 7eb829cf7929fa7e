from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SessionToken
from .repository import SessionTokenRepository

_COLUMNS = "session_id, token_value, serial, issued_at, expires_at, superseded_at"


def _to_token(r: Dict[str, Any]) -> SessionToken:
    return SessionToken(
        session_id=int(r["session_id"]),
        value=r["token_value"],
        serial=int(r["serial"]),
        issued_at=r["issued_at"],
        expires_at=r["expires_at"],
        superseded_at=r.get("superseded_at"),
    )


class MySQLSessionTokenRepository(SessionTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_current(self, session_id: int) -> Optional[SessionToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM session_tokens WHERE session_id=%s AND superseded_at IS NULL",
                (int(session_id),),
            )
            r = fetchone(cur)
            return _to_token(r) if r else None

    def find_by_value(self, session_id: int, value: str) -> Optional[SessionToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM session_tokens WHERE session_id=%s AND token_value=%s",
                (int(session_id), value),
            )
            r = fetchone(cur)
            return _to_token(r) if r else None

    def get_history(self, session_id: int) -> Sequence[SessionToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM session_tokens WHERE session_id=%s ORDER BY serial ASC",
                (int(session_id),),
            )
            return [_to_token(r) for r in fetchall(cur)]

    def save_rotation(self, token: SessionToken, *, superseded_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            # Lock the session row so concurrent rotations from other processes queue up.
            cur.execute("SELECT session_id FROM class_sessions WHERE session_id=%s FOR UPDATE", (token.session_id,))
            fetchone(cur)
            cur.execute(
                """
                UPDATE session_tokens
                SET superseded_at=%s
                WHERE session_id=%s AND superseded_at IS NULL
                """,
                (superseded_at, token.session_id),
            )
            cur.execute(
                """
                INSERT INTO session_tokens(session_id, token_value, serial, issued_at, expires_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (token.session_id, token.value, token.serial, token.issued_at, token.expires_at),
            )
