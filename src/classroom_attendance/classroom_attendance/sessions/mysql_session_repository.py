from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import VerificationMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json, normalize_mysql_time
from .model import GeofenceConfig, NetworkConfig, Session, SessionToken
from .repository import SessionRepository

# The session row and its current token come from one statement, so readers
# see either the token before a rotation or the one after it.
_SELECT = """
    SELECT
        cs.session_id, cs.course_id, cs.instructor_id, cs.title, cs.session_date,
        cs.start_time, cs.end_time, cs.method, cs.geo_latitude, cs.geo_longitude,
        cs.geo_radius_m, cs.allowed_ranges, cs.is_active,
        st.token_value, st.serial, st.issued_at, st.expires_at
    FROM class_sessions cs
    LEFT JOIN session_tokens st
        ON st.session_id = cs.session_id AND st.superseded_at IS NULL
"""


def _to_session(r: Dict[str, Any]) -> Session:
    method = VerificationMethod(r["method"])

    geofence = None
    if r.get("geo_latitude") is not None and r.get("geo_radius_m") is not None:
        geofence = GeofenceConfig(
            latitude=float(r["geo_latitude"]),
            longitude=float(r["geo_longitude"]),
            radius_meters=float(r["geo_radius_m"]),
        )

    network = None
    ranges = load_json(r.get("allowed_ranges"))
    if ranges:
        network = NetworkConfig(allowed_ranges=list(ranges))

    token = None
    if r.get("token_value"):
        token = SessionToken(
            session_id=int(r["session_id"]),
            value=r["token_value"],
            serial=int(r["serial"]),
            issued_at=r["issued_at"],
            expires_at=r["expires_at"],
        )

    return Session(
        session_id=int(r["session_id"]),
        course_id=int(r["course_id"]),
        instructor_id=int(r["instructor_id"]),
        title=r.get("title") or "",
        session_date=r["session_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        method=method,
        geofence=geofence,
        network=network,
        is_active=bool(r.get("is_active", True)),
        current_token=token,
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE cs.session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_active_for_course(self, course_id: int, session_date: date) -> Sequence[Session]:
        return self._list(
            "cs.course_id=%s AND cs.session_date=%s AND cs.is_active=1",
            (int(course_id), session_date),
        )

    def list_for_date(self, session_date: date) -> Sequence[Session]:
        return self._list("cs.session_date=%s", (session_date,))

    def list_for_course(self, course_id: int) -> Sequence[Session]:
        return self._list("cs.course_id=%s", (int(course_id),))

    def list_in_range(self, start: Optional[date], end: Optional[date]) -> Sequence[Session]:
        clauses = ["1=1"]
        params: list[object] = []
        if start is not None:
            clauses.append("cs.session_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("cs.session_date <= %s")
            params.append(end)
        return self._list(" AND ".join(clauses), tuple(params))

    def _list(self, where: str, params: tuple) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY cs.session_date ASC, cs.start_time ASC, cs.session_id ASC",
                params,
            )
            return [_to_session(r) for r in fetchall(cur)]
