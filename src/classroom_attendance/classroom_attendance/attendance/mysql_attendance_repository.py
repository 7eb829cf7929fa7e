from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus, RecordMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, in_clause, load_json
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, session_id, student_id, status, check_in_time, method, evidence,
    is_manual_override, note, created_at, updated_at
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        method=RecordMethod(r["method"]),
        evidence=load_json(r.get("evidence")) or {},
        is_manual_override=bool(r.get("is_manual_override")),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_session_and_student(self, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s AND student_id=%s",
                (int(session_id), int(student_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_record(self, record: NewAttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    session_id, student_id, status, check_in_time, method, evidence,
                    is_manual_override, note, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.session_id,
                    record.student_id,
                    record.status.value,
                    record.check_in_time,
                    record.method.value,
                    dump_json(dict(record.evidence)),
                    int(record.is_manual_override),
                    record.note,
                    record.created_at,
                    record.created_at,
                ),
            )
            record_id = int(cur.lastrowid)

        return AttendanceRecord(
            record_id=record_id,
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

    def list_for_sessions(self, session_ids: Iterable[int]) -> Sequence[AttendanceRecord]:
        ids = sorted({int(s) for s in session_ids})
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_recent_for_student(self, student_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY created_at DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def update_override(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        updated_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, is_manual_override=1, note=COALESCE(%s, note), updated_at=%s
                WHERE record_id=%s
                """,
                (status.value, note, updated_at, int(record_id)),
            )
            return cur.rowcount > 0
