from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .notifier import Notifier, OverrideNotification


class MySQLMessageNotifier(Notifier):
    """Drops a message into the student's inbox table; the messaging side delivers it."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def notify(self, event: OverrideNotification) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(receiver_id, sender_id, subject, content, status, created_at)
                VALUES(%s,%s,%s,%s,'pending',%s)
                """,
                (event.student_id, event.actor_id, event.subject, event.content, event.created_at),
            )
