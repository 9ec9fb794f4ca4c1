from __future__ import annotations

from datetime import date, datetime
from typing import Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceLog
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_log(self, log: AttendanceLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_logs(user_id, user_name, session_date, status, subject, notes, clock_in, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    log.user_id,
                    log.user_name,
                    log.session_date,
                    log.status.value,
                    log.subject,
                    log.notes,
                    log.clock_in,
                    log.created_at or datetime.now(),
                ),
            )
            return int(cur.lastrowid)

    def list_for_user_between(self, user_id: str, start_date: date, end_date: date) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, user_id, user_name, session_date, status, subject, notes, clock_in, created_at
                FROM attendance_logs
                WHERE user_id=%s AND session_date BETWEEN %s AND %s
                ORDER BY session_date ASC, log_id ASC
                """,
                (user_id, start_date, end_date),
            )
            return [
                AttendanceLog(
                    log_id=int(r["log_id"]),
                    user_id=str(r["user_id"]),
                    user_name=r["user_name"],
                    session_date=r["session_date"],
                    status=AttendanceStatus(r["status"]),
                    subject=r.get("subject") or "",
                    notes=r.get("notes") or "",
                    clock_in=r.get("clock_in") or "",
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
