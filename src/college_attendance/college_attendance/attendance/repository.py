from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import AttendanceLog


class AttendanceRepository(Protocol):
    def create_log(self, log: AttendanceLog) -> int:
        raise NotImplementedError

    def list_for_user_between(self, user_id: str, start_date: date, end_date: date) -> Sequence[AttendanceLog]:
        """Logs of one user with start_date <= session_date <= end_date."""

        raise NotImplementedError
