from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.batch import run_all
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_WRITE_WORKERS
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from ..users.model import Cohort, User
from ..users.repository import RosterRepository
from ..users.service import require_staff
from .model import AttendanceLog, AttendanceStats, ClassSession, SessionResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_ROLL_SEPARATORS = re.compile(r"[\s,]+")


def parse_roll_list(text: str) -> list[str]:
    """Split a comma/whitespace separated list of roll numbers."""

    return [part.strip() for part in _ROLL_SEPARATORS.split(text or "") if part.strip()]


class AttendanceRecorder:
    """Use case: take attendance for one class session."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        *,
        max_workers: int = DEFAULT_WRITE_WORKERS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._roster = roster
        self._max_workers = int(max_workers)
        self._clock = clock

    def load_session_roster(self, cohort: Cohort) -> list[User]:
        return [
            u
            for u in self._roster.list_all_users()
            if u.role == Role.STUDENT and u.cohort == cohort
        ]

    @staticmethod
    def mark_all_present(roster: Iterable[User]) -> str:
        return ",".join(u.session_key for u in roster)

    @staticmethod
    def partition(roster: Sequence[User], present_rolls: Iterable[str]) -> tuple[list[User], list[User]]:
        wanted = set(present_rolls)
        present = [u for u in roster if u.session_key in wanted]
        absent = [u for u in roster if u.session_key not in wanted]
        return present, absent

    def take_attendance(
        self,
        *,
        current_role: Role,
        session: ClassSession,
        present_input: str,
        roster: Optional[Sequence[User]] = None,
    ) -> SessionResult:
        require_staff(current_role)
        subject = require_non_empty(session.subject, "Subject")

        if roster is None:
            roster = self.load_session_roster(Cohort(year=session.year, sem=session.sem, div=session.div))

        present, absent = self.partition(roster, parse_roll_list(present_input))
        present_ids = {u.user_id for u in present}
        created_at = self._clock()

        logs = [
            AttendanceLog(
                user_id=u.user_id,
                user_name=u.name,
                session_date=session.session_date,
                status=AttendanceStatus.PRESENT if u.user_id in present_ids else AttendanceStatus.ABSENT,
                subject=subject,
                notes=session.note or "",
                clock_in="",
                created_at=created_at,
            )
            for u in roster
        ]

        run_all([lambda log=log: self._attendance.create_log(log) for log in logs], max_workers=self._max_workers)
        logger.info(
            "Attendance saved for %s/%s/%s %s on %s: %d present, %d absent",
            session.year,
            session.sem,
            session.div,
            subject,
            session.session_date.isoformat(),
            len(present),
            len(absent),
        )
        return SessionResult(present=present, absent=absent, written=len(logs))


class AttendanceAggregator:
    """Use case: attendance statistics of one student over a date range."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    @staticmethod
    def summarize(logs: Iterable[AttendanceLog], *, subject: Optional[str] = None) -> AttendanceStats:
        selected = [log for log in logs if subject is None or log.subject == subject]
        total = len(selected)

        def _count(status: AttendanceStatus) -> int:
            return sum(1 for log in selected if log.status == status)

        present = _count(AttendanceStatus.PRESENT)
        late = _count(AttendanceStatus.LATE)
        percentage = f"{(present + late) / total * 100:.2f}" if total > 0 else "0"

        return AttendanceStats(
            total=total,
            present=present,
            absent=_count(AttendanceStatus.ABSENT),
            late=late,
            leave=_count(AttendanceStatus.LEAVE),
            percentage=percentage,
        )

    def stats_for(
        self,
        user_id: str,
        *,
        start: date,
        end: date,
        subject: Optional[str] = None,
    ) -> AttendanceStats:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        logs = self._attendance.list_for_user_between(user_id, start, end)
        return self.summarize(logs, subject=subject)
