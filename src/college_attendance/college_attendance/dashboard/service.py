from __future__ import annotations

import logging
from datetime import date

from ..attendance.service import AttendanceAggregator
from ..core.enums import AccessLevel, Role
from ..leaves.service import LeaveService
from ..users.model import Cohort
from ..users.service import RosterService, SessionUser

logger = logging.getLogger(__name__)


class DashboardService:
    """Builds the role-specific dashboard payload after login."""

    def __init__(self, roster: RosterService, aggregator: AttendanceAggregator, leaves: LeaveService):
        self._roster = roster
        self._aggregator = aggregator
        self._leaves = leaves

    def for_user(self, user: SessionUser, today: date) -> dict:
        if user.role == Role.STUDENT:
            return self._student(user, today)
        return self._staff(user)

    def _student(self, user: SessionUser, today: date) -> dict:
        month_start = today.replace(day=1)
        stats = self._aggregator.stats_for(user.user_id, start=month_start, end=today)
        return {
            "role": user.role.value,
            "name": user.name,
            "month": month_start.strftime("%Y-%m"),
            "attendance": stats.to_dict(),
            "leaves": [r.to_dict() for r in self._leaves.list_mine(user_id=user.user_id)],
        }

    def _staff(self, user: SessionUser) -> dict:
        cohort = Cohort()
        students = self._roster.list_cohort(department=user.department, cohort=cohort)
        pending = list(self._leaves.list_pending())

        data = {
            "role": user.role.value,
            "name": user.name,
            "department": user.department,
            "cohort": {"year": cohort.year, "sem": cohort.sem, "div": cohort.div},
            "summary": self._roster.cohort_summary(students),
            "pending_leaves": len(pending),
        }
        if user.role == Role.HOD or user.access_level == AccessLevel.FULL:
            data["pending_leave_requests"] = [r.to_dict() for r in pending]
        return data
