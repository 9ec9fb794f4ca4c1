from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LEAVE_LIST_LIMIT
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.service import STAFF_ROLES
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def apply(self, *, current_role: Role, user_id: str, start_date: date, end_date: date, reason: str) -> int:
        if current_role != Role.STUDENT:
            raise AuthorizationError("Only students can apply for leave")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")

        reason = require_non_empty(reason, "Reason")
        request_id = self._leaves.create_leave(
            user_id=str(user_id),
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        logger.info("Leave request %s created by %s", request_id, user_id)
        return request_id

    def _decide(self, *, current_role: Role, reviewer_id: str, request_id: int, status: RequestStatus, note: str) -> None:
        if current_role not in STAFF_ROLES:
            raise AuthorizationError("You are not allowed to review leave requests")

        req = self._leaves.get_leave(request_id=int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Leave request has already been decided")

        ok = self._leaves.decide_leave(
            request_id=int(request_id),
            status=status,
            decided_by=str(reviewer_id),
            reviewer_note=(note or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Leave request has already been decided")
        logger.info("Leave request %s %s by %s", request_id, status.value.lower(), reviewer_id)

    def approve(self, *, current_role: Role, reviewer_id: str, request_id: int, note: str = "") -> None:
        self._decide(
            current_role=current_role,
            reviewer_id=reviewer_id,
            request_id=request_id,
            status=RequestStatus.APPROVED,
            note=note,
        )

    def reject(self, *, current_role: Role, reviewer_id: str, request_id: int, note: str = "") -> None:
        self._decide(
            current_role=current_role,
            reviewer_id=reviewer_id,
            request_id=request_id,
            status=RequestStatus.REJECTED,
            note=note,
        )

    def list_mine(self, *, user_id: str) -> Sequence[LeaveRequest]:
        return self._leaves.list_leaves(user_id=str(user_id), limit=DEFAULT_LEAVE_LIST_LIMIT)

    def list_pending(self) -> Sequence[LeaveRequest]:
        return self._leaves.list_leaves(status=RequestStatus.PENDING, limit=DEFAULT_LEAVE_LIST_LIMIT)
