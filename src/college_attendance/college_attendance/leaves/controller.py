from __future__ import annotations

import logging

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_user, domain_error, fail, login_required, ok, payload, staff_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/leaves", methods=["GET"], endpoint="list_leaves")
    @login_required
    def list_leaves():
        user = current_user()
        if user.role == Role.STUDENT:
            items = container.leave_service.list_mine(user_id=user.user_id)
        else:
            items = container.leave_service.list_pending()
        return ok(leaves=[r.to_dict() for r in items])

    @app.route("/leaves", methods=["POST"], endpoint="apply_leave")
    @login_required
    def apply_leave():
        data = payload()
        user = current_user()
        try:
            try:
                start_date = parse_iso_date(data.get("start_date") or "")
                end_date = parse_iso_date(data.get("end_date") or "")
            except ValueError:
                raise ValidationError("Start and end dates must be in YYYY-MM-DD format")

            request_id = container.leave_service.apply(
                current_role=user.role,
                user_id=user.user_id,
                start_date=start_date,
                end_date=end_date,
                reason=data.get("reason", ""),
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error submitting leave request")
            return fail("Error submitting leave request", 500)
        return ok(201, message="Leave request submitted", request_id=request_id)

    @app.route("/leaves/<int:request_id>/approve", methods=["POST"], endpoint="approve_leave")
    @staff_required
    def approve_leave(request_id: int):
        user = current_user()
        try:
            container.leave_service.approve(
                current_role=user.role,
                reviewer_id=user.user_id,
                request_id=request_id,
                note=payload().get("note", ""),
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error approving leave request %s", request_id)
            return fail("Error approving leave request", 500)
        return ok(message="Leave request approved")

    @app.route("/leaves/<int:request_id>/reject", methods=["POST"], endpoint="reject_leave")
    @staff_required
    def reject_leave(request_id: int):
        user = current_user()
        try:
            container.leave_service.reject(
                current_role=user.role,
                reviewer_id=user.user_id,
                request_id=request_id,
                note=payload().get("note", ""),
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error rejecting leave request %s", request_id)
            return fail("Error rejecting leave request", 500)
        return ok(message="Leave request rejected")
