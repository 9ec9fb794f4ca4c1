from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_user, domain_error, fail, login_required, ok, payload, staff_required
from ..container import Container
from ..core.constants import DEFAULT_DIV, DEFAULT_SEM, DEFAULT_YEAR, DIVS, SEMS, SUBJECTS, YEARS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from ..users.controller import cohort_from_args
from .model import ClassSession

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: str, default: date) -> date:
        if not value:
            return default
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"Invalid date: {value}")

    @app.route("/attendance/session", methods=["GET"], endpoint="attendance_session")
    @staff_required
    def attendance_session():
        cohort = cohort_from_args()
        try:
            roster = container.attendance_recorder.load_session_roster(cohort)
        except Exception:
            logger.exception("Error loading session roster for %s", cohort.slug())
            return fail("Error loading students", 500)

        return ok(
            cohort={"year": cohort.year, "sem": cohort.sem, "div": cohort.div},
            options={"years": list(YEARS), "sems": list(SEMS), "divs": list(DIVS)},
            subjects=list(SUBJECTS),
            students=[
                {"id": s.user_id, "name": s.name, "roll_number": s.session_key}
                for s in roster
            ],
            all_present=container.attendance_recorder.mark_all_present(roster),
        )

    @app.route("/attendance/session", methods=["POST"], endpoint="take_attendance")
    @staff_required
    def take_attendance():
        data = payload()
        try:
            session_info = ClassSession(
                year=data.get("year") or DEFAULT_YEAR,
                sem=data.get("sem") or DEFAULT_SEM,
                div=data.get("div") or DEFAULT_DIV,
                subject=(data.get("subject") or "").strip(),
                session_date=_parse_date(data.get("date", ""), date.today()),
                note=data.get("note", ""),
            )
            result = container.attendance_recorder.take_attendance(
                current_role=current_user().role,
                session=session_info,
                present_input=data.get("present", ""),
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error saving attendance")
            return fail("Error saving attendance. Please try again.", 500)

        return ok(message="Attendance saved successfully!", **result.to_dict())

    @app.route("/attendance/stats/<user_id>", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats(user_id: str):
        user = current_user()
        today = date.today()
        try:
            if user.role == Role.STUDENT and user.user_id != user_id:
                raise AuthorizationError("You can only view your own attendance")
            stats = container.attendance_aggregator.stats_for(
                user_id,
                start=_parse_date(request.args.get("start_date", ""), today.replace(day=1)),
                end=_parse_date(request.args.get("end_date", ""), today),
                subject=request.args.get("subject") or None,
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error fetching attendance stats for %s", user_id)
            return fail("Error fetching attendance statistics", 500)

        return ok(user_id=user_id, stats=stats.to_dict())
