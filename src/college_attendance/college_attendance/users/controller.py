from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import current_user, domain_error, fail, ok, payload, staff_required
from ..container import Container
from ..core.constants import DEFAULT_DIV, DEFAULT_SEM, DEFAULT_YEAR
from ..core.exceptions import DomainError
from .model import Cohort, StudentForm, User

logger = logging.getLogger(__name__)


def student_to_dict(s: User) -> dict:
    return {
        "id": s.user_id,
        "name": s.name,
        "email": s.email,
        "phone": s.phone,
        "gender": s.gender,
        "roll_number": s.roll_number,
        "year": s.year,
        "sem": s.sem,
        "div": s.div,
        "department": s.department,
        "status": s.status_label,
        "created_at": s.created_at.isoformat() if s.created_at else None,
        "last_login": s.last_login.isoformat() if s.last_login else None,
        "login_count": s.login_count,
    }


def cohort_from_args() -> Cohort:
    return Cohort(
        year=request.args.get("year") or DEFAULT_YEAR,
        sem=request.args.get("sem") or DEFAULT_SEM,
        div=request.args.get("div") or DEFAULT_DIV,
    )


def register(app: Flask, container: Container) -> None:
    def _department() -> str:
        return session.get("department") or app.config["DEFAULT_DEPARTMENT"]

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        try:
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Login failed")
            return fail("Login failed due to a server error", 500)

        session.clear()
        session.update(s_user.to_session())
        return ok(user=s_user.to_session())

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/students", methods=["GET"], endpoint="list_students")
    @staff_required
    def list_students():
        cohort = cohort_from_args()
        try:
            students = container.roster_service.list_cohort(department=_department(), cohort=cohort)
        except Exception:
            logger.exception("Error loading students for %s", cohort.slug())
            return fail("Error loading students", 500)

        filtered = container.roster_service.search(students, request.args.get("q", ""))
        return ok(
            cohort={"year": cohort.year, "sem": cohort.sem, "div": cohort.div},
            summary=container.roster_service.cohort_summary(students),
            students=[student_to_dict(s) for s in filtered],
        )

    @app.route("/students", methods=["POST"], endpoint="add_student")
    @staff_required
    def add_student():
        form = StudentForm.from_mapping(payload(), default_department=_department())
        try:
            student = container.roster_service.add_student(current_role=current_user().role, form=form)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error adding student")
            return fail("Error adding student. Please try again.", 500)
        return ok(201, message="Student added successfully!", student=student_to_dict(student))

    @app.route("/students/<user_id>", methods=["POST"], endpoint="update_student")
    @staff_required
    def update_student(user_id: str):
        form = StudentForm.from_mapping(payload(), default_department=_department())
        try:
            student = container.roster_service.update_student(
                current_role=current_user().role,
                user_id=user_id,
                form=form,
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error updating student %s", user_id)
            return fail("Error updating student. Please try again.", 500)
        return ok(message="Student updated successfully!", student=student_to_dict(student))

    @app.route("/students/<user_id>/delete", methods=["POST"], endpoint="delete_student")
    @staff_required
    def delete_student(user_id: str):
        try:
            student = container.roster_service.delete_student(current_role=current_user().role, user_id=user_id)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error deleting student %s", user_id)
            return fail("Error deleting student. Please try again.", 500)
        return ok(message=f"Student {student.name} deleted successfully!")
