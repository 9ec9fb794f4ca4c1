from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from mysql.connector import Error as MySQLError
from werkzeug.security import check_password_hash

from ..common.batch import run_all
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_roll_number
from ..core.constants import DEFAULT_WRITE_WORKERS
from ..core.enums import AccessLevel, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateError,
    NotFoundError,
)
from .model import Cohort, StudentForm, User
from .repository import RosterRepository

logger = logging.getLogger(__name__)

STAFF_ROLES = frozenset({Role.TEACHER, Role.HOD})


def require_staff(current_role: Role) -> None:
    if current_role not in STAFF_ROLES:
        raise AuthorizationError("Only teachers and HODs can manage students")


def new_student_id(roll_number: str) -> str:
    return f"student_{roll_number}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: str
    name: str
    email: str
    role: Role
    access_level: AccessLevel
    department: str
    year: str = ""
    sem: str = ""
    div: str = ""

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "access_level": self.access_level.value,
            "department": self.department,
            "year": self.year,
            "sem": self.sem,
            "div": self.div,
        }

    @classmethod
    def from_session(cls, data: dict) -> "SessionUser":
        return cls(
            user_id=str(data["user_id"]),
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=Role(data["role"]),
            access_level=AccessLevel(data.get("access_level", AccessLevel.BASIC.value)),
            department=data.get("department", ""),
            year=data.get("year", ""),
            sem=data.get("sem", ""),
            div=data.get("div", ""),
        )


class AuthService:
    """Use case: authenticate a user (login) and keep login audit fields."""

    def __init__(self, users: RosterRepository, *, clock: Callable[[], datetime] = now_local):
        self._users = users
        self._clock = clock

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip())
        if not user or not user.is_active or not user.password_hash:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        self._users.record_login(user.user_id, at=self._clock())
        logger.info("User %s logged in", user.user_id)

        return SessionUser(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            access_level=user.access_level,
            department=user.department,
            year=user.year,
            sem=user.sem,
            div=user.div,
        )


class RosterService:
    """Use case: manage the student roster of a department."""

    def __init__(
        self,
        roster: RosterRepository,
        *,
        max_workers: int = DEFAULT_WRITE_WORKERS,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[str], str] = new_student_id,
    ):
        self._roster = roster
        self._max_workers = int(max_workers)
        self._clock = clock
        self._id_factory = id_factory

    # Queries

    def list_cohort(self, *, department: str, cohort: Cohort) -> list[User]:
        try:
            students = list(self._roster.list_cohort_students(cohort))
        except MySQLError:
            logger.warning("Cohort collection unavailable for %s, using flat collection", cohort.slug(), exc_info=True)
            students = [
                s
                for s in self._roster.list_all_students()
                if s.department == department and s.cohort == cohort
            ]
        return [s for s in students if s.role == Role.STUDENT]

    @staticmethod
    def search(students: Iterable[User], term: str) -> list[User]:
        needle = (term or "").strip().lower()
        if not needle:
            return [s for s in students if s.role == Role.STUDENT]
        return [
            s
            for s in students
            if s.role == Role.STUDENT
            and (
                needle in s.name.lower()
                or needle in s.email.lower()
                or (s.roll_number and needle in s.roll_number.lower())
            )
        ]

    @staticmethod
    def cohort_summary(students: Sequence[User]) -> dict:
        return {
            "total": len(students),
            "active": sum(1 for s in students if s.is_active),
            "male": sum(1 for s in students if s.gender == "Male"),
            "female": sum(1 for s in students if s.gender == "Female"),
        }

    def get_student(self, user_id: str) -> User:
        user = self._roster.get_by_id(user_id)
        if not user or user.role != Role.STUDENT:
            raise NotFoundError("Student not found")
        return user

    # Commands

    def build_student(self, form: StudentForm, *, user_id: Optional[str] = None) -> User:
        """Validate the form and turn it into a student entity (no store calls)."""

        name = require_non_empty(form.name, "Name")
        email = require_non_empty(form.email, "Email")
        roll = require_roll_number(form.roll_number)

        return User(
            user_id=user_id or self._id_factory(roll),
            name=name,
            email=email,
            role=Role.STUDENT,
            phone=form.phone or "",
            gender=form.gender or "",
            roll_number=roll,
            year=form.year,
            sem=form.sem,
            div=form.div,
            department=form.department,
            access_level=AccessLevel.BASIC,
            is_active=bool(form.is_active),
            created_at=self._clock(),
            last_login=None,
            login_count=0,
        )

    def add_student(self, *, current_role: Role, form: StudentForm) -> User:
        require_staff(current_role)
        student = self.build_student(replace(form, is_active=True))

        if self._roster.exists_by_email(student.email):
            raise DuplicateError("A student with this email already exists.")
        if self._roster.exists_by_roll_number(student.roll_number):
            raise DuplicateError("A student with this roll number already exists.")

        self._roster.create_user(student)
        self._roster.create_cohort_record(student)
        logger.info("Student %s added to %s", student.user_id, student.cohort.slug())
        return student

    def update_student(self, *, current_role: Role, user_id: str, form: StudentForm) -> User:
        require_staff(current_role)
        draft = self.build_student(form, user_id=user_id)
        existing = self.get_student(user_id)

        updated = replace(
            draft,
            created_at=existing.created_at,
            last_login=existing.last_login,
            login_count=existing.login_count,
            password_hash=existing.password_hash,
        )
        self._roster.update_user(updated)
        self._roster.update_cohort_record(updated)
        logger.info("Student %s updated", user_id)
        return updated

    def delete_student(self, *, current_role: Role, user_id: str) -> User:
        require_staff(current_role)
        student = self.get_student(user_id)
        self._roster.delete_user(student.user_id)
        self._roster.delete_cohort_record(student)
        logger.info("Student %s deleted", user_id)
        return student

    def bulk_create(self, students: Sequence[User]) -> int:
        """Write every student to both collections concurrently."""

        tasks: list[Callable[[], None]] = []
        for s in students:
            tasks.append(lambda s=s: self._roster.create_user(s))
            tasks.append(lambda s=s: self._roster.create_cohort_record(s))
        run_all(tasks, max_workers=self._max_workers)
        return len(students)
