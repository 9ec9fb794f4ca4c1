from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_DIV, DEFAULT_SEM, DEFAULT_YEAR
from ..core.enums import AccessLevel, Role


@dataclass(frozen=True)
class Cohort:
    """(year, semester, division) grouping used to partition students."""

    year: str = DEFAULT_YEAR
    sem: str = DEFAULT_SEM
    div: str = DEFAULT_DIV

    def slug(self) -> str:
        return f"{self.year}_{self.sem}_{self.div}"


@dataclass(frozen=True)
class User:
    """Domain entity: a student, teacher or HOD.

    Pure data object; persistence lives in the repositories.
    """

    user_id: str
    name: str
    email: str
    role: Role
    phone: str = ""
    gender: str = ""
    roll_number: str = ""
    year: str = ""
    sem: str = ""
    div: str = ""
    department: str = ""
    access_level: AccessLevel = AccessLevel.BASIC
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    login_count: int = 0
    password_hash: Optional[str] = None

    @property
    def cohort(self) -> Cohort:
        return Cohort(year=self.year, sem=self.sem, div=self.div)

    @property
    def session_key(self) -> str:
        """Identifier matched against a teacher's present list."""
        return self.roll_number or self.user_id

    @property
    def status_label(self) -> str:
        return "Active" if self.is_active else "Inactive"


@dataclass(frozen=True)
class StudentForm:
    """Raw roster input coming from the add/edit form or an import row."""

    name: str = ""
    email: str = ""
    roll_number: str = ""
    phone: str = ""
    gender: str = ""
    year: str = DEFAULT_YEAR
    sem: str = DEFAULT_SEM
    div: str = DEFAULT_DIV
    department: str = ""
    is_active: bool = True

    @classmethod
    def from_mapping(cls, data: dict, *, default_department: str = "") -> "StudentForm":
        def _s(key: str, default: str = "") -> str:
            value = data.get(key)
            return str(value).strip() if value not in (None, "") else default

        active = data.get("is_active", True)
        if isinstance(active, str):
            active = active.strip().lower() not in {"0", "false", "no", "off", "inactive"}

        return cls(
            name=_s("name"),
            email=_s("email"),
            roll_number=_s("roll_number") or _s("rollNumber"),
            phone=_s("phone"),
            gender=_s("gender"),
            year=_s("year", DEFAULT_YEAR),
            sem=_s("sem", DEFAULT_SEM),
            div=_s("div", DEFAULT_DIV),
            department=_s("department", default_department),
            is_active=bool(active),
        )
