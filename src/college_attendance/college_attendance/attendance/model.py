from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..users.model import User


@dataclass(frozen=True)
class AttendanceLog:
    """Domain entity: one student's status for one class session."""

    user_id: str
    user_name: str
    session_date: date
    status: AttendanceStatus
    subject: str
    notes: str = ""
    clock_in: str = ""
    created_at: Optional[datetime] = None
    log_id: Optional[int] = None


@dataclass(frozen=True)
class ClassSession:
    year: str
    sem: str
    div: str
    subject: str
    session_date: date
    note: str = ""


@dataclass(frozen=True)
class SessionResult:
    present: list[User] = field(default_factory=list)
    absent: list[User] = field(default_factory=list)
    written: int = 0

    def to_dict(self) -> dict:
        def _label(u: User) -> str:
            return f"{u.name} ({u.session_key})"

        return {
            "present": [_label(u) for u in self.present],
            "absent": [_label(u) for u in self.absent],
            "present_count": len(self.present),
            "absent_count": len(self.absent),
            "written": self.written,
        }


@dataclass(frozen=True)
class AttendanceStats:
    """Read-model used by dashboards and exports."""

    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    leave: int = 0
    percentage: str = "0"

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "leave": self.leave,
            "percentage": self.percentage,
        }
