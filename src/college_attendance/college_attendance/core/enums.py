from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for route authorization."""

    STUDENT = "student"
    TEACHER = "teacher"
    HOD = "hod"


class AccessLevel(str, Enum):
    BASIC = "basic"
    FULL = "full"


class AttendanceStatus(str, Enum):
    """Status stored on every attendance log."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    LEAVE = "leave"


class RequestStatus(str, Enum):
    """Review state of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExportType(str, Enum):
    BASIC = "basic"
    MONTHLY = "monthly"
    CUSTOM = "custom"
    SUBJECT = "subject"
