from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from mysql.connector import Error as MySQLError

from src.college_attendance.college_attendance.attendance.model import AttendanceLog
from src.college_attendance.college_attendance.core.enums import AccessLevel, RequestStatus, Role
from src.college_attendance.college_attendance.leaves.model import LeaveRequest
from src.college_attendance.college_attendance.users.model import Cohort, User


class InMemoryRoster:
    """Both roster collections kept in dicts; every call is recorded in `calls`."""

    def __init__(self, users=()):
        self.users: dict[str, User] = {}
        self.cohort_records: dict[str, User] = {}
        self.calls: list[str] = []
        self.cohort_unavailable = False
        self.fail_writes_for: set[str] = set()
        self._lock = threading.Lock()
        self.seed(*users)

    def seed(self, *users: User) -> "InMemoryRoster":
        for u in users:
            self.users[u.user_id] = u
            if u.role == Role.STUDENT:
                self.cohort_records[u.user_id] = u
        return self

    def _call(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)

    def list_all_users(self):
        self._call("list_all_users")
        return list(self.users.values())

    def list_all_students(self):
        self._call("list_all_students")
        return [u for u in self.users.values() if u.role == Role.STUDENT]

    def get_by_id(self, user_id: str) -> Optional[User]:
        self._call("get_by_id")
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        self._call("get_by_email")
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, user: User) -> None:
        self._call("create_user")
        if user.user_id in self.fail_writes_for:
            raise RuntimeError(f"write failed for {user.user_id}")
        with self._lock:
            self.users[user.user_id] = user

    def update_user(self, user: User) -> bool:
        self._call("update_user")
        if user.user_id not in self.users:
            return False
        self.users[user.user_id] = user
        return True

    def delete_user(self, user_id: str) -> bool:
        self._call("delete_user")
        return self.users.pop(user_id, None) is not None

    def exists_by_email(self, email: str) -> bool:
        self._call("exists_by_email")
        return any(u.email == email for u in self.users.values())

    def exists_by_roll_number(self, roll_number: str) -> bool:
        self._call("exists_by_roll_number")
        return any(u.roll_number == roll_number for u in self.users.values())

    def record_login(self, user_id: str, *, at: datetime) -> None:
        self._call("record_login")
        u = self.users[user_id]
        self.users[user_id] = replace(u, last_login=at, login_count=u.login_count + 1)

    def list_cohort_students(self, cohort: Cohort):
        self._call("list_cohort_students")
        if self.cohort_unavailable:
            raise MySQLError("cohort table unavailable")
        return [u for u in self.cohort_records.values() if u.cohort == cohort]

    def create_cohort_record(self, user: User) -> None:
        self._call("create_cohort_record")
        with self._lock:
            self.cohort_records[user.user_id] = user

    def update_cohort_record(self, user: User) -> None:
        self._call("update_cohort_record")
        with self._lock:
            self.cohort_records[user.user_id] = user

    def delete_cohort_record(self, user: User) -> None:
        self._call("delete_cohort_record")
        self.cohort_records.pop(user.user_id, None)


class InMemoryAttendance:
    def __init__(self, logs=()):
        self.logs: list[AttendanceLog] = list(logs)
        self.fail_writes_for: set[str] = set()
        self.fail_reads_for: set[str] = set()
        self._lock = threading.Lock()

    def create_log(self, log: AttendanceLog) -> int:
        if log.user_id in self.fail_writes_for:
            raise RuntimeError(f"write failed for {log.user_id}")
        with self._lock:
            log_id = len(self.logs) + 1
            self.logs.append(replace(log, log_id=log_id))
        return log_id

    def list_for_user_between(self, user_id: str, start_date: date, end_date: date):
        if user_id in self.fail_reads_for:
            raise RuntimeError(f"read failed for {user_id}")
        return [
            log
            for log in self.logs
            if log.user_id == user_id and start_date <= log.session_date <= end_date
        ]


class InMemoryLeaves:
    def __init__(self):
        self.items: dict[int, LeaveRequest] = {}

    def create_leave(self, *, user_id, start_date, end_date, reason):
        rid = len(self.items) + 1
        self.items[rid] = LeaveRequest(
            request_id=rid,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=datetime(2026, 3, 1, 9, 0, 0),
        )
        return rid

    def get_leave(self, *, request_id):
        return self.items.get(int(request_id))

    def list_leaves(self, *, status=None, user_id=None, limit=200):
        out = [
            r
            for r in self.items.values()
            if (status is None or r.status == status) and (user_id is None or r.user_id == user_id)
        ]
        return out[:limit]

    def decide_leave(self, *, request_id, status, decided_by, reviewer_note=None):
        req = self.items.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.items[int(request_id)] = replace(
            req,
            status=status,
            decided_by=decided_by,
            decided_at=datetime(2026, 3, 2, 10, 0, 0),
            reviewer_note=reviewer_note,
        )
        return True


def make_student(
    user_id: str,
    name: str,
    roll_number: str,
    *,
    year: str = "2nd",
    sem: str = "3",
    div: str = "A",
    department: str = "Computer Science",
    gender: str = "",
    is_active: bool = True,
    email: Optional[str] = None,
) -> User:
    return User(
        user_id=user_id,
        name=name,
        email=email or f"{user_id}@college.edu",
        role=Role.STUDENT,
        roll_number=roll_number,
        year=year,
        sem=sem,
        div=div,
        department=department,
        gender=gender,
        access_level=AccessLevel.BASIC,
        is_active=is_active,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 15, 9, 30, 0)


@pytest.fixture
def student():
    return make_student


@pytest.fixture
def roster_repo():
    return InMemoryRoster()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def leaves_repo():
    return InMemoryLeaves()
