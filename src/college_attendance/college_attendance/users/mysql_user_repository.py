from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AccessLevel, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Cohort, User
from .repository import RosterRepository

_USER_COLUMNS = """
    user_id, name, email, phone, gender, roll_number, year, sem, `div`, department,
    role, access_level, is_active, password_hash, created_at, last_login, login_count
"""

_COHORT_COLUMNS = """
    user_id, name, email, phone, gender, roll_number, year, sem, `div`, department,
    role, access_level, is_active, created_at
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        name=row["name"],
        email=row["email"],
        role=Role(row["role"]),
        phone=row.get("phone") or "",
        gender=row.get("gender") or "",
        roll_number=row.get("roll_number") or "",
        year=row.get("year") or "",
        sem=row.get("sem") or "",
        div=row.get("div") or "",
        department=row.get("department") or "",
        access_level=AccessLevel(row.get("access_level") or AccessLevel.BASIC.value),
        is_active=as_bool(row.get("is_active"), default=True),
        created_at=row.get("created_at"),
        last_login=row.get("last_login"),
        login_count=int(row.get("login_count") or 0),
        password_hash=row.get("password_hash"),
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_users(self, where: str = "", params: tuple = ()) -> list[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users {where} ORDER BY roll_number, name", params)
            return [_to_user(r) for r in fetchall(cur)]

    def list_all_users(self) -> Sequence[User]:
        return self._select_users()

    def list_all_students(self) -> Sequence[User]:
        return self._select_users("WHERE role=%s", (Role.STUDENT.value,))

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s LIMIT 1", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, name, email, phone, gender, roll_number, year, sem, `div`,
                                  department, role, access_level, is_active, password_hash,
                                  created_at, last_login, login_count)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.user_id, user.name, user.email, user.phone, user.gender, user.roll_number,
                    user.year, user.sem, user.div, user.department, user.role.value,
                    user.access_level.value, int(user.is_active), user.password_hash,
                    user.created_at or datetime.now(), user.last_login, int(user.login_count),
                ),
            )

    def update_user(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, email=%s, phone=%s, gender=%s, roll_number=%s, year=%s, sem=%s, `div`=%s,
                    department=%s, role=%s, access_level=%s, is_active=%s
                WHERE user_id=%s
                """,
                (
                    user.name, user.email, user.phone, user.gender, user.roll_number, user.year,
                    user.sem, user.div, user.department, user.role.value, user.access_level.value,
                    int(user.is_active), user.user_id,
                ),
            )
            return cur.rowcount > 0

    def delete_user(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def exists_by_email(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE email=%s LIMIT 1", (email,))
            return fetchone(cur) is not None

    def exists_by_roll_number(self, roll_number: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE roll_number=%s LIMIT 1", (roll_number,))
            return fetchone(cur) is not None

    def record_login(self, user_id: str, *, at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET last_login=%s, login_count=login_count+1 WHERE user_id=%s",
                (at, user_id),
            )

    def list_cohort_students(self, cohort: Cohort) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COHORT_COLUMNS}
                FROM cohort_students
                WHERE year=%s AND sem=%s AND `div`=%s
                ORDER BY roll_number
                """,
                (cohort.year, cohort.sem, cohort.div),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def _upsert_cohort_record(self, cur, user: User) -> None:
        cur.execute(
            """
            INSERT INTO cohort_students(year, sem, `div`, roll_number, user_id, name, email, phone,
                                        gender, department, role, access_level, is_active, created_at)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                year=VALUES(year), sem=VALUES(sem), `div`=VALUES(`div`), roll_number=VALUES(roll_number),
                name=VALUES(name), email=VALUES(email), phone=VALUES(phone), gender=VALUES(gender),
                department=VALUES(department), role=VALUES(role), access_level=VALUES(access_level),
                is_active=VALUES(is_active)
            """,
            (
                user.year, user.sem, user.div, user.roll_number, user.user_id, user.name, user.email,
                user.phone, user.gender, user.department, user.role.value, user.access_level.value,
                int(user.is_active), user.created_at or datetime.now(),
            ),
        )

    def create_cohort_record(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._upsert_cohort_record(cur, user)

    def update_cohort_record(self, user: User) -> None:
        # Keyed by user id: a cohort or roll number change moves the record.
        with db_cursor(self._conn_factory) as (_, cur):
            self._upsert_cohort_record(cur, user)

    def delete_cohort_record(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cohort_students WHERE user_id=%s", (user.user_id,))
