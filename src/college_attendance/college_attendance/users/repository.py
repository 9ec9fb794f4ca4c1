from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Cohort, User


class RosterRepository(Protocol):
    """Repository interface for users and the cohort-organised student copy."""

    # Flat collection
    def list_all_users(self) -> Sequence[User]:
        raise NotImplementedError

    def list_all_students(self) -> Sequence[User]:
        raise NotImplementedError

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, user: User) -> None:
        raise NotImplementedError

    def update_user(self, user: User) -> bool:
        raise NotImplementedError

    def delete_user(self, user_id: str) -> bool:
        raise NotImplementedError

    def exists_by_email(self, email: str) -> bool:
        raise NotImplementedError

    def exists_by_roll_number(self, roll_number: str) -> bool:
        raise NotImplementedError

    def record_login(self, user_id: str, *, at: datetime) -> None:
        raise NotImplementedError

    # Cohort-organised collection
    def list_cohort_students(self, cohort: Cohort) -> Sequence[User]:
        raise NotImplementedError

    def create_cohort_record(self, user: User) -> None:
        raise NotImplementedError

    def update_cohort_record(self, user: User) -> None:
        raise NotImplementedError

    def delete_cohort_record(self, user: User) -> None:
        raise NotImplementedError
