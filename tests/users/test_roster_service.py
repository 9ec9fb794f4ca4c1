from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from src.college_attendance.college_attendance.core.enums import AccessLevel, Role
from src.college_attendance.college_attendance.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from src.college_attendance.college_attendance.users.model import Cohort, StudentForm
from src.college_attendance.college_attendance.users.service import RosterService


def _service(roster_repo, fixed_now):
    return RosterService(
        roster_repo,
        max_workers=4,
        clock=lambda: fixed_now,
        id_factory=lambda roll: f"student_{roll}_test",
    )


def _form(**overrides):
    base = StudentForm(
        name="Asha Patil",
        email="asha@college.edu",
        roll_number="CS01",
        phone="9000000001",
        gender="Female",
        department="Computer Science",
    )
    return replace(base, **overrides)


def test_roll_number_with_slash_is_rejected_before_any_store_call(roster_repo, fixed_now):
    svc = _service(roster_repo, fixed_now)
    with pytest.raises(ValidationError, match="slashes"):
        svc.add_student(current_role=Role.TEACHER, form=_form(roll_number="CS/01"))
    assert roster_repo.calls == []


@pytest.mark.parametrize("field", ["name", "email", "roll_number"])
def test_required_fields(roster_repo, fixed_now, field):
    svc = _service(roster_repo, fixed_now)
    with pytest.raises(ValidationError):
        svc.add_student(current_role=Role.TEACHER, form=_form(**{field: ""}))
    assert roster_repo.calls == []


def test_add_student_writes_both_collections(roster_repo, fixed_now):
    svc = _service(roster_repo, fixed_now)
    student = svc.add_student(current_role=Role.TEACHER, form=_form(is_active=False))

    assert student.user_id == "student_CS01_test"
    assert student.role == Role.STUDENT
    assert student.access_level == AccessLevel.BASIC
    assert student.is_active is True
    assert student.created_at == fixed_now
    assert roster_repo.users[student.user_id] == student
    assert roster_repo.cohort_records[student.user_id] == student
    assert roster_repo.calls == ["exists_by_email", "exists_by_roll_number", "create_user", "create_cohort_record"]


def test_duplicate_email_is_checked_before_roll_number(roster_repo, student, fixed_now):
    roster_repo.seed(student("u1", "Other", "CS01", email="asha@college.edu"))
    svc = _service(roster_repo, fixed_now)

    with pytest.raises(DuplicateError, match="email"):
        svc.add_student(current_role=Role.TEACHER, form=_form())
    assert "exists_by_roll_number" not in roster_repo.calls


def test_duplicate_roll_number(roster_repo, student, fixed_now):
    roster_repo.seed(student("u1", "Other", "CS01"))
    svc = _service(roster_repo, fixed_now)

    with pytest.raises(DuplicateError, match="roll number"):
        svc.add_student(current_role=Role.TEACHER, form=_form())
    assert "create_user" not in roster_repo.calls


def test_students_cannot_manage_roster(roster_repo, fixed_now):
    svc = _service(roster_repo, fixed_now)
    with pytest.raises(AuthorizationError):
        svc.add_student(current_role=Role.STUDENT, form=_form())


def test_update_moves_cohort_record_and_keeps_audit_fields(roster_repo, student, fixed_now):
    existing = replace(
        student("u1", "Asha", "CS01"),
        created_at=datetime(2025, 7, 1),
        login_count=4,
        password_hash="hash",
    )
    roster_repo.seed(existing)
    svc = _service(roster_repo, fixed_now)

    updated = svc.update_student(
        current_role=Role.HOD,
        user_id="u1",
        form=_form(name="Asha P.", div="B", is_active=False),
    )

    assert updated.user_id == "u1"
    assert updated.name == "Asha P."
    assert updated.is_active is False
    assert updated.created_at == datetime(2025, 7, 1)
    assert updated.login_count == 4
    assert updated.password_hash == "hash"
    assert roster_repo.users["u1"] == updated
    assert roster_repo.cohort_records["u1"] == updated
    assert [s.user_id for s in roster_repo.list_cohort_students(Cohort("2nd", "3", "A"))] == []
    assert [s.user_id for s in roster_repo.list_cohort_students(Cohort("2nd", "3", "B"))] == ["u1"]


def test_update_onto_a_roll_number_already_in_the_cohort_keeps_both(roster_repo, student, fixed_now):
    roster_repo.seed(student("u1", "Asha", "CS01"), student("u2", "Ravi", "CS02", email="ravi@college.edu"))
    svc = _service(roster_repo, fixed_now)

    svc.update_student(
        current_role=Role.TEACHER,
        user_id="u2",
        form=_form(name="Ravi", email="ravi@college.edu", roll_number="CS01"),
    )

    cohort = svc.list_cohort(department="Computer Science", cohort=Cohort("2nd", "3", "A"))
    assert sorted(s.user_id for s in cohort) == ["u1", "u2"]
    assert roster_repo.cohort_records["u2"].roll_number == "CS01"
    assert set(roster_repo.cohort_records) == set(roster_repo.users)


def test_repeated_cohort_writes_for_one_student_leave_one_record(roster_repo, student, fixed_now):
    asha = student("u1", "Asha", "CS01")
    roster_repo.create_cohort_record(asha)
    roster_repo.create_cohort_record(replace(asha, name="Asha P."))

    assert list(roster_repo.cohort_records) == ["u1"]
    assert roster_repo.cohort_records["u1"].name == "Asha P."


def test_update_does_not_recheck_uniqueness(roster_repo, student, fixed_now):
    roster_repo.seed(student("u1", "Asha", "CS01"), student("u2", "Other", "CS02", email="dup@college.edu"))
    svc = _service(roster_repo, fixed_now)

    svc.update_student(current_role=Role.TEACHER, user_id="u1", form=_form(email="dup@college.edu"))
    assert "exists_by_email" not in roster_repo.calls


def test_update_unknown_student(roster_repo, fixed_now):
    with pytest.raises(NotFoundError):
        _service(roster_repo, fixed_now).update_student(current_role=Role.TEACHER, user_id="nope", form=_form())


def test_delete_removes_both_records(roster_repo, student, fixed_now):
    roster_repo.seed(student("u1", "Asha", "CS01"))
    _service(roster_repo, fixed_now).delete_student(current_role=Role.TEACHER, user_id="u1")

    assert "u1" not in roster_repo.users
    assert roster_repo.cohort_records == {}


def test_list_cohort_falls_back_to_flat_collection(roster_repo, student, fixed_now):
    roster_repo.seed(
        student("u1", "A", "1"),
        student("u2", "B", "2", department="Mechanical"),
        student("u3", "C", "3", div="B"),
    )
    roster_repo.cohort_unavailable = True
    svc = _service(roster_repo, fixed_now)

    students = svc.list_cohort(department="Computer Science", cohort=Cohort("2nd", "3", "A"))
    assert [s.user_id for s in students] == ["u1"]


def test_list_cohort_prefers_cohort_collection(roster_repo, student, fixed_now):
    roster_repo.seed(student("u1", "A", "1"), student("u2", "B", "2", div="C"))
    svc = _service(roster_repo, fixed_now)

    students = svc.list_cohort(department="Computer Science", cohort=Cohort("2nd", "3", "C"))
    assert [s.user_id for s in students] == ["u2"]
    assert "list_all_students" not in roster_repo.calls


def test_search_and_summary(student):
    students = [
        student("u1", "Asha Patil", "CS01", gender="Female"),
        student("u2", "Rahul Shah", "CS02", gender="Male", is_active=False),
        student("u3", "Meera Joshi", "ME07", gender="Female", email="meera@x.edu"),
    ]

    assert [s.user_id for s in RosterService.search(students, "cs0")] == ["u1", "u2"]
    assert [s.user_id for s in RosterService.search(students, "MEERA@")] == ["u3"]
    assert len(RosterService.search(students, "")) == 3
    assert RosterService.cohort_summary(students) == {"total": 3, "active": 2, "male": 1, "female": 2}


def test_bulk_create_writes_each_student_twice(roster_repo, student, fixed_now):
    students = [student(f"u{i}", f"S{i}", str(i)) for i in range(1, 4)]
    assert _service(roster_repo, fixed_now).bulk_create(students) == 3

    assert sorted(roster_repo.users) == ["u1", "u2", "u3"]
    assert len(roster_repo.cohort_records) == 3
