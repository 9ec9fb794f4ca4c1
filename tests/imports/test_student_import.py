from __future__ import annotations

import io

import pandas as pd
import pytest

from src.college_attendance.college_attendance.core.enums import AccessLevel, Role
from src.college_attendance.college_attendance.core.exceptions import AuthorizationError, ValidationError
from src.college_attendance.college_attendance.imports.service import (
    TEMPLATE_SHEET,
    StudentImportService,
    check_upload_name,
    normalize_row,
)
from src.college_attendance.college_attendance.users.service import RosterService


def _xlsx(rows) -> io.BytesIO:
    buf = io.BytesIO()
    pd.DataFrame(rows).to_excel(buf, index=False, engine="openpyxl")
    buf.seek(0)
    return buf


def _service(roster_repo, fixed_now):
    counter = iter(range(1, 1000))
    roster = RosterService(
        roster_repo,
        max_workers=4,
        clock=lambda: fixed_now,
        id_factory=lambda roll: f"student_{roll}_{next(counter)}",
    )
    return StudentImportService(roster)


def test_normalize_row_accepts_header_variants_and_defaults():
    form = normalize_row(
        {"Name": " Asha ", "EMAIL": "asha@college.edu", "RollNumber": "CS01", "Gender": "Female"},
        default_department="Computer Science",
    )
    assert form.name == "Asha"
    assert form.email == "asha@college.edu"
    assert form.roll_number == "CS01"
    assert (form.year, form.sem, form.div) == ("2nd", "3", "A")
    assert form.department == "Computer Science"


def test_normalize_row_prefers_explicit_values():
    form = normalize_row(
        {"name": "R", "email": "r@x.edu", "roll": "7", "Year": "3rd", "SEM": "5", "Div": "C", "department": "IT"},
        default_department="Computer Science",
    )
    assert (form.roll_number, form.year, form.sem, form.div, form.department) == ("7", "3rd", "5", "C", "IT")


def test_import_skips_invalid_rows(roster_repo, fixed_now):
    rows = [
        {"name": "Asha", "email": "asha@college.edu", "rollNumber": "CS01"},
        {"name": "", "email": "noname@college.edu", "rollNumber": "CS02"},
        {"name": "NoMail", "email": "", "rollNumber": "CS03"},
        {"name": "NoRoll", "email": "noroll@college.edu", "rollNumber": ""},
        {"name": "Slash", "email": "slash@college.edu", "rollNumber": "CS/05"},
        {"name": "Ravi", "email": "ravi@college.edu", "rollNumber": "CS06", "div": "B"},
    ]
    svc = _service(roster_repo, fixed_now)

    result = svc.import_students(current_role=Role.TEACHER, stream=_xlsx(rows), default_department="Computer Science")

    assert result.imported == 2
    assert result.skipped == 4
    assert result.errors[0].startswith("Row 3:")
    assert any("slashes" in e for e in result.errors)

    imported = sorted(roster_repo.users.values(), key=lambda u: u.roll_number)
    assert [u.roll_number for u in imported] == ["CS01", "CS06"]
    for u in imported:
        assert u.role == Role.STUDENT
        assert u.access_level == AccessLevel.BASIC
        assert u.is_active is True
        assert (u.year, u.sem) == ("2nd", "3")
        assert u.department == "Computer Science"
    assert imported[1].div == "B"
    assert len(roster_repo.cohort_records) == 2


def test_numeric_cells_are_read_as_text(roster_repo, fixed_now):
    rows = [{"name": "N", "email": "n@college.edu", "rollNumber": 42, "sem": 5}]
    svc = _service(roster_repo, fixed_now)

    svc.import_students(current_role=Role.HOD, stream=_xlsx(rows), default_department="CS")

    (u,) = roster_repo.users.values()
    assert u.roll_number == "42"
    assert u.sem == "5"


def test_import_requires_staff(roster_repo, fixed_now):
    svc = _service(roster_repo, fixed_now)
    with pytest.raises(AuthorizationError):
        svc.import_students(current_role=Role.STUDENT, stream=_xlsx([{"name": "x"}]), default_department="CS")


def test_unreadable_file_is_a_validation_error(roster_repo, fixed_now):
    svc = _service(roster_repo, fixed_now)
    with pytest.raises(ValidationError):
        svc.import_students(
            current_role=Role.TEACHER,
            stream=io.BytesIO(b"not a spreadsheet"),
            default_department="CS",
        )


@pytest.mark.parametrize("name", ["students.xlsx", "STUDENTS.XLS"])
def test_upload_name_accepts_excel(name):
    check_upload_name(name)


@pytest.mark.parametrize("name", ["students.csv", "students", ""])
def test_upload_name_rejects_other_files(name):
    with pytest.raises(ValidationError):
        check_upload_name(name)


def test_template_has_one_example_row():
    df = pd.read_excel(StudentImportService.build_template(), sheet_name=TEMPLATE_SHEET, dtype=str)
    assert len(df) == 1
    assert list(df.columns) == ["name", "email", "phone", "gender", "rollNumber", "year", "sem", "div", "department"]
    assert df.iloc[0]["rollNumber"] == "CS001"
