from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Sequence
from zipfile import BadZipFile

import pandas as pd

from ..core.constants import ALLOWED_IMPORT_EXTENSIONS, DEFAULT_DIV, DEFAULT_SEM, DEFAULT_YEAR
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..users.model import StudentForm, User
from ..users.service import RosterService, require_staff

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = "student_import_template.xlsx"
TEMPLATE_SHEET = "Students"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Accepted spellings of each column header, in lookup order.
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name", "NAME"),
    "email": ("email", "Email", "EMAIL"),
    "phone": ("phone", "Phone", "PHONE"),
    "gender": ("gender", "Gender", "GENDER"),
    "roll_number": ("rollNumber", "roll", "RollNumber", "roll_number"),
    "year": ("year", "Year", "YEAR"),
    "sem": ("sem", "Sem", "SEM"),
    "div": ("div", "Div", "DIV"),
    "department": ("department", "Department", "DEPARTMENT"),
}

TEMPLATE_ROW = {
    "name": "John Doe",
    "email": "john.doe@college.edu",
    "phone": "+91 90000 00001",
    "gender": "Male",
    "rollNumber": "CS001",
    "year": "2nd",
    "sem": "3",
    "div": "A",
    "department": "Computer Science",
}


@dataclass(frozen=True)
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"imported": self.imported, "skipped": self.skipped, "errors": list(self.errors)}


def _pick(row: dict, aliases: Sequence[str], default: str = "") -> str:
    for key in aliases:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return default


def normalize_row(row: dict, *, default_department: str) -> StudentForm:
    """Map one spreadsheet row onto roster fields, tolerating header variants."""

    return StudentForm(
        name=_pick(row, COLUMN_ALIASES["name"]),
        email=_pick(row, COLUMN_ALIASES["email"]),
        phone=_pick(row, COLUMN_ALIASES["phone"]),
        gender=_pick(row, COLUMN_ALIASES["gender"]),
        roll_number=_pick(row, COLUMN_ALIASES["roll_number"]),
        year=_pick(row, COLUMN_ALIASES["year"], DEFAULT_YEAR),
        sem=_pick(row, COLUMN_ALIASES["sem"], DEFAULT_SEM),
        div=_pick(row, COLUMN_ALIASES["div"], DEFAULT_DIV),
        department=_pick(row, COLUMN_ALIASES["department"], default_department),
        is_active=True,
    )


def check_upload_name(filename: str) -> None:
    if not (filename or "").lower().endswith(ALLOWED_IMPORT_EXTENSIONS):
        raise ValidationError("Please upload an .xlsx or .xls file")


class StudentImportService:
    """Use case: bulk-create students from an uploaded spreadsheet."""

    def __init__(self, roster: RosterService):
        self._roster = roster

    @staticmethod
    def read_rows(stream: BinaryIO) -> list[dict]:
        """Rows of the first sheet as dicts of strings."""

        try:
            df = pd.read_excel(stream, sheet_name=0, dtype=str)
        except (ValueError, BadZipFile) as e:
            raise ValidationError("Error importing students. Please check the file format.") from e
        df = df.fillna("")
        return df.to_dict(orient="records")

    def build_students(self, rows: Sequence[dict], *, default_department: str) -> tuple[list[User], list[str]]:
        students: list[User] = []
        errors: list[str] = []
        for index, row in enumerate(rows, start=2):
            try:
                students.append(self._roster.build_student(normalize_row(row, default_department=default_department)))
            except ValidationError as e:
                # Row 1 is the header.
                errors.append(f"Row {index}: {e}")
        return students, errors

    def import_students(self, *, current_role: Role, stream: BinaryIO, default_department: str) -> ImportResult:
        require_staff(current_role)
        rows = self.read_rows(stream)
        students, errors = self.build_students(rows, default_department=default_department)
        for message in errors:
            logger.info("Skipping import row: %s", message)

        imported = self._roster.bulk_create(students)
        logger.info("Imported %d students (%d rows skipped)", imported, len(errors))
        return ImportResult(imported=imported, skipped=len(errors), errors=errors)

    @staticmethod
    def build_template() -> io.BytesIO:
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            pd.DataFrame([TEMPLATE_ROW]).to_excel(writer, index=False, sheet_name=TEMPLATE_SHEET)
        output.seek(0)
        return output
