from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceStats
from ..attendance.service import AttendanceAggregator
from ..common.datetime_utils import month_bounds, year_start
from ..core.enums import ExportType, Role
from ..core.exceptions import ValidationError
from ..users.model import Cohort, User

logger = logging.getLogger(__name__)

ROSTER_HEADERS = [
    "Name", "Email", "Phone", "Gender", "Roll Number", "Year", "Semester", "Division", "Department", "Status",
]

ATTENDANCE_HEADERS = [
    "Name", "Email", "Roll Number", "Phone", "Gender", "Year", "Semester", "Division", "Department",
    "Total Days", "Present Days", "Absent Days", "Late Days", "Leave Days", "Attendance Percentage", "Status",
]


@dataclass(frozen=True)
class CsvReport:
    filename: str
    headers: list[str]
    rows: list[list]

    def to_bytes(self) -> bytes:
        out = io.StringIO()
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(self.headers)
        writer.writerows(self.rows)
        # BOM so spreadsheet apps pick up UTF-8 names.
        return out.getvalue().encode("utf-8-sig")


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    label: str
    subject: Optional[str] = None


class ReportService:
    """Roster and attendance CSV exports for a cohort."""

    def __init__(self, aggregator: AttendanceAggregator):
        self._aggregator = aggregator

    @staticmethod
    def resolve_range(
        export_type: ExportType,
        *,
        today: date,
        month: str = "",
        start: Optional[date] = None,
        end: Optional[date] = None,
        subject: str = "",
    ) -> DateRange:
        if export_type == ExportType.MONTHLY:
            try:
                first, last = month_bounds(month)
            except ValueError:
                raise ValidationError("Month must be in YYYY-MM format")
            return DateRange(start=first, end=last, label=month)

        if export_type == ExportType.CUSTOM:
            if not start or not end:
                raise ValidationError("Please select both start and end dates")
            if end < start:
                raise ValidationError("End date must be on or after start date")
            return DateRange(start=start, end=end, label=f"{start.isoformat()}_to_{end.isoformat()}")

        if export_type == ExportType.SUBJECT:
            subject = (subject or "").strip()
            if not subject:
                raise ValidationError("Please select a subject")
            return DateRange(start=year_start(today), end=today, label=subject, subject=subject)

        raise ValidationError(f"Unsupported attendance export: {export_type.value}")

    @staticmethod
    def _students_only(students: Sequence[User]) -> list[User]:
        return [s for s in students if s.role == Role.STUDENT]

    def export_roster(self, students: Sequence[User], *, cohort: Cohort, department: str) -> CsvReport:
        rows = [
            [
                s.name, s.email, s.phone, s.gender, s.roll_number,
                s.year, s.sem, s.div, s.department, s.status_label,
            ]
            for s in self._students_only(students)
        ]
        return CsvReport(
            filename=f"students_{cohort.slug()}_{department}.csv",
            headers=list(ROSTER_HEADERS),
            rows=rows,
        )

    def _stats_or_zero(self, student: User, period: DateRange) -> AttendanceStats:
        try:
            return self._aggregator.stats_for(
                student.user_id, start=period.start, end=period.end, subject=period.subject
            )
        except Exception:
            # Row is exported with zeroed stats.
            logger.exception("Error fetching attendance for student %s", student.user_id)
            return AttendanceStats()

    def export_attendance(self, students: Sequence[User], *, cohort: Cohort, period: DateRange) -> CsvReport:
        rows = []
        for s in self._students_only(students):
            stats = self._stats_or_zero(s, period)
            rows.append(
                [
                    s.name, s.email, s.roll_number, s.phone, s.gender,
                    s.year, s.sem, s.div, s.department,
                    stats.total, stats.present, stats.absent, stats.late, stats.leave,
                    f"{stats.percentage}%", s.status_label,
                ]
            )
        return CsvReport(
            filename=f"student_attendance_{period.label}_{cohort.slug()}.csv",
            headers=list(ATTENDANCE_HEADERS),
            rows=rows,
        )
