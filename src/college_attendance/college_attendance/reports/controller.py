from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from flask import Flask, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import domain_error, fail, staff_required
from ..container import Container
from ..core.enums import ExportType
from ..core.exceptions import DomainError, ValidationError
from ..users.controller import cohort_from_args
from .service import CsvReport

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _optional_date(name: str) -> Optional[date]:
        value = request.args.get(name) or ""
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"Invalid date: {value}")

    def _csv_response(report: CsvReport):
        return app.response_class(
            report.to_bytes(),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
        )

    @app.route("/students/export", methods=["GET"], endpoint="export_students")
    @staff_required
    def export_students():
        cohort = cohort_from_args()
        department = session.get("department") or app.config["DEFAULT_DEPARTMENT"]

        try:
            try:
                export_type = ExportType(request.args.get("type") or ExportType.BASIC.value)
            except ValueError:
                raise ValidationError("Unknown export type")

            students = container.roster_service.list_cohort(department=department, cohort=cohort)
            students = container.roster_service.search(students, request.args.get("q", ""))
            if export_type == ExportType.BASIC:
                report = container.report_service.export_roster(students, cohort=cohort, department=department)
            else:
                period = container.report_service.resolve_range(
                    export_type,
                    today=date.today(),
                    month=request.args.get("month", ""),
                    start=_optional_date("start_date"),
                    end=_optional_date("end_date"),
                    subject=request.args.get("subject", ""),
                )
                report = container.report_service.export_attendance(students, cohort=cohort, period=period)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error exporting students for %s", cohort.slug())
            return fail("Error exporting data. Please try again.", 500)

        logger.info("Exported %s (%d rows)", report.filename, len(report.rows))
        return _csv_response(report)
