from __future__ import annotations

import logging

from flask import Flask, request, send_file, session

from ..common.http import current_user, domain_error, fail, ok, staff_required
from ..container import Container
from ..core.exceptions import DomainError
from .service import TEMPLATE_FILENAME, XLSX_MIMETYPE, StudentImportService, check_upload_name

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/students/import", methods=["POST"], endpoint="import_students")
    @staff_required
    def import_students():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return fail("No file uploaded", 400)

        try:
            check_upload_name(upload.filename)
            result = container.import_service.import_students(
                current_role=current_user().role,
                stream=upload.stream,
                default_department=session.get("department") or app.config["DEFAULT_DEPARTMENT"],
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Error importing students from %s", upload.filename)
            return fail("Error importing students. Please check the file format.", 500)

        message = f"Successfully imported {result.imported} students."
        if result.skipped:
            message += f" {result.skipped} rows skipped."
        return ok(message=message, **result.to_dict())

    @app.route("/students/import/template", methods=["GET"], endpoint="import_template")
    @staff_required
    def import_template():
        return send_file(
            StudentImportService.build_template(),
            download_name=TEMPLATE_FILENAME,
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )
