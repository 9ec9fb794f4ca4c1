from __future__ import annotations

import logging
from datetime import date

from flask import Flask

from ..common.http import current_user, fail, login_required, ok
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        user = current_user()
        try:
            data = container.dashboard_service.for_user(user, date.today())
        except Exception:
            logger.exception("Error building dashboard for %s", user.user_id)
            return fail("Error loading dashboard", 500)
        return ok(dashboard=data)
