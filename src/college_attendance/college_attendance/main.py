from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_DEPARTMENT, DEFAULT_WRITE_WORKERS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, ensure_demo_staff, list_tables
from .database.connection import DBConfig
from .imports.controller import register as register_imports
from .leaves.controller import register as register_leaves
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    A prepared container (e.g. one over in-memory repositories) skips every
    database step.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEFAULT_DEPARTMENT"] = getattr(settings, "DEFAULT_DEPARTMENT", DEFAULT_DEPARTMENT)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_staff(db_config)
            logger.info("Demo staff accounts ready")

        container = build_container(
            db_config=db_config,
            write_workers=int(getattr(settings, "WRITE_WORKERS", DEFAULT_WRITE_WORKERS)),
        )

    register_users(app, container)
    register_reports(app, container)
    register_imports(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_dashboard(app, container)

    return app
