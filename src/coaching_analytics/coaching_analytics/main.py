from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_LATE_WEIGHT, DEFAULT_REFERENCE_TIMEZONE
from .core.http import register_error_handlers
from .core.logging_config import configure_logging
from .database.bootstrap import apply_schema, list_tables
from .attendance.controller import register as register_attendance
from .batches.controller import register as register_batches
from .health.controller import register as register_health
from .marks.controller import register as register_marks
from .stats.controller import register as register_stats

logger = structlog.get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; tests pass a ready-made ``container`` to skip MySQL."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(debug=app.config["DEBUG"], json_logs=bool(getattr(settings, "LOG_JSON", False)))
    logger.info(
        "app_configured",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema_ready", tables=len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            timezone=getattr(settings, "REFERENCE_TIMEZONE", DEFAULT_REFERENCE_TIMEZONE),
            late_weight=float(getattr(settings, "LATE_WEIGHT", DEFAULT_LATE_WEIGHT)),
        )

    register_error_handlers(app)
    register_health(app, container)
    register_batches(app, container)
    register_attendance(app, container)
    register_marks(app, container)
    register_stats(app, container)

    return app
