from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.datetime_utils import configure_timezone
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import OtcSettings
from .database.bootstrap import apply_schema, apply_sql_file, ensure_demo_staff, list_tables
from .logging_config import setup_logging
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions
from .staff.controller import register as register_staff
from .verification.controller import register as register_verification

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """App factory. Pass a prebuilt container to skip MySQL wiring (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(
        app,
        log_dir=None if app.config["TESTING"] else getattr(settings, "LOG_DIR", "logs"),
        level=getattr(settings, "LOG_LEVEL", "INFO"),
    )
    configure_timezone(getattr(settings, "TIMEZONE", "UTC"))

    if container is None:
        container = _build_from_settings(settings, settings_module)

    register_error_handlers(app)
    register_staff(app, container)
    register_sessions(app, container)
    register_verification(app, container)
    register_reports(app, container)

    return app


def _build_from_settings(settings, settings_module: str) -> Container:
    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_sql_file(db_config, sql_path=DATABASE_DIR / "seed.sql")
        ensure_demo_staff(db_config)
        logger.info("demo seed ready")

    return build_container(
        db_config=db_config,
        otc_settings=OtcSettings(
            code_length=int(getattr(settings, "OTP_LENGTH", 6)),
            expiry_minutes=int(getattr(settings, "OTP_EXPIRY_MINUTES", 3)),
            max_attempts=int(getattr(settings, "OTP_MAX_ATTEMPTS", 3)),
        ),
        mail_config=getattr(settings, "MAIL_CONFIG", None),
        rate_limit=int(getattr(settings, "OTP_RATE_LIMIT", 5)),
        rate_window_seconds=int(getattr(settings, "OTP_RATE_WINDOW_SECONDS", 900)),
    )
