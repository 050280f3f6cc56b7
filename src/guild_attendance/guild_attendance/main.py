from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, request

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables, seed_defaults
from .shift_reports.controller import register as register_shift_reports
from .users.controller import register as register_users

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    When ``container`` is given (tests), the database bootstrap is skipped and the
    provided repositories are used as-is.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    app.config.from_object(importlib.import_module(settings_module))
    app.secret_key = app.config["SECRET_KEY"]
    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    db_config = dict(app.config["DB_CONFIG"])
    app.logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if app.config.get("AUTO_INIT_DB"):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if app.config.get("AUTO_SEED_DB"):
            added = seed_defaults(
                db_config,
                owner_username=app.config.get("OWNER_USERNAME"),
                owner_password=app.config.get("OWNER_PASSWORD"),
                owner_email=app.config.get("OWNER_EMAIL"),
            )
            app.logger.info("seed ready (new mains=%d)", added)
        container = build_container(db_config=db_config, options=app.config)

    @app.before_request
    def start_request_timer():
        g.request_start_time = time.perf_counter()

    @app.after_request
    def log_request_time(response):
        start_time = getattr(g, "request_start_time", None)
        if start_time is not None:
            duration_ms = (time.perf_counter() - start_time) * 1000
            app.logger.info("%s %s -> %d (%.2fms)", request.method, request.path, response.status_code, duration_ms)
        return response

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_shift_reports(app, container)

    app.extensions["guild_container"] = container
    return app
