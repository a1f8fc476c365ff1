from __future__ import annotations

import importlib
import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from flask import Flask, current_app
from flask.cli import AppGroup

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.scheduler import start_reconciler_scheduler
from .container import AttendanceOptions, Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .errors import register_error_handlers
from .qr.controller import register as register_qr

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

attendance_cli = AppGroup("attendance", help="Attendance maintenance commands.")


@attendance_cli.command("reconcile")
def reconcile_command() -> None:
    """Run one auto-checkout sweep now."""
    container: Container = current_app.extensions["gym_attendance"]
    result = container.reconciler.sweep()
    click.echo(f"examined={result.examined} closed={result.closed} skipped={result.skipped} failed={result.failed}")


@attendance_cli.command("init-db")
def init_db_command() -> None:
    """Apply database/schema.sql (idempotent)."""
    container: Container = current_app.extensions["gym_attendance"]
    apply_schema(container.conn, schema_path=SCHEMA_PATH)
    click.echo(f"tables: {', '.join(list_tables(container.conn))}")


def _configure_logging(settings) -> None:
    level = str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings_module: str | None = None, *, container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )
        container = build_container(db_config=db_config, options=AttendanceOptions.from_settings(settings))
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))

    app.extensions["gym_attendance"] = container

    register_error_handlers(app)
    register_attendance(app, container)
    register_qr(app, container)
    app.cli.add_command(attendance_cli)

    if bool(getattr(settings, "AUTO_CHECKOUT_ENABLED", False)) and not app.config["TESTING"]:
        app.extensions["gym_attendance_scheduler"] = start_reconciler_scheduler(
            container.reconciler,
            interval_minutes=int(getattr(settings, "AUTO_CHECKOUT_INTERVAL_MINUTES", 15)),
        )

    return app
