from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import Container, build_container
from .core.enums import DeliveryStatus
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .permissions.controller import register as register_permissions
from .tokens.controller import register as register_tokens

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "Starting with settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["qr_attendance"] = container

    register_tokens(app, container)
    register_attendance(app, container)
    register_permissions(app, container)
    register_commands(app, container)

    return app


def register_commands(app: Flask, container: Container) -> None:
    @app.cli.command("issue-scheduled")
    def issue_scheduled() -> None:
        """Issue and send tokens for workers whose start/end time is now."""

        results = container.scheduled_issuer.run()
        created = sum(1 for r in results if r.created)
        click.echo(f"Processed {len(results)} token(s), {created} newly issued")

    @app.cli.command("retry-deliveries")
    @click.option("--limit", default=50, show_default=True, help="Maximum attempts to retry.")
    def retry_deliveries(limit: int) -> None:
        """Retry failed token deliveries that still have retries left."""

        attempts = container.delivery_service.retry_failed(limit=limit)
        sent = sum(1 for a in attempts if a.status == DeliveryStatus.SENT)
        click.echo(f"Retried {len(attempts)} delivery(ies), {sent} sent")
