from __future__ import annotations

import importlib
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .approvals.controller import register as register_approvals
from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_BASE_AMOUNT, DEFAULT_HISTORY_LIMIT
from .core.enums import PayModel
from .courses.controller import register as register_courses
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .events.controller import register as register_events
from .payroll.cli import register as register_payroll_cli
from .payroll.controller import register as register_payroll
from .rates.controller import register as register_rates

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A ready `container` (e.g. one wired to in-memory repositories) skips the
    database setup entirely.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PAY_MODEL"] = getattr(settings, "PAY_MODEL", PayModel.RETAINER_PLUS_PER_CLASS.value)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            default_base_amount=Decimal(str(getattr(settings, "DEFAULT_BASE_AMOUNT", DEFAULT_BASE_AMOUNT))),
            pay_model=app.config["PAY_MODEL"],
            history_limit=int(getattr(settings, "HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
        )

    app.extensions["class_payroll"] = container

    register_error_handlers(app)
    register_events(app, container)
    register_courses(app, container)
    register_attendance(app, container)
    register_approvals(app, container)
    register_payroll(app, container)
    register_rates(app, container)
    register_payroll_cli(app, container)

    return app
