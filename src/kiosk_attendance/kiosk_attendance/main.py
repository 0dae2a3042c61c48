from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .history.controller import register as register_history
from .kiosk.controller import register as register_kiosk
from .reconciliation.controller import register as register_reconciliation
from .reconciliation.scheduler import build_scheduler, start_scheduler
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_SETTING_KEYS = (
    "NOTIFIER",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USERNAME",
    "SMTP_PASSWORD",
    "SMTP_SENDER",
    "SMTP_USE_TLS",
    "SCHOOL_NAME",
    "SYSTEM_LOGOUT_HOUR",
    "MAX_WRITE_ATTEMPTS",
)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.json.ensure_ascii = False

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    database_dir = Path(__file__).resolve().parents[3] / "database"
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=database_dir / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("demo seed ready")

    extra = {key: getattr(settings, key) for key in _SETTING_KEYS if hasattr(settings, key)}
    container = build_container(db_config=db_config, settings=extra)

    register_users(app, container)
    register_kiosk(app, container)
    register_history(app, container)
    register_reconciliation(app, container)

    if bool(getattr(settings, "ENABLE_SCHEDULER", False)):
        scheduler = build_scheduler(
            container.reconciliation_service,
            hour_utc=int(getattr(settings, "RECONCILE_HOUR_UTC", 13)),
            minute_utc=int(getattr(settings, "RECONCILE_MINUTE_UTC", 30)),
        )
        start_scheduler(scheduler)
        app.extensions["reconciliation_scheduler"] = scheduler

    return app
