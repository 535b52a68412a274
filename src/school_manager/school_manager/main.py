from __future__ import annotations

import importlib
import locale
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .fees.controller import register as register_fees
from .reports.controller import register as register_reports
from .sms.controller import register as register_sms

logger = logging.getLogger(__name__)


def configure_collation(name: str = "") -> Optional[str]:
    """Set LC_COLLATE for name sorting; returns the active locale or None if unavailable."""

    try:
        return locale.setlocale(locale.LC_COLLATE, name)
    except locale.Error:
        logger.warning("Collation locale %r is not installed; keeping %s", name, locale.setlocale(locale.LC_COLLATE))
        return None


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )
    configure_collation(str(getattr(settings, "COLLATION_LOCALE", "")))

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            balance_cache_ttl=float(getattr(settings, "BALANCE_CACHE_TTL_SECONDS", 60)),
            sms_max_concurrency=int(getattr(settings, "SMS_MAX_CONCURRENCY", 5)),
            sms_http_timeout=float(getattr(settings, "SMS_HTTP_TIMEOUT", 15)),
            school_name=str(getattr(settings, "SCHOOL_NAME", "স্কুল")),
        )

    register_error_handlers(app)
    register_fees(app, container)
    register_reports(app, container)
    register_sms(app, container)

    return app
