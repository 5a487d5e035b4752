from __future__ import annotations

import atexit
import importlib
import logging
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.log import configure_logging
from .common.web import register_error_handlers
from .container import MYSQL, build_container
from .core.settings import engine_settings_from
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .meetings.controller import register as register_meetings
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _setting(settings: Any, overrides: Mapping[str, Any], name: str, default: Any = None) -> Any:
    if name in overrides:
        return overrides[name]
    return getattr(settings, name, default)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(override=False)
    overrides = dict(overrides or {})

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    debug = bool(_setting(settings, overrides, "DEBUG", False))
    configure_logging(logging.DEBUG if debug else logging.INFO)

    app = Flask(__name__)
    app.secret_key = _setting(settings, overrides, "SECRET_KEY")
    app.config["DEBUG"] = debug
    app.config["TESTING"] = bool(_setting(settings, overrides, "TESTING", False))

    backend = str(_setting(settings, overrides, "STORE_BACKEND", "memory")).lower()
    db_config = dict(_setting(settings, overrides, "DB_CONFIG", {}) or {})
    auto_seed_db = bool(_setting(settings, overrides, "AUTO_SEED_DB", False))

    engine_source = {name: getattr(settings, name) for name in dir(settings) if name.isupper()}
    engine_source.update(overrides)
    engine = engine_settings_from(engine_source)

    logger.info("settings=%s backend=%s", settings_module, backend)

    if backend == MYSQL:
        logger.info(
            "db=%s@%s:%s/%s",
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(_setting(settings, overrides, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if auto_seed_db:
            ensure_demo_users(db_config, radius_meters=engine.territory_radius_meters)

    container = build_container(
        backend=backend,
        db_config=db_config,
        engine=engine,
        seed_memory=auto_seed_db,
    )
    app.extensions["geosales"] = container
    atexit.register(container.tracking.stop_all)

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_meetings(app, container)
    register_reports(app, container)

    @app.get("/api/health", endpoint="health")
    def health():
        return jsonify({"success": True, "backend": backend})

    return app
