from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .hospitals.controller import register as register_hospitals
from .sync.controller import register as register_sync
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    backend = str(getattr(settings, "REMOTE_BACKEND", "none")).lower()
    logger.info("settings=%s remote=%s", settings_module, backend)

    if container is None and backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        db_config = dict(getattr(settings, "DB_CONFIG"))
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info(
            "schema ready on %s@%s/%s (tables=%d)",
            db_config.get("user"), db_config.get("host"), db_config.get("database"), len(list_tables(db_config)),
        )

    container = container or build_container(settings=settings)
    app.extensions["mediguard"] = container

    @app.route("/", endpoint="index")
    def index():
        return {
            "app": "MediGuard Attendance",
            "mode": container.sync_service.mode().value,
        }

    register_users(app, container)
    register_hospitals(app, container)
    register_attendance(app, container)
    register_sync(app, container)

    return app
