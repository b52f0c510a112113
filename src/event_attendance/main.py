from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import MAX_WINDOW_HOURS
from .database.bootstrap import apply_schema, ensure_admin, list_tables
from .events.controller import register as register_events
from .organizers.controller import register as register_organizers
from .sessions.controller import register as register_sessions
from .students.controller import register as register_students


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass `container` to skip the MySQL wiring."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    log_level = str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(log_level)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            app.logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        admin_email = getattr(settings, "ADMIN_EMAIL", "")
        if bool(getattr(settings, "AUTO_SEED_DB", False)) and admin_email:
            ensure_admin(db_config, email=admin_email)

        container = build_container(
            db_config=db_config,
            max_window_hours=int(getattr(settings, "MAX_WINDOW_HOURS", MAX_WINDOW_HOURS)),
        )

    register_organizers(app, container)
    register_events(app, container)
    register_sessions(app, container)
    register_attendance(app, container)
    register_students(app, container)

    return app


if __name__ == "__main__":
    create_app().run()
