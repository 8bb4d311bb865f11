from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask

from config import get_settings_module, load_settings

from .checkin.controller import register as register_checkin
from .container import Container, build_container

logger = logging.getLogger(__name__)


def configure_logging(settings: Any) -> None:
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Any = None, *, container: Optional[Container] = None) -> Flask:
    settings = settings or load_settings()
    configure_logging(settings)

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if app.config["DEBUG"]:
        logger.info(
            "[gym-checkin] settings=%s api=%s facility=%s",
            get_settings_module(),
            getattr(settings, "API_BASE_URL"),
            getattr(settings, "FACILITY_ID", "1"),
        )

    container = container or build_container(settings)
    register_checkin(app, container)

    return app
