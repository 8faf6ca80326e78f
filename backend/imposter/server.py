from __future__ import annotations

import logging
import random
import sys
from pathlib import Path
from typing import Any

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.catalog import CatalogError, WordCatalog, load_catalog
from .game.service import RoomRegistry
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .realtime.handlers import register_socketio_handlers

logger = logging.getLogger(__name__)


def _load_catalog(path: str) -> WordCatalog | None:
    try:
        catalog = load_catalog(path)
    except CatalogError as e:
        logger.error("word list unavailable, createGame is disabled: %s", e)
        return None
    logger.info("loaded %d word categories from %s", len(catalog.categories), path)
    return catalog


def create_app(
    config_overrides: dict[str, Any] | None = None,
    registry: RoomRegistry | None = None,
    catalog: WordCatalog | None = None,
    rng: random.Random | None = None,
) -> tuple[Flask, SocketIO]:
    dist_dir = Path(__file__).resolve().parents[2] / "frontend" / "dist"

    static_folder = str(dist_dir) if dist_dir.exists() else None
    static_url_path = "/" if dist_dir.exists() else None

    app = Flask(
        __name__,
        static_folder=static_folder,
        static_url_path=static_url_path,
    )
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = app.config.get("SOCKETIO_ASYNC_MODE", "")
    if not async_mode:
        # Default choice:
        # - Windows: threading (eventlet has known compatibility issues on newer Python)
        # - Python >= 3.13: threading (safer default)
        # - Otherwise: eventlet
        if sys.platform.startswith("win") or sys.version_info >= (3, 13):
            async_mode = "threading"
        else:
            async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    if registry is None:
        registry = RoomRegistry(code_length=app.config.get("ROOM_CODE_LENGTH"))
    if catalog is None:
        catalog = _load_catalog(app.config["WORDS_PATH"])

    app.extensions["imposter"] = {"registry": registry, "catalog": catalog}

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, registry, catalog, rng=rng)

    if dist_dir.exists():
        @app.get("/")
        def index():
            return send_from_directory(dist_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            file_path = dist_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(dist_dir, path)
            return send_from_directory(dist_dir, "index.html")

    return app, socketio
