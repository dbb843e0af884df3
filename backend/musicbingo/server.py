from __future__ import annotations

import os
import sys
from pathlib import Path

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .content.catalog import CatalogSupplier
from .content.deezer import DeezerPreviewLookup, EnrichingSupplier
from .content.generator import ContentGenerator
from .content.remote import RemoteTextSupplier
from .content.supplier import ContentSupplier, GenerationConfig, RetryPolicy
from .game.registry import SessionRegistry
from .routes.health import bp as health_bp
from .routes.network import bp as network_bp
from .routes.rooms import bp as rooms_bp
from .realtime.handlers import register_socketio_handlers

EXTENSION_KEY = "musicbingo"


def build_supplier(config) -> ContentSupplier:
    retry = RetryPolicy(
        max_attempts=int(config.get("SUPPLIER_MAX_ATTEMPTS", 3)),
        backoff_sec=float(config.get("SUPPLIER_BACKOFF_SEC", 0.5)),
    )
    timeout = float(config.get("HTTP_TIMEOUT_SEC", 10))

    supplier: ContentSupplier
    if config.get("CONTENT_GENERATOR_URL"):
        supplier = RemoteTextSupplier(config["CONTENT_GENERATOR_URL"], retry=retry, timeout=timeout)
    else:
        supplier = CatalogSupplier()

    if config.get("DEEZER_ENABLED"):
        lookup = DeezerPreviewLookup(config.get("DEEZER_BASE_URL", "https://api.deezer.com"), timeout=timeout)
        supplier = EnrichingSupplier(supplier, lookup, retry=retry)
    return supplier


def default_generation_config(config) -> GenerationConfig:
    return GenerationConfig(
        mode=config.get("CONTENT_MODE", "songs"),
        languages=tuple(config.get("CONTENT_LANGUAGES") or ()),
        target_size=int(config.get("CONTENT_TARGET_SIZE", 75)),
        initial_batch=int(config.get("CONTENT_INITIAL_BATCH", 3)),
        batch_size=int(config.get("CONTENT_BATCH_SIZE", 5)),
    )


def create_app(config_class=Config, supplier: ContentSupplier | None = None) -> tuple[Flask, SocketIO]:
    dist_dir = Path(__file__).resolve().parents[2] / "frontend" / "build"

    static_folder = str(dist_dir) if dist_dir.exists() else None
    static_url_path = "/" if dist_dir.exists() else None

    app = Flask(
        __name__,
        static_folder=static_folder,
        static_url_path=static_url_path,
    )
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if app.config.get("SOCKETIO_ASYNC_MODE"):
        async_mode = app.config["SOCKETIO_ASYNC_MODE"]
    elif env_async_mode:
        async_mode = env_async_mode
    else:
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

    registry = SessionRegistry(
        ContentGenerator(supplier or build_supplier(app.config)),
        defaults=default_generation_config(app.config),
        spawn=socketio.start_background_task,
    )
    app.extensions[EXTENSION_KEY] = registry

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(network_bp, url_prefix="/api")

    register_socketio_handlers(socketio, registry)

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
