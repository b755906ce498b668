# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
from typing import Optional

import structlog
from flask import Flask
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

try:
    # Optional but recommended
    from flask_cors import CORS  # type: ignore
except ImportError:  # pragma: no cover
    CORS = None  # type: ignore

from .config import Settings
from .errors import ExportError
from .logging import setup_logging
from .routes import EXTENSION_KEY, json_err
from .routes import books, exports, health
from .services.identity import StaticIdentity
from .services.repository import BookRepository, InMemoryBookRepository
from .utils.time import Clock, SystemClock


def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[BookRepository] = None,
    clock: Optional[Clock] = None,
) -> Flask:
    """
    Application factory used by WSGI servers and `python -m flask`.

    - Registers /api/health, /api/exports and /api/books
    - Maps export errors onto the JSON error envelope
    - Clock and repository are injectable for tests
    """
    cfg = settings or Settings()  # pydantic-settings loads .env
    setup_logging(cfg.LOG_LEVEL)
    log = structlog.get_logger("ebook.app")

    app = Flask(__name__, static_folder=None)
    app.config["MAX_CONTENT_LENGTH"] = cfg.MAX_CONTENT_LENGTH

    # Honor reverse proxy headers (TLS offloading, load balancers)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    if CORS and cfg.CORS_ENABLE:
        CORS(
            app,
            resources={r"/api/*": {"origins": cfg.CORS_ALLOW_ORIGINS}},
            supports_credentials=cfg.CORS_ALLOW_CREDENTIALS,
            methods=cfg.CORS_ALLOW_METHODS,
            allow_headers=cfg.CORS_ALLOW_HEADERS,
            expose_headers=["Content-Disposition", "X-Request-ID"],
        )

    app_clock = clock or SystemClock()
    app.extensions[EXTENSION_KEY] = {
        "settings": cfg,
        "clock": app_clock,
        "repository": repository
        or InMemoryBookRepository(clock=app_clock, identity=StaticIdentity(cfg.CURRENT_USER)),
    }

    app.register_blueprint(health.bp, url_prefix="/api/health")
    app.register_blueprint(exports.bp, url_prefix="/api/exports")
    app.register_blueprint(books.bp, url_prefix="/api/books")

    # ----------------------
    # JSON error handlers
    # ----------------------
    @app.errorhandler(ExportError)
    def export_error(e: ExportError):
        log.warning("request_failed", code=e.code, message=e.message)
        return json_err(e.code, e.message, e.details, status=e.http_status)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        code = (e.name or "error").lower().replace(" ", "_")
        return json_err(code, e.name or "Error", status=e.code or 500)

    @app.errorhandler(500)
    def server_error(e):
        logging.getLogger(__name__).exception("Unhandled error")
        return json_err("internal_error", "Internal Server Error", status=500)

    log.info("app_ready", cors=bool(CORS and cfg.CORS_ENABLE), default_language=cfg.DEFAULT_LANGUAGE)
    return app
