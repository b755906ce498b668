# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import secrets
import time
from typing import Any, Dict

from flask import current_app, jsonify, make_response, request

from ..config import Settings
from ..models.responses import ApiError, ErrorResponse
from ..services.repository import BookRepository
from ..utils.time import Clock

EXTENSION_KEY = "ebook_studio"


def request_id() -> str:
    rid = request.headers.get("X-Request-ID")
    return rid or f"req_{int(time.time()*1000)}_{secrets.token_hex(6)}"


def _secure(resp):
    resp.headers.setdefault("X-Request-ID", request_id())
    resp.headers.setdefault("Cache-Control", "no-store")
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    resp.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    resp.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
    return resp


def json_ok(payload: Dict[str, Any], status: int = 200):
    return _secure(make_response(jsonify({"ok": True, **payload}), status))


def json_err(code: str, message: str, details: Any | None = None, status: int = 400):
    body = ErrorResponse(error=ApiError(code=code, message=message, details=details))
    return _secure(make_response(jsonify(body.model_dump(mode="json")), status))


# ----------------------------- App-scoped services -----------------------------


def app_settings() -> Settings:
    return current_app.extensions[EXTENSION_KEY]["settings"]


def app_repository() -> BookRepository:
    return current_app.extensions[EXTENSION_KEY]["repository"]


def app_clock() -> Clock:
    return current_app.extensions[EXTENSION_KEY]["clock"]
