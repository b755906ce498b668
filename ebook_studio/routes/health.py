# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import platform
import sys
from typing import Any, Dict

from flask import Blueprint

from ..services.export.service import ExportFormat, KINDLE_FORMATS
from . import app_settings, json_ok

bp = Blueprint("health", __name__)


@bp.get("")
def health() -> Any:
    cfg = app_settings()
    info: Dict[str, Any] = {
        "service": "ebook-studio-api",
        "python": sys.version.split()[0],
        "platform": platform.platform(terse=True),
        "formats": [f.value for f in ExportFormat],
        "unsupported_formats": sorted(KINDLE_FORMATS),
        "default_language": cfg.DEFAULT_LANGUAGE,
    }
    return json_ok({"status": "ok", "info": info})
