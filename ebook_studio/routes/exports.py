# ebook_studio/routes/exports.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, request

from ..errors import ValidationError
from ..services.export.delivery import attachment_response
from ..services.export.service import ExportOptions, ExportResult, export_book, resolve_format
from . import app_clock, app_settings

bp = Blueprint("exports", __name__)


def _option(name: str) -> Optional[str]:
    # Query string first, then multipart/form fields.
    raw = request.args.get(name)
    if raw is None:
        raw = request.form.get(name)
    return raw


def _flag(name: str, default: bool) -> bool:
    raw = _option(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def options_from_request() -> ExportOptions:
    return ExportOptions(
        include_cover=_flag("include_cover", True),
        include_toc=_flag("include_toc", True),
        page_size=_option("page_size") or "A4",
        margin=_option("margin") or "medium",
    )


def _read_payload() -> Tuple[Dict[str, Any], Optional[bytes], Optional[str]]:
    """
    Return (book record, cover bytes, cover mime).

    JSON bodies carry the cover as a data URL inside metadata.coverImage.
    multipart/form-data carries the record in a `book` field and the cover
    as a `coverImage` file part.
    """
    if request.mimetype == "multipart/form-data":
        raw = request.form.get("book")
        if not raw:
            raise ValidationError("multipart export requires a 'book' field with the JSON record")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"'book' field is not valid JSON: {e.msg}") from e
        upload = request.files.get("coverImage")
        if upload is not None and upload.filename:
            return data, upload.read(), upload.mimetype
        return data, None, None

    data = request.get_json(force=True, silent=True)
    if data is None:
        raise ValidationError("request body must be a JSON book record")
    return data, None, None


def run_export(payload: Any, fmt: str, cover_bytes: Optional[bytes] = None, cover_mime: Optional[str] = None) -> ExportResult:
    return export_book(
        payload,
        fmt,
        cover_bytes=cover_bytes,
        cover_mime=cover_mime,
        clock=app_clock(),
        defaults=app_settings().export_defaults(),
        options=options_from_request(),
    )


@bp.post("/<fmt>")
def export(fmt: str):
    """
    POST /api/exports/<fmt>   fmt = epub | markdown | pdf
    Body: { "metadata": {...}, "chapters": [{ "title", "content", "order" }, ...] }
          or multipart/form-data: book=<json>, coverImage=<file>
    Query (markdown/pdf only): include_cover, include_toc, page_size, margin
    Returns the file as an attachment. azw3/kindle -> 501 unsupported_format.
    """
    # Reject unsupported formats before reading the body.
    resolve_format(fmt)
    data, cover_bytes, cover_mime = _read_payload()
    result = run_export(data, fmt, cover_bytes, cover_mime)
    return attachment_response(result.data, result.filename, result.content_type)
