# ebook_studio/services/export/delivery.py
# SPDX-License-Identifier: Apache-2.0
"""
Hand a finished export to the caller: as an HTTP attachment or as a file
saved next to the process. Both paths share utils.fs.export_filename.
"""
from __future__ import annotations

from pathlib import Path

import structlog
from flask import Response

from ...utils.fs import ensure_dir

log = structlog.get_logger("ebook.export.delivery")


def attachment_response(data: bytes, filename: str, content_type: str) -> Response:
    resp = Response(data, status=200, content_type=content_type)
    resp.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    resp.headers["Content-Length"] = str(len(data))
    resp.headers.setdefault("Cache-Control", "no-store")
    return resp


def save_file(data: bytes, filename: str, out_dir: Path | str) -> Path:
    """
    Write `data` as `out_dir/filename` via a temp file + rename, so a failed
    write never leaves a truncated export behind.
    """
    target_dir = ensure_dir(out_dir)
    target = target_dir / filename
    tmp = target.with_name(target.name + ".part")
    tmp.write_bytes(data)
    tmp.replace(target)
    log.info("export_saved", path=str(target), bytes=len(data))
    return target
