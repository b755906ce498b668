# ebook_studio/services/export/service.py
# SPDX-License-Identifier: Apache-2.0
"""
Export entry point shared by the HTTP routes and the CLI.

    export_book(payload, "epub") -> ExportResult

Each call normalizes its own snapshot of the book and builds an independent
artifact; nothing is cached between calls.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import structlog

from ...errors import UnsupportedFormatError
from ...utils.fs import export_filename
from ...utils.time import Clock
from ..normalizer import normalize_book
from .epub_builder import EPUB_MIMETYPE, build_archive
from .serializer import serialize_archive
from .text_formats import render_markdown, render_print_html

log = structlog.get_logger("ebook.export")


class ExportFormat(str, Enum):
    epub = "epub"
    markdown = "markdown"
    pdf = "pdf"  # printable HTML stand-in


# Known formats we deliberately do not produce.
KINDLE_FORMATS = {"azw3", "azw", "kindle", "mobi", "kfx"}

KINDLE_MESSAGE = (
    "AZW3 (Kindle) export requires external conversion tooling (for example "
    "Calibre's ebook-convert) and is not produced by this service. "
    "Please export as EPUB instead."
)

_ALIASES = {"md": "markdown", "html": "pdf"}


@dataclass(frozen=True)
class ExportOptions:
    """Options that only the text stand-ins honour; EPUB always carries cover, nav and guide."""

    include_cover: bool = True
    include_toc: bool = True
    page_size: str = "A4"
    margin: str = "medium"


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    filename: str
    content_type: str
    format: ExportFormat

    @property
    def size(self) -> int:
        return len(self.data)


def resolve_format(fmt: Optional[str]) -> ExportFormat:
    name = (fmt or "epub").strip().lower().lstrip(".")
    name = _ALIASES.get(name, name)
    if name in KINDLE_FORMATS:
        raise UnsupportedFormatError(KINDLE_MESSAGE, details={"format": name})
    try:
        return ExportFormat(name)
    except ValueError:
        raise UnsupportedFormatError(
            f"unsupported export format: {name}",
            details={"format": name, "supported": [f.value for f in ExportFormat]},
        ) from None


def export_book(
    payload: Any,
    fmt: Optional[str] = "epub",
    *,
    cover_bytes: Optional[bytes] = None,
    cover_mime: Optional[str] = None,
    clock: Optional[Clock] = None,
    defaults: Optional[Mapping[str, str]] = None,
    options: Optional[ExportOptions] = None,
) -> ExportResult:
    """
    Export one book in the requested format.

    Raises (all from ebook_studio.errors):
      UnsupportedFormatError  before any work for Kindle/unknown formats
      ValidationError         nothing to package
      PackagingError          no chapters / unsupported cover type
      SerializationError      zip construction failed
    """
    try:
        target = resolve_format(fmt)
    except UnsupportedFormatError:
        log.warning("export_rejected", format=fmt)
        raise

    package = normalize_book(payload, cover_bytes=cover_bytes, cover_mime=cover_mime, defaults=defaults)
    opts = options or ExportOptions()

    if target is ExportFormat.epub:
        blob = serialize_archive(build_archive(package, clock=clock))
        result = ExportResult(
            data=blob.data,
            filename=export_filename(package.title, "epub"),
            content_type=EPUB_MIMETYPE,
            format=target,
        )
    elif target is ExportFormat.markdown:
        result = ExportResult(
            data=render_markdown(package).encode("utf-8"),
            filename=export_filename(package.title, "md"),
            content_type="text/markdown; charset=utf-8",
            format=target,
        )
    else:
        page = render_print_html(
            package,
            include_cover=opts.include_cover,
            include_toc=opts.include_toc,
            page_size=opts.page_size,
            margin=opts.margin,
        )
        result = ExportResult(
            data=page.encode("utf-8"),
            filename=export_filename(package.title, "html"),
            content_type="text/html; charset=utf-8",
            format=target,
        )

    log.info(
        "export_complete",
        format=target.value,
        title=package.title,
        chapters=package.chapter_count,
        bytes=result.size,
    )
    return result
