# SPDX-License-Identifier: Apache-2.0
"""
Input normalizer: turn whatever book record the editor (or an API client)
hands over into a fully-defaulted PackageInput.

Missing fields are filled rather than rejected; the only hard failure is a
record with neither a title nor any chapter.
"""
from __future__ import annotations

import base64
import binascii
import re
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pydantic
import structlog

from ..errors import ValidationError
from ..models.book import BookPayload, ChapterPayload
from ..models.package import CoverImage, PackageChapter, PackageInput

log = structlog.get_logger("ebook.normalizer")

DEFAULT_TITLE = "Untitled Book"
DEFAULT_CREATOR = "Unknown"
DEFAULT_LANGUAGE = "en"

_DATA_URL_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[^,;]+)*?)(?P<b64>;base64)?,(?P<data>.*)$",
    re.IGNORECASE | re.DOTALL,
)


def new_identifier() -> str:
    return f"urn:uuid:{uuid.uuid4()}"


# ------------------------------- Cover images -------------------------------


def decode_data_url(value: str) -> Optional[CoverImage]:
    """
    Decode `data:image/png;base64,....` into a CoverImage.
    Returns None for anything that is not a base64 data URL.
    """
    m = _DATA_URL_RE.match((value or "").strip())
    if not m or not m.group("b64"):
        return None
    mime = (m.group("mime") or "").lower()
    if not mime:
        return None
    payload = re.sub(r"\s+", "", m.group("data"))
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
    if not raw:
        return None
    return CoverImage(data=raw, mime_type=mime)


def _resolve_cover(
    cover_value: Optional[str],
    cover_bytes: Optional[bytes],
    cover_mime: Optional[str],
) -> Optional[CoverImage]:
    # An uploaded file wins over an inlined data URL.
    if cover_bytes:
        mime = (cover_mime or "").strip().lower()
        if not mime:
            log.warning("cover_dropped", reason="missing mime type for uploaded cover")
            return None
        return CoverImage(data=bytes(cover_bytes), mime_type=mime)
    if not cover_value:
        return None
    cover = decode_data_url(cover_value)
    if cover is None:
        log.warning("cover_dropped", reason="not a base64 data URL", prefix=cover_value[:32])
    return cover


# --------------------------------- Chapters ---------------------------------


def _sort_key(indexed: Tuple[int, ChapterPayload]) -> Tuple[int, int]:
    _, ch = indexed
    # Chapters without an order go after every ordered one; sorted() is stable.
    if ch.order is None:
        return (1, 0)
    return (0, ch.order)


def order_chapters(chapters: List[ChapterPayload]) -> List[PackageChapter]:
    ordered = sorted(enumerate(chapters), key=_sort_key)
    out: List[PackageChapter] = []
    for position, (_, ch) in enumerate(ordered, start=1):
        out.append(
            PackageChapter(
                title=ch.title or f"Chapter {position}",
                body_html=ch.content or "",
                order=position,
            )
        )
    return out


# --------------------------------- Entry point --------------------------------


def normalize_book(
    payload: Any,
    *,
    cover_bytes: Optional[bytes] = None,
    cover_mime: Optional[str] = None,
    id_factory: Optional[Callable[[], str]] = None,
    defaults: Optional[Mapping[str, str]] = None,
) -> PackageInput:
    """
    Build a PackageInput from a loosely-typed book record.

    `defaults` may override the fallback title/creator/language (see
    Settings.export_defaults). `id_factory` supplies the primary identifier
    when the record carries none.
    """
    if isinstance(payload, BookPayload):
        book = payload
    else:
        if not isinstance(payload, Mapping):
            raise ValidationError(
                "book record must be a JSON object",
                details={"type": type(payload).__name__},
            )
        try:
            book = BookPayload.model_validate(dict(payload))
        except pydantic.ValidationError as e:
            raise ValidationError(
                "book record could not be read",
                details=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

    meta = book.metadata
    chapters = book.chapters or []
    if not meta.title and not chapters:
        raise ValidationError("nothing to package: book has neither a title nor any chapter")

    fallback: Dict[str, str] = {
        "title": DEFAULT_TITLE,
        "creator": DEFAULT_CREATOR,
        "language": DEFAULT_LANGUAGE,
    }
    if defaults:
        fallback.update({k: v for k, v in defaults.items() if v})

    identifier = meta.identifier or (id_factory or new_identifier)()
    isbn = meta.isbn or ""
    if isbn == identifier:
        isbn = ""

    package = PackageInput(
        title=meta.title or fallback["title"],
        creator=meta.creator or fallback["creator"],
        language=meta.language or fallback["language"],
        identifier=identifier,
        isbn=isbn,
        description=meta.description or "",
        publisher=meta.publisher or "",
        subject=meta.subject or "",
        date=meta.date or "",
        rights=meta.rights or "",
        cover=_resolve_cover(meta.coverImage, cover_bytes, cover_mime),
        chapters=order_chapters(chapters),
    )
    log.debug(
        "book_normalized",
        title=package.title,
        chapters=package.chapter_count,
        has_cover=package.cover is not None,
    )
    return package
