# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

# Keys that may carry a chapter body, in order of preference.
BODY_KEYS = ("content", "bodyHtml", "body_html", "body", "data", "text")

METADATA_KEYS = {
    "title",
    "creator",
    "author",
    "authors",
    "language",
    "identifier",
    "isbn",
    "description",
    "publisher",
    "subject",
    "genre",
    "date",
    "rights",
    "coverImage",
    "cover_image",
    "cover",
}


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


# ----------------------------- Loose input shapes -----------------------------


class ChapterPayload(BaseModel):
    """
    A chapter as the editor or an API client sends it. Everything is optional;
    the normalizer fills the gaps.
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    order: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _pick_body(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in BODY_KEYS:
            val = data.get(key)
            if isinstance(val, str) and val.strip():
                data["content"] = val
                break
        return data

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        v = _blank_to_none(v)
        return str(v).strip() if v is not None else None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v):
        return None if v is None else str(v)

    @field_validator("order", mode="before")
    @classmethod
    def _lenient_order(cls, v):
        # Storage may hold "2", 2.0 or garbage; only integers participate in sorting.
        if v is None or isinstance(v, bool):
            return None
        try:
            f = float(v)
        except (TypeError, ValueError):
            return None
        if f != f or f in (float("inf"), float("-inf")):
            return None
        return int(f)


class MetadataPayload(BaseModel):
    """
    Book metadata in either of the shapes the editor produces:
    `author`/`isbn` (store data) or `creator`/`identifier` (EPUB form).
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: Optional[str] = None
    creator: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("creator", "author", "authors")
    )
    language: Optional[str] = None
    identifier: Optional[str] = None
    isbn: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    subject: Optional[str] = Field(default=None, validation_alias=AliasChoices("subject", "genre"))
    date: Optional[str] = None
    rights: Optional[str] = None
    coverImage: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("coverImage", "cover_image", "cover")
    )

    @field_validator(
        "title", "creator", "language", "identifier", "isbn", "description",
        "publisher", "subject", "date", "rights", "coverImage",
        mode="before",
    )
    @classmethod
    def _strip(cls, v):
        if isinstance(v, (list, tuple)):
            # authors: ["A", "B"] -> "A, B"
            v = ", ".join(str(a).strip() for a in v if str(a).strip())
        v = _blank_to_none(v)
        if v is None:
            return None
        return str(v).strip()


class BookPayload(BaseModel):
    """
    Export request body. Accepts `{"metadata": {...}, "chapters": [...]}` or a
    flat record with the metadata keys at the top level.
    """
    model_config = ConfigDict(extra="ignore")

    metadata: MetadataPayload = Field(default_factory=MetadataPayload)
    chapters: Optional[List[ChapterPayload]] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_metadata(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if isinstance(data.get("metadata"), dict):
            return data
        flat = {k: v for k, v in data.items() if k in METADATA_KEYS}
        rest = {k: v for k, v in data.items() if k not in METADATA_KEYS and k != "metadata"}
        return {**rest, "metadata": flat}


# -------------------------------- Stored books --------------------------------


class Chapter(BaseModel):
    id: str
    title: str = "Chapter 1"
    content: str = ""
    order: int = 0
    createdAt: Optional[str] = None
    lastModified: Optional[str] = None


class BookMetadata(BaseModel):
    title: str = "Untitled Book"
    author: str = ""
    description: str = ""
    language: str = "en"
    isbn: str = ""
    publisher: str = ""
    subject: str = ""
    date: str = ""
    rights: str = ""
    coverImage: Optional[str] = None
    createdAt: Optional[str] = None
    lastModified: Optional[str] = None
    createdBy: Optional[str] = None


class Book(BaseModel):
    """
    A book as the editor stores it. Chapter `order` values need not be
    contiguous; export re-derives the reading order.
    """
    id: str
    metadata: BookMetadata = Field(default_factory=BookMetadata)
    chapters: List[Chapter] = Field(default_factory=list)
