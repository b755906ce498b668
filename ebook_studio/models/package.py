# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class CoverImage(BaseModel):
    """Raw cover bytes plus the mime type they were declared with."""
    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str


class PackageChapter(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    body_html: str = ""
    order: int = 0


class PackageInput(BaseModel):
    """
    Canonical, fully-defaulted view of a book, built fresh for every export
    and never persisted.
    """
    model_config = ConfigDict(frozen=True)

    title: str = "Untitled Book"
    creator: str = "Unknown"
    language: str = "en"
    identifier: str
    isbn: str = ""  # secondary identifier; never replaces `identifier`
    description: str = ""
    publisher: str = ""
    subject: str = ""
    date: str = ""
    rights: str = ""
    cover: Optional[CoverImage] = None
    chapters: List[PackageChapter] = Field(default_factory=list)

    @computed_field
    @property
    def chapter_count(self) -> int:
        return len(self.chapters)
