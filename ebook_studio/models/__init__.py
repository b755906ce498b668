# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

# Re-export commonly used models for convenience
from .book import Book, BookMetadata, BookPayload, Chapter, ChapterPayload, MetadataPayload
from .package import CoverImage, PackageChapter, PackageInput
from .responses import ApiError, ErrorResponse

__all__ = [
    "Book",
    "BookMetadata",
    "BookPayload",
    "Chapter",
    "ChapterPayload",
    "MetadataPayload",
    "CoverImage",
    "PackageChapter",
    "PackageInput",
    "ApiError",
    "ErrorResponse",
]
