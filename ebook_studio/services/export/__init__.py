# ebook_studio/services/export/__init__.py
# SPDX-License-Identifier: Apache-2.0
"""
Export services for books.

This package provides:
- EPUB archive layout (epub_builder) and zip serialization (serializer)
- Markdown / printable-HTML stand-ins (text_formats)
- Delivery helpers for HTTP attachments and saved files (delivery)

Public entry points:
- service.export_book(payload, fmt, ...)
- epub_builder.build_archive(package, clock?)
- serializer.serialize_archive(manifest)
"""
from __future__ import annotations

__all__ = [
    "delivery",
    "epub_builder",
    "serializer",
    "service",
    "text_formats",
]
