# SPDX-License-Identifier: Apache-2.0
"""
Error kinds raised by the export pipeline.

Every error is local to a single export call; none of them touch the book
store. The Flask app maps them onto the standard JSON error envelope using
`code` and `http_status`.
"""
from __future__ import annotations

from typing import Any, Optional


class ExportError(Exception):
    code = "export_error"
    http_status = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ExportError):
    """Input carries nothing to package (or cannot be read at all)."""

    code = "validation_error"
    http_status = 400


class PackagingError(ExportError):
    """The archive builder refused the input (no chapters, bad cover type)."""

    code = "packaging_error"
    http_status = 422


class UnsupportedFormatError(ExportError):
    code = "unsupported_format"
    http_status = 501


class SerializationError(ExportError):
    """Zip stream construction failed."""

    code = "serialization_error"
    http_status = 500


class BookNotFoundError(ExportError):
    code = "not_found"
    http_status = 404
