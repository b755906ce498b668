# SPDX-License-Identifier: Apache-2.0
"""
ebook_studio

Backend package for the ebook authoring tool: EPUB packaging core plus the
Flask API that serves exports.
Exposes nothing at import-time beyond package markers to keep startup fast.
"""
from __future__ import annotations

__all__ = []
