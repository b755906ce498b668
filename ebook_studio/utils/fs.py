# SPDX-License-Identifier: Apache-2.0
"""
Filesystem utilities: export filenames and output directories.

The same filename rule is used for HTTP attachments and files saved to disk,
so a title never yields header- or filesystem-hostile characters.
"""

from __future__ import annotations

import re
from pathlib import Path

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


# -------------------------- Names & directories --------------------------


def sanitize_filename(name: str, default: str = "book") -> str:
    """
    Lower-case `name` and collapse every run of non-alphanumeric characters
    into a single "-". "Tom & Jerry: Part 2" -> "tom-jerry-part-2".
    """
    s = _NON_ALNUM_RE.sub("-", (name or "").lower()).strip("-")
    return s or default


def export_filename(title: str, ext: str) -> str:
    return f"{sanitize_filename(title)}.{ext.lstrip('.')}"


def ensure_dir(path: Path | str) -> Path:
    p = Path(path).expanduser().resolve()
    p.mkdir(parents=True, exist_ok=True)
    return p
