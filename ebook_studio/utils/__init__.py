# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations
"""
Utility package for ebook_studio.
Exports:
- fs: filesystem helpers (export filenames, output directories)
- time: clock abstraction and timestamp formatting
"""
from . import fs as fs  # re-export
from . import time as time  # re-export
__all__ = ["fs", "time"]
