#!/usr/bin/env python3
# scripts/export_book.py
from __future__ import annotations
import argparse, json, mimetypes, sys
from pathlib import Path

from ebook_studio.config import Settings
from ebook_studio.errors import ExportError
from ebook_studio.logging import setup_logging
from ebook_studio.services.export.delivery import save_file
from ebook_studio.services.export.service import ExportOptions, export_book

def main(argv=None):
    cfg = Settings()
    ap = argparse.ArgumentParser("Export a book JSON record as EPUB / Markdown / printable HTML")
    ap.add_argument("book", help="Path to a JSON book record ({metadata, chapters})")
    ap.add_argument("--format", default="epub", help="epub | markdown | pdf (azw3 is not supported)")
    ap.add_argument("--out", default=str(cfg.EXPORT_DIR), help="Output directory")
    ap.add_argument("--cover", default=None, help="Optional cover image file (overrides metadata.coverImage)")
    ap.add_argument("--no-cover-page", action="store_true", help="markdown/pdf: skip the cover page")
    ap.add_argument("--no-toc", action="store_true", help="markdown/pdf: skip the table of contents")
    ap.add_argument("--log-level", default=cfg.LOG_LEVEL)
    a = ap.parse_args(argv)
    setup_logging(a.log_level)

    src = Path(a.book).expanduser().resolve()
    if not src.exists():
        print(f"❌ Book file not found: {src}")
        return 2
    try:
        payload = json.loads(src.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"❌ Not valid JSON: {src} ({e.msg})"); return 3

    cover_bytes = cover_mime = None
    if a.cover:
        cover = Path(a.cover).expanduser().resolve()
        if not cover.exists():
            print(f"❌ Cover not found: {cover}"); return 2
        cover_bytes = cover.read_bytes()
        cover_mime = mimetypes.guess_type(cover.name)[0]

    try:
        result = export_book(
            payload,
            a.format,
            cover_bytes=cover_bytes,
            cover_mime=cover_mime,
            defaults=cfg.export_defaults(),
            options=ExportOptions(include_cover=not a.no_cover_page, include_toc=not a.no_toc),
        )
    except ExportError as e:
        print(f"❌ Export failed ({e.code}): {e.message}")
        return 4
    path = save_file(result.data, result.filename, a.out)
    print(f"✅ Wrote {path} ({result.size} bytes)")
    return 0

if __name__ == "__main__":
    sys.exit(main())
