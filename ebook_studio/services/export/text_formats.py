# ebook_studio/services/export/text_formats.py
# SPDX-License-Identifier: Apache-2.0
"""
Plain-text exports that stand in for real PDF/Markdown pipelines:

- render_markdown(): a single Markdown document (YAML front matter + chapters)
- render_print_html(): a printable HTML page (cover page, TOC, chapters) the
  browser can "print to PDF". No PDF is rendered here.
"""
from __future__ import annotations

import html
import re
from typing import List

from markdownify import markdownify

from ...models.package import PackageInput
from .epub_builder import looks_like_html, render_body

MARGINS = {"small": "1.5cm", "medium": "2.5cm", "large": "3cm"}
PAGE_SIZES = ("A4", "A5", "Letter")


def html_to_markdown(body: str) -> str:
    """Chapter body as Markdown; plain-text bodies pass through untouched."""
    if not looks_like_html(body):
        return (body or "").strip()
    out = markdownify(body, heading_style="ATX", bullets="-", strip=["script", "style"])
    return re.sub(r"\n{3,}", "\n\n", out.replace("\xa0", " ")).strip()


def _yaml_quote(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_markdown(package: PackageInput) -> str:
    meta_lines = [
        "---",
        f"title: {_yaml_quote(package.title)}",
        f"author: {_yaml_quote(package.creator)}",
        f"lang: {_yaml_quote(package.language)}",
        f"identifier: {_yaml_quote(package.identifier)}",
    ]
    for key in ("publisher", "description", "subject", "date", "rights"):
        value = getattr(package, key)
        if value:
            meta_lines.append(f"{key}: {_yaml_quote(value)}")
    meta_lines.append("...")

    parts: List[str] = ["\n".join(meta_lines), "", f"# {package.title}", ""]
    for ch in sorted(package.chapters, key=lambda c: c.order):
        parts.append(f"## {ch.title}\n")
        body = html_to_markdown(ch.body_html)
        parts.append(body or "_(empty chapter)_")
        parts.append("")
    return "\n".join(parts).strip() + "\n"


def render_print_html(
    package: PackageInput,
    *,
    include_cover: bool = True,
    include_toc: bool = True,
    page_size: str = "A4",
    margin: str = "medium",
) -> str:
    e = html.escape
    size = page_size if page_size in PAGE_SIZES else "A4"
    margin_css = MARGINS.get(margin, MARGINS["medium"])
    chapters = sorted(package.chapters, key=lambda c: c.order)

    sections: List[str] = []
    if include_cover:
        sections.append(
            '<div class="cover-page">\n'
            f"  <h1>{e(package.title)}</h1>\n"
            f"  <p>By {e(package.creator)}</p>\n"
            "</div>"
        )
    if include_toc and chapters:
        items = "\n".join(
            f'    <li><a href="#chapter{n}">{e(ch.title)}</a></li>'
            for n, ch in enumerate(chapters, start=1)
        )
        sections.append(
            '<div class="toc">\n  <h2>Table of Contents</h2>\n  <ol>\n'
            f"{items}\n  </ol>\n</div>"
        )
    for n, ch in enumerate(chapters, start=1):
        sections.append(
            f'<section class="chapter" id="chapter{n}">\n'
            f"  <h2>{e(ch.title)}</h2>\n"
            f"  <div>{render_body(ch.body_html)}</div>\n"
            "</section>"
        )

    body = "\n".join(sections)
    return f"""<!DOCTYPE html>
<html lang="{e(package.language)}">
<head>
  <meta charset="utf-8">
  <title>{e(package.title)}</title>
  <style>
    @page {{ size: {size}; margin: {margin_css}; }}
    body {{ font-family: 'Times New Roman', serif; line-height: 1.5; }}
    .cover-page, .toc {{ page-break-after: always; }}
    .cover-page h1 {{ font-size: 2em; text-align: center; margin-top: 50%; }}
    .cover-page p {{ text-align: center; margin-top: 2em; }}
    .chapter {{ page-break-before: always; }}
  </style>
</head>
<body>
{body}
</body>
</html>
"""
