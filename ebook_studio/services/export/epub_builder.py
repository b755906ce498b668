# ebook_studio/services/export/epub_builder.py
# SPDX-License-Identifier: Apache-2.0
"""
Archive builder: lay out every file of an EPUB 2/3 package from a
PackageInput. Produces an in-memory manifest; zipping is the serializer's job.

Layout
------
mimetype                     stored, first
META-INF/container.xml       -> OEBPS/content.opf
OEBPS/stylesheet.css
OEBPS/images/cover.<ext>     only with a cover
OEBPS/title.xhtml
OEBPS/chapter{N}.xhtml       N = 1..len(chapters), reading order
OEBPS/nav.xhtml              EPUB3 navigation
OEBPS/content.opf            package document
OEBPS/toc.ncx                EPUB2 navigation
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from xml.sax.saxutils import escape

import structlog
from bs4 import BeautifulSoup

from ...errors import PackagingError
from ...models.package import PackageChapter, PackageInput
from ...utils.time import Clock, SystemClock, format_modified

log = structlog.get_logger("ebook.export.epub")

EPUB_MIMETYPE = "application/epub+zip"
OPF_PATH = "OEBPS/content.opf"

# Raster image types a cover may use, with the file extension they get.
COVER_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}
# Element names that mark a chapter body as editor HTML rather than plain text.
HTML_TAGS = frozenset({
    "a", "abbr", "b", "blockquote", "br", "caption", "center", "cite", "code",
    "col", "colgroup", "dd", "del", "div", "dl", "dt", "em", "figcaption",
    "figure", "font", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img",
    "ins", "li", "mark", "ol", "p", "pre", "q", "s", "section", "small", "span",
    "strike", "strong", "sub", "sup", "table", "tbody", "td", "tfoot", "th",
    "thead", "tr", "u", "ul",
})

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

STYLESHEET_CSS = """body {
  font-family: serif;
  margin: 5%;
  text-align: justify;
}
h1, h2, h3, h4 {
  text-align: center;
  font-family: sans-serif;
}
.title {
  font-size: 2em;
  margin-bottom: 0;
}
.author {
  font-size: 1.5em;
  margin-top: 0;
  margin-bottom: 2em;
}
.chapter {
  margin-top: 2em;
}
.cover {
  text-align: center;
  margin: 0;
  padding: 0;
}
.cover img {
  max-width: 100%;
  max-height: 100%;
}
nav ol {
  list-style-type: none;
}
nav a {
  text-decoration: none;
  color: #0000EE;
}
"""


@dataclass(frozen=True)
class ArchiveEntry:
    path: str
    data: bytes
    compress: bool = True


@dataclass
class ArchiveManifest:
    """Ordered file set of one package plus the values shared across files."""

    identifier: str
    modified: datetime
    entries: List[ArchiveEntry] = field(default_factory=list)

    def add(self, path: str, content: str | bytes, compress: bool = True) -> None:
        data = content.encode("utf-8") if isinstance(content, str) else content
        self.entries.append(ArchiveEntry(path=path, data=data, compress=compress))

    @property
    def paths(self) -> List[str]:
        return [e.path for e in self.entries]

    def get(self, path: str) -> Optional[bytes]:
        for e in self.entries:
            if e.path == path:
                return e.data
        return None

    def text(self, path: str) -> str:
        data = self.get(path)
        if data is None:
            raise KeyError(path)
        return data.decode("utf-8")


# --------------------------------- Helpers ---------------------------------


def xml_escape(value: str) -> str:
    """Escape the five predefined XML entities."""
    return escape(value or "", _XML_ENTITIES)


def _parse_markup(body: str) -> Optional[BeautifulSoup]:
    """Parsed fragment when the body carries real HTML elements, else None."""
    if not body or "<" not in body:
        return None
    soup = BeautifulSoup(body, "html.parser")
    if any(tag.name in HTML_TAGS for tag in soup.find_all(True)):
        return soup
    return None


def looks_like_html(body: str) -> bool:
    return _parse_markup(body) is not None


def render_body(body: str) -> str:
    """
    HTML is re-serialized so stray `&` and unclosed tags come out well-formed.
    Plain text (including text that merely contains `<word>`) is escaped and
    its newlines become explicit line breaks.
    """
    soup = _parse_markup(body)
    if soup is not None:
        return soup.decode(formatter="minimal")
    text = (body or "").replace("\r\n", "\n").replace("\r", "\n")
    return xml_escape(text).replace("\n", "<br/>")


def cover_extension(mime_type: str) -> str:
    ext = COVER_EXTENSIONS.get((mime_type or "").lower())
    if ext is None:
        raise PackagingError(
            f"unsupported cover image type: {mime_type or '(none)'}",
            details={"supported": sorted(set(COVER_EXTENSIONS))},
        )
    return ext


def chapter_filename(n: int) -> str:
    return f"chapter{n}.xhtml"


def _xhtml_document(title: str, body: str) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
  <title>{xml_escape(title)}</title>
  <link rel="stylesheet" type="text/css" href="stylesheet.css" />
</head>
<body>
{body}
</body>
</html>
"""


# --------------------------------- Documents ---------------------------------


def render_title_page(package: PackageInput, cover_href: Optional[str]) -> str:
    parts = []
    if cover_href:
        parts.append(f'  <div class="cover"><img src="{xml_escape(cover_href)}" alt="Cover" /></div>')
    parts.append(f'  <h1 class="title">{xml_escape(package.title)}</h1>')
    parts.append(f'  <h2 class="author">{xml_escape(package.creator)}</h2>')
    return _xhtml_document(package.title, "\n".join(parts))


def render_chapter(chapter: PackageChapter) -> str:
    body = (
        f'  <h2 class="chapter">{xml_escape(chapter.title)}</h2>\n'
        f"  <div>{render_body(chapter.body_html)}</div>"
    )
    return _xhtml_document(chapter.title, body)


def render_nav(chapters: Sequence[PackageChapter]) -> str:
    items = ['      <li><a href="title.xhtml">Title Page</a></li>']
    for n, ch in enumerate(chapters, start=1):
        items.append(f'      <li><a href="{chapter_filename(n)}">{xml_escape(ch.title)}</a></li>')
    body = (
        '  <nav epub:type="toc" id="toc">\n'
        "    <h1>Table of Contents</h1>\n"
        "    <ol>\n"
        + "\n".join(items)
        + "\n    </ol>\n"
        "  </nav>"
    )
    return _xhtml_document("Navigation", body)


def render_opf(
    package: PackageInput,
    chapters: Sequence[PackageChapter],
    modified: datetime,
    cover_href: Optional[str],
) -> str:
    meta: List[str] = [
        f'    <dc:identifier id="BookID">{xml_escape(package.identifier)}</dc:identifier>',
        f"    <dc:title>{xml_escape(package.title)}</dc:title>",
        f"    <dc:creator>{xml_escape(package.creator)}</dc:creator>",
        f"    <dc:language>{xml_escape(package.language)}</dc:language>",
    ]
    optional = (
        ("date", package.date),
        ("description", package.description),
        ("publisher", package.publisher),
        ("subject", package.subject),
        ("rights", package.rights),
    )
    for tag, value in optional:
        if value:
            meta.append(f"    <dc:{tag}>{xml_escape(value)}</dc:{tag}>")
    if package.isbn:
        meta.append(f'    <dc:identifier id="ISBN">{xml_escape(package.isbn)}</dc:identifier>')
    if cover_href:
        meta.append('    <meta name="cover" content="cover-image" />')
    meta.append(f'    <meta property="dcterms:modified">{format_modified(modified)}</meta>')

    manifest: List[str] = [
        '    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml" />',
        '    <item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav" />',
        '    <item id="stylesheet" href="stylesheet.css" media-type="text/css" />',
        '    <item id="title" href="title.xhtml" media-type="application/xhtml+xml" />',
    ]
    for n in range(1, len(chapters) + 1):
        manifest.append(
            f'    <item id="chapter{n}" href="{chapter_filename(n)}" media-type="application/xhtml+xml" />'
        )
    if cover_href and package.cover is not None:
        manifest.append(
            f'    <item id="cover-image" href="{xml_escape(cover_href)}" '
            f'media-type="{xml_escape(package.cover.mime_type.lower())}" properties="cover-image" />'
        )

    spine = ['    <itemref idref="title" />']
    spine.extend(f'    <itemref idref="chapter{n}" />' for n in range(1, len(chapters) + 1))
    spine.append('    <itemref idref="nav" />')

    nl = "\n"
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="BookID">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
{nl.join(meta)}
  </metadata>
  <manifest>
{nl.join(manifest)}
  </manifest>
  <spine toc="ncx">
{nl.join(spine)}
  </spine>
  <guide>
    <reference type="cover" title="Cover" href="title.xhtml" />
    <reference type="toc" title="Table of Contents" href="nav.xhtml" />
  </guide>
</package>
"""


def render_ncx(package: PackageInput, chapters: Sequence[PackageChapter]) -> str:
    points = [("Title Page", "title.xhtml")]
    points.extend((ch.title, chapter_filename(n)) for n, ch in enumerate(chapters, start=1))
    nav_points = []
    for play_order, (label, src) in enumerate(points, start=1):
        nav_points.append(
            f'    <navPoint id="navpoint-{play_order}" playOrder="{play_order}">\n'
            f"      <navLabel>\n"
            f"        <text>{xml_escape(label)}</text>\n"
            f"      </navLabel>\n"
            f'      <content src="{src}" />\n'
            f"    </navPoint>"
        )
    nl = "\n"
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <head>
    <meta name="dtb:uid" content="{xml_escape(package.identifier)}" />
    <meta name="dtb:depth" content="1" />
    <meta name="dtb:totalPageCount" content="0" />
    <meta name="dtb:maxPageNumber" content="0" />
  </head>
  <docTitle>
    <text>{xml_escape(package.title)}</text>
  </docTitle>
  <docAuthor>
    <text>{xml_escape(package.creator)}</text>
  </docAuthor>
  <navMap>
{nl.join(nav_points)}
  </navMap>
</ncx>
"""


# -------------------------------- Entry point --------------------------------


def build_archive(package: PackageInput, *, clock: Optional[Clock] = None) -> ArchiveManifest:
    """
    Lay out the full file set for `package`.

    Raises PackagingError when there is no chapter or the cover type is not a
    recognised raster image.
    """
    if not package.chapters:
        raise PackagingError("cannot build an EPUB without chapters")

    cover_href: Optional[str] = None
    if package.cover is not None:
        cover_href = f"images/cover.{cover_extension(package.cover.mime_type)}"

    # Stable: equal orders keep their input sequence.
    chapters = sorted(package.chapters, key=lambda ch: ch.order)
    modified = (clock or SystemClock()).now()

    manifest = ArchiveManifest(identifier=package.identifier, modified=modified)
    manifest.add("mimetype", EPUB_MIMETYPE, compress=False)
    manifest.add("META-INF/container.xml", CONTAINER_XML)
    manifest.add("OEBPS/stylesheet.css", STYLESHEET_CSS)
    if cover_href and package.cover is not None:
        manifest.add(f"OEBPS/{cover_href}", package.cover.data)
    manifest.add("OEBPS/title.xhtml", render_title_page(package, cover_href))
    for n, chapter in enumerate(chapters, start=1):
        manifest.add(f"OEBPS/{chapter_filename(n)}", render_chapter(chapter))
    manifest.add("OEBPS/nav.xhtml", render_nav(chapters))
    manifest.add(OPF_PATH, render_opf(package, chapters, modified, cover_href))
    manifest.add("OEBPS/toc.ncx", render_ncx(package, chapters))

    log.info(
        "epub_manifest_built",
        title=package.title,
        chapters=len(chapters),
        files=len(manifest.entries),
        cover=cover_href,
    )
    return manifest
