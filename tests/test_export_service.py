# tests/test_export_service.py
from __future__ import annotations

import io
import zipfile

import pytest

from ebook_studio.errors import PackagingError, UnsupportedFormatError, ValidationError
from ebook_studio.services.export import service
from ebook_studio.services.export.service import ExportFormat, ExportOptions, export_book, resolve_format
from ebook_studio.services.export.text_formats import html_to_markdown


def test_epub_export_result(sample_book, clock):
    result = export_book(sample_book, "epub", clock=clock)
    assert result.format is ExportFormat.epub
    assert result.filename == "my-book.epub"
    assert result.content_type == "application/epub+zip"
    with zipfile.ZipFile(io.BytesIO(result.data)) as zf:
        assert zf.namelist()[0] == "mimetype"
        assert "A" in zf.read("OEBPS/chapter1.xhtml").decode("utf-8")


def test_each_call_gets_a_fresh_identifier(sample_book, clock):
    first = export_book(sample_book, clock=clock)
    second = export_book(sample_book, clock=clock)
    with zipfile.ZipFile(io.BytesIO(first.data)) as a, zipfile.ZipFile(io.BytesIO(second.data)) as b:
        assert a.namelist() == b.namelist()
        assert a.read("OEBPS/nav.xhtml") == b.read("OEBPS/nav.xhtml")
        assert a.read("OEBPS/content.opf") != b.read("OEBPS/content.opf")


@pytest.mark.parametrize("fmt", ["azw3", "AZW3", "kindle", "mobi"])
def test_kindle_formats_are_rejected_before_any_work(fmt, sample_book, monkeypatch):
    def _boom(*args, **kwargs):
        raise AssertionError("normalizer must not run for unsupported formats")

    monkeypatch.setattr(service, "normalize_book", _boom)
    with pytest.raises(UnsupportedFormatError) as exc:
        export_book(sample_book, fmt)
    assert "external conversion" in exc.value.message


def test_unknown_format_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        resolve_format("docx")


def test_format_aliases():
    assert resolve_format(None) is ExportFormat.epub
    assert resolve_format(".md") is ExportFormat.markdown
    assert resolve_format("html") is ExportFormat.pdf


def test_zero_chapters_raise_packaging_error():
    with pytest.raises(PackagingError):
        export_book({"metadata": {"title": "Empty"}, "chapters": []})


def test_empty_record_raises_validation_error():
    with pytest.raises(ValidationError):
        export_book({})


def test_markdown_stand_in(sample_book):
    result = export_book(sample_book, "markdown")
    text = result.data.decode("utf-8")
    assert result.filename == "my-book.md"
    assert result.content_type.startswith("text/markdown")
    assert text.startswith("---\ntitle: \"My Book\"\nauthor: \"Ada Writer\"")
    assert text.index("## A") < text.index("## B") < text.index("## C")


def test_print_html_stand_in_honours_options(sample_book):
    full = export_book(sample_book, "pdf").data.decode("utf-8")
    assert result_has_toc(full)
    assert 'class="cover-page"' in full

    bare = export_book(sample_book, "pdf", options=ExportOptions(include_cover=False, include_toc=False))
    page = bare.data.decode("utf-8")
    assert bare.filename == "my-book.html"
    assert not result_has_toc(page)
    assert 'class="cover-page"' not in page
    assert page.index('id="chapter1"') < page.index('id="chapter2"')


def result_has_toc(page: str) -> bool:
    return "<h2>Table of Contents</h2>" in page


def test_html_to_markdown_basics():
    html = "<h1>Title</h1><p>Some <strong>bold</strong> and <em>soft</em> text.</p><ul><li>one</li><li>two</li></ul>"
    md = html_to_markdown(html)
    assert md.startswith("# Title")
    assert "Some **bold** and *soft* text." in md
    assert "- one\n- two" in md
    assert html_to_markdown("just text") == "just text"


def test_html_to_markdown_keeps_links_and_attributed_emphasis():
    html = '<p>See <a href="https://x.org">site</a> and <strong class="k">bold</strong> <b style="c">b2</b></p>'
    md = html_to_markdown(html)
    assert "[site](https://x.org)" in md
    assert "**bold**" in md
    assert "**b2**" in md


def test_text_with_angle_brackets_is_not_converted():
    assert html_to_markdown("Tom & Jerry <Special>") == "Tom & Jerry <Special>"


def test_markdown_front_matter_quotes_language(sample_book):
    sample_book["metadata"]["language"] = "en-US"
    text = export_book(sample_book, "markdown").data.decode("utf-8")
    assert 'lang: "en-US"' in text
