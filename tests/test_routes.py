# tests/test_routes.py
from __future__ import annotations

import io
import json
import zipfile


def _zip(resp) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(resp.data))


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert "epub" in body["info"]["formats"]
    assert "azw3" in body["info"]["unsupported_formats"]
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_export_epub_from_json(client, sample_book):
    resp = client.post("/api/exports/epub", json=sample_book)
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "application/epub+zip"
    assert resp.headers["Content-Disposition"] == 'attachment; filename="my-book.epub"'
    assert int(resp.headers["Content-Length"]) == len(resp.data)
    with _zip(resp) as zf:
        assert zf.infolist()[0].filename == "mimetype"
        assert zf.infolist()[0].compress_type == zipfile.ZIP_STORED
        opf = zf.read("OEBPS/content.opf").decode("utf-8")
        assert "<dc:creator>Ada Writer</dc:creator>" in opf
        assert "2025-05-22T10:22:05Z" in opf


def test_export_filename_is_sanitized(client):
    payload = {"metadata": {"title": "Tom & Jerry: <Special>!"}, "chapters": [{"title": "x", "content": "y"}]}
    resp = client.post("/api/exports/epub", json=payload)
    assert resp.status_code == 200
    assert resp.headers["Content-Disposition"] == 'attachment; filename="tom-jerry-special.epub"'


def test_export_with_data_url_cover(client, sample_book, png_bytes, png_data_url):
    sample_book["metadata"]["coverImage"] = png_data_url
    resp = client.post("/api/exports/epub", json=sample_book)
    assert resp.status_code == 200
    with _zip(resp) as zf:
        assert zf.read("OEBPS/images/cover.png") == png_bytes


def test_export_multipart_with_uploaded_cover(client, sample_book, png_bytes):
    resp = client.post(
        "/api/exports/epub",
        data={
            "book": json.dumps(sample_book),
            "coverImage": (io.BytesIO(png_bytes), "cover.png", "image/png"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    with _zip(resp) as zf:
        assert zf.read("OEBPS/images/cover.png") == png_bytes
        assert 'media-type="image/png" properties="cover-image"' in zf.read("OEBPS/content.opf").decode("utf-8")


def test_multipart_without_book_field(client):
    resp = client.post("/api/exports/epub", data={"other": "x"}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "validation_error"


def test_azw3_is_unsupported(client, sample_book):
    resp = client.post("/api/exports/azw3", json=sample_book)
    assert resp.status_code == 501
    body = resp.get_json()
    assert body["ok"] is False
    assert body["error"]["code"] == "unsupported_format"
    assert "EPUB" in body["error"]["message"]
    assert "Content-Disposition" not in resp.headers


def test_empty_record_is_rejected(client):
    resp = client.post("/api/exports/epub", json={})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "validation_error"


def test_non_json_body_is_rejected(client):
    resp = client.post("/api/exports/epub", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_zero_chapters_is_a_packaging_failure(client):
    resp = client.post("/api/exports/epub", json={"metadata": {"title": "Nothing yet"}, "chapters": []})
    assert resp.status_code == 422
    assert resp.get_json()["error"]["code"] == "packaging_error"


def test_unsupported_cover_type_is_a_packaging_failure(client, sample_book):
    sample_book["metadata"]["coverImage"] = "data:image/tiff;base64,SUkqAA=="
    resp = client.post("/api/exports/epub", json=sample_book)
    assert resp.status_code == 422


def test_markdown_export(client, sample_book):
    resp = client.post("/api/exports/markdown", json=sample_book)
    assert resp.status_code == 200
    assert resp.headers["Content-Disposition"] == 'attachment; filename="my-book.md"'
    assert resp.data.decode("utf-8").startswith("---")


def test_print_export_options_from_query(client, sample_book):
    resp = client.post("/api/exports/pdf?include_toc=false", json=sample_book)
    assert resp.status_code == 200
    page = resp.data.decode("utf-8")
    assert "Table of Contents" not in page
    assert 'class="cover-page"' in page


def test_unknown_route_uses_json_envelope(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


# ------------------------------------ books ------------------------------------


def test_book_lifecycle_and_export(client):
    created = client.post("/api/books")
    assert created.status_code == 201
    book = created.get_json()["book"]
    assert book["metadata"]["title"] == "Untitled Book"
    assert book["metadata"]["createdBy"] == "tester"
    assert book["metadata"]["createdAt"] == "2025-05-22T10:22:05Z"
    assert len(book["chapters"]) == 1

    book["metadata"]["title"] = "Stored Story"
    book["chapters"] = [
        {"title": "Two", "content": "second", "order": 7},
        {"title": "One", "content": "first", "order": 3},
    ]
    updated = client.put(f"/api/books/{book['id']}", json=book)
    assert updated.status_code == 200
    assert all(ch["id"] for ch in updated.get_json()["book"]["chapters"])

    listed = client.get("/api/books").get_json()["books"]
    assert [b["id"] for b in listed] == [book["id"]]

    resp = client.get(f"/api/books/{book['id']}/export?format=epub")
    assert resp.status_code == 200
    assert resp.headers["Content-Disposition"] == 'attachment; filename="stored-story.epub"'
    with _zip(resp) as zf:
        assert "One" in zf.read("OEBPS/chapter1.xhtml").decode("utf-8")
        assert "Two" in zf.read("OEBPS/chapter2.xhtml").decode("utf-8")

    kindle = client.get(f"/api/books/{book['id']}/export?format=azw3")
    assert kindle.status_code == 501

    assert client.delete(f"/api/books/{book['id']}").status_code == 200
    missing = client.get(f"/api/books/{book['id']}")
    assert missing.status_code == 404
    assert missing.get_json()["error"]["code"] == "not_found"


def test_create_book_from_body(client):
    resp = client.post("/api/books", json={"metadata": {"title": "Given"}, "chapters": [{"title": "c"}]})
    assert resp.status_code == 201
    book = resp.get_json()["book"]
    assert book["id"]
    assert book["chapters"][0]["id"]


def test_put_unknown_book_is_404(client):
    resp = client.put("/api/books/nope", json={"metadata": {"title": "x"}})
    assert resp.status_code == 404


def test_failed_export_leaves_store_untouched(client):
    book = client.post("/api/books", json={"metadata": {"title": "Keep"}, "chapters": []}).get_json()["book"]
    resp = client.get(f"/api/books/{book['id']}/export")
    assert resp.status_code == 422
    again = client.get(f"/api/books/{book['id']}").get_json()["book"]
    assert again == book


def test_print_options_from_multipart_form(client, sample_book):
    resp = client.post(
        "/api/exports/pdf",
        data={"book": json.dumps(sample_book), "include_toc": "false", "include_cover": "0"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    page = resp.data.decode("utf-8")
    assert "Table of Contents" not in page
    assert 'class="cover-page"' not in page
