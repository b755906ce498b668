# ebook_studio/routes/books.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import uuid
from typing import Any

import pydantic
from flask import Blueprint, request

from ..errors import ValidationError
from ..models.book import Book
from ..services.export.delivery import attachment_response
from ..services.export.service import resolve_format
from . import app_repository, json_ok
from .exports import run_export

bp = Blueprint("books", __name__)


def _book_from_body(book_id: str | None = None) -> Book:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON book object")
    data = dict(data)
    data["id"] = book_id or str(data.get("id") or uuid.uuid4())
    for ch in data.get("chapters") or []:
        if isinstance(ch, dict) and not ch.get("id"):
            ch["id"] = str(uuid.uuid4())
    try:
        return Book.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            "invalid book",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


@bp.get("")
def list_books() -> Any:
    books = app_repository().list()
    return json_ok({"books": [b.model_dump() for b in books]})


@bp.post("")
def create_book() -> Any:
    """
    POST /api/books
    Empty body -> a new "Untitled Book" with one empty chapter.
    JSON body  -> stored as given (ids are generated when missing).
    """
    repo = app_repository()
    if not request.get_data():
        book = repo.new_book()
    else:
        book = repo.put(_book_from_body())
    return json_ok({"book": book.model_dump()}, status=201)


@bp.get("/<book_id>")
def get_book(book_id: str) -> Any:
    return json_ok({"book": app_repository().get(book_id).model_dump()})


@bp.put("/<book_id>")
def update_book(book_id: str) -> Any:
    repo = app_repository()
    repo.get(book_id)  # 404 for unknown ids; PUT does not create
    book = repo.put(_book_from_body(book_id))
    return json_ok({"book": book.model_dump()})


@bp.delete("/<book_id>")
def delete_book(book_id: str) -> Any:
    app_repository().delete(book_id)
    return json_ok({"deleted": book_id})


@bp.get("/<book_id>/export")
def export_stored_book(book_id: str):
    """
    GET /api/books/<id>/export?format=epub|markdown|pdf
    Exports the stored book as it is right now.
    """
    fmt = request.args.get("format", "epub")
    resolve_format(fmt)
    book = app_repository().get(book_id)
    result = run_export(book.model_dump(), fmt)
    return attachment_response(result.data, result.filename, result.content_type)
