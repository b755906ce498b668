# SPDX-License-Identifier: Apache-2.0
"""
Book store used by the editor API.

The export pipeline never touches this module: routes read a Book, dump it
and hand the snapshot to export_book().
"""
from __future__ import annotations

import threading
import uuid
from typing import Callable, Dict, List, Optional, Protocol

import structlog

from ..errors import BookNotFoundError
from ..models.book import Book, BookMetadata, Chapter
from ..utils.time import Clock, SystemClock, format_modified
from .identity import IdentityProvider, StaticIdentity

log = structlog.get_logger("ebook.repository")

Listener = Callable[[str, Book], None]


class BookRepository(Protocol):
    def get(self, book_id: str) -> Book: ...

    def put(self, book: Book) -> Book: ...

    def list(self) -> List[Book]: ...

    def delete(self, book_id: str) -> None: ...

    def subscribe(self, listener: Listener) -> Callable[[], None]: ...


class InMemoryBookRepository:
    """
    Thread-safe dict-backed store.

    put() stamps lastModified (and createdAt/createdBy on first insert) from
    the injected clock and identity. Listeners get ("put" | "delete", book)
    after the change is applied, outside the lock.
    """

    def __init__(self, clock: Optional[Clock] = None, identity: Optional[IdentityProvider] = None):
        self._clock = clock or SystemClock()
        self._identity = identity or StaticIdentity()
        self._books: Dict[str, Book] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ reads

    def get(self, book_id: str) -> Book:
        with self._lock:
            book = self._books.get(book_id)
        if book is None:
            raise BookNotFoundError(f"book not found: {book_id}", details={"id": book_id})
        return book.model_copy(deep=True)

    def list(self) -> List[Book]:
        with self._lock:
            books = list(self._books.values())
        return [b.model_copy(deep=True) for b in books]

    # ----------------------------------------------------------------- writes

    def new_book(self) -> Book:
        """A fresh book with one empty chapter, stored and returned."""
        book = Book(
            id=str(uuid.uuid4()),
            metadata=BookMetadata(author=self._identity.current_user()),
            chapters=[Chapter(id=str(uuid.uuid4()), title="Chapter 1", order=0)],
        )
        return self.put(book)

    def put(self, book: Book) -> Book:
        stamp = format_modified(self._clock.now())
        with self._lock:
            previous = self._books.get(book.id)
            stored = book.model_copy(deep=True)
            meta = stored.metadata
            if previous is None:
                meta.createdAt = meta.createdAt or stamp
                meta.createdBy = meta.createdBy or self._identity.current_user()
            else:
                meta.createdAt = previous.metadata.createdAt
                meta.createdBy = previous.metadata.createdBy
            meta.lastModified = stamp
            known = {ch.id: ch for ch in (previous.chapters if previous else [])}
            for ch in stored.chapters:
                before = known.get(ch.id)
                ch.createdAt = before.createdAt if before else (ch.createdAt or stamp)
                ch.lastModified = stamp
            self._books[stored.id] = stored
        log.info("book_saved", id=stored.id, chapters=len(stored.chapters), created=previous is None)
        self._notify("put", stored)
        return stored.model_copy(deep=True)

    def delete(self, book_id: str) -> None:
        with self._lock:
            book = self._books.pop(book_id, None)
        if book is None:
            raise BookNotFoundError(f"book not found: {book_id}", details={"id": book_id})
        log.info("book_deleted", id=book_id)
        self._notify("delete", book)

    # ---------------------------------------------------------- subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, book: Book) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event, book.model_copy(deep=True))
