# tests/conftest.py
from __future__ import annotations

import base64
from datetime import datetime, timezone

import pytest

from ebook_studio.app import create_app
from ebook_studio.config import Settings
from ebook_studio.utils.time import FixedClock

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
FIXED_NOW = datetime(2025, 5, 22, 10, 22, 5, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def png_data_url():
    return "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def sample_book():
    """Store-shaped record: author/isbn metadata, unsorted chapters."""
    return {
        "id": "book-1",
        "metadata": {
            "title": "My Book",
            "author": "Ada Writer",
            "language": "en",
            "isbn": "9780000000002",
            "description": "A short book.",
        },
        "chapters": [
            {"id": "c3", "title": "C", "content": "third", "order": 2},
            {"id": "c1", "title": "A", "content": "first", "order": 0},
            {"id": "c2", "title": "B", "content": "second", "order": 1},
        ],
    }


@pytest.fixture
def settings(tmp_path):
    return Settings(
        LOG_LEVEL="WARNING",
        CORS_ENABLE=False,
        EXPORT_DIR=tmp_path / "exports",
        CURRENT_USER="tester",
    )


@pytest.fixture
def app(settings, clock):
    app = create_app(settings, clock=clock)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
