# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration.

    - Loads .env automatically (non-fatal if missing).
    - Tolerates legacy lowercase env keys via AliasChoices.
    - Export defaults mirror the values the normalizer falls back to.
    """

    # Flask
    FLASK_HOST: str = "0.0.0.0"
    FLASK_PORT: int = 5000
    FLASK_DEBUG: bool = False
    MAX_CONTENT_LENGTH: int = 32 * 1024 * 1024  # request body cap (covers are inlined)

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ENABLE: bool = True
    CORS_ALLOW_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_CREDENTIALS: bool = False

    # Paths
    EXPORT_DIR: Path = Field(
        default_factory=lambda: Path.cwd() / "exports",
        validation_alias=AliasChoices("EXPORT_DIR", "export_dir", "OUTPUT_DIR"),
    )

    # Export defaults
    DEFAULT_TITLE: str = "Untitled Book"
    DEFAULT_AUTHOR: str = Field(default="Unknown", validation_alias=AliasChoices("DEFAULT_AUTHOR", "default_author"))
    DEFAULT_LANGUAGE: str = Field(default="en", validation_alias=AliasChoices("DEFAULT_LANGUAGE", "default_language"))

    # Identity recorded as createdBy on stored books
    CURRENT_USER: str = Field(default="anonymous", validation_alias=AliasChoices("CURRENT_USER", "current_user"))

    # Settings behavior
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("DEFAULT_TITLE", "DEFAULT_AUTHOR", "DEFAULT_LANGUAGE", "CURRENT_USER", mode="after")
    @classmethod
    def _not_blank(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v.strip()

    def export_defaults(self) -> dict:
        """Fallback metadata handed to the normalizer."""
        return {
            "title": self.DEFAULT_TITLE,
            "creator": self.DEFAULT_AUTHOR,
            "language": self.DEFAULT_LANGUAGE,
        }
