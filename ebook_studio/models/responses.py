# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ApiError(BaseModel):
    """
    Standard error payload for API responses.
    """
    code: str = Field(default="error")
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    """
    Error response envelope: { ok: false, error }
    """
    ok: bool = False
    error: ApiError
