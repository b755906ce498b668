# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class IdentityProvider(Protocol):
    def current_user(self) -> str: ...


@dataclass(frozen=True)
class StaticIdentity:
    """Single-user deployments: the configured CURRENT_USER."""

    name: str = "anonymous"

    def current_user(self) -> str:
        return self.name
