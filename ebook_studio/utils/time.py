# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations
"""
Clock helpers.

Anything that stamps a time (package modification date, stored book
timestamps) takes a Clock so tests can pin the value.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol, Tuple

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FixedClock:
    """Always returns the same instant."""

    instant: datetime

    def now(self) -> datetime:
        if self.instant.tzinfo is None:
            return self.instant.replace(tzinfo=timezone.utc)
        return self.instant


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_modified(dt: datetime) -> str:
    """Render as CCYY-MM-DDThh:mm:ssZ, the form dcterms:modified requires."""
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def zip_timestamp(dt: datetime) -> Tuple[int, int, int, int, int, int]:
    """Zip entries cannot carry dates before 1980; clamp to the zip epoch."""
    stamp = tuple(to_utc(dt).timetuple()[:6])
    return max(stamp, ZIP_EPOCH)  # type: ignore[return-value]
