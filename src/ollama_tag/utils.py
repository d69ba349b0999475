"""Shared helpers for the tag store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """Return a UTC timestamp like ``2024-05-01T12:30:00.123Z``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_token(timestamp: str) -> str:
    """Make an ISO timestamp safe for file names (``:`` and ``.`` become ``-``)."""
    return timestamp.replace(":", "-").replace(".", "-")
