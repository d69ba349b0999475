"""Record types and input helpers for the tag database.

Tags and the database document are plain JSON-shaped dicts; the ``TypedDict``
declarations below describe their keys. ``name`` and ``createdAt`` are
read-only once a tag exists.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, TypedDict

from typing_extensions import NotRequired, ReadOnly

from .config import SCHEMA_VERSION, TOOL_NAME
from .errors import ValidationError
from .utils import utc_now_iso


class Tag(TypedDict):
    """A named record stored under its ``name``."""
    name: ReadOnly[str]
    createdAt: ReadOnly[str]
    category: NotRequired[str]
    description: NotRequired[str]
    updatedAt: NotRequired[str]
    metadata: NotRequired[dict[str, Any]]


class DatabaseMeta(TypedDict):
    """Schema stamp written once when the database is created."""
    version: ReadOnly[str]
    tool: ReadOnly[str]


class TagsDatabase(TypedDict):
    """The whole persisted document."""
    tags: dict[str, Tag]
    lastUpdated: str
    meta: ReadOnly[DatabaseMeta]


# Fields ``TagStore.update`` may change; everything else is identity or server-set.
UPDATABLE_FIELDS: tuple[str, ...] = ("category", "description", "metadata")


def new_tag(
    name: str,
    *,
    category: Optional[str] = None,
    description: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    created_at: Optional[str] = None,
) -> Tag:
    """Build a tag record stamped with ``createdAt``.

    Optional fields left as ``None`` are omitted from the record rather than
    stored as ``null``.
    """
    tag: dict[str, Any] = {"name": name}
    if category is not None:
        tag["category"] = category
    if description is not None:
        tag["description"] = description
    tag["createdAt"] = created_at or utc_now_iso()
    if metadata is not None:
        tag["metadata"] = dict(metadata)
    return tag  # type: ignore[return-value]


def new_database() -> TagsDatabase:
    """Return an empty database with a fresh timestamp and meta stamp."""
    return {
        "tags": {},
        "lastUpdated": utc_now_iso(),
        "meta": {"version": SCHEMA_VERSION, "tool": TOOL_NAME},
    }


def validate_tag_name(name: object) -> str:
    """Return ``name`` unchanged, or raise :class:`ValidationError` if blank."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Tag name cannot be empty")
    return name


def validate_query(query: object) -> str:
    """Return ``query`` unchanged, or raise :class:`ValidationError` if blank."""
    if not isinstance(query, str) or not query.strip():
        raise ValidationError("Search query cannot be empty")
    return query


def parse_metadata(pairs: Optional[Iterable[str]]) -> dict[str, str] | None:
    """Turn ``KEY=VALUE`` strings into a metadata dict.

    Parameters
    ----------
    pairs
        Raw ``KEY=VALUE`` items, typically repeated ``--meta`` options.

    Returns
    -------
    dict[str, str] | None
        Parsed mapping (later keys win), or ``None`` when no pairs were given.

    Raises
    ------
    ValidationError
        If an item has no ``=`` or an empty key.
    """
    if not pairs:
        return None
    metadata: dict[str, str] = {}
    for item in pairs:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValidationError(f"Invalid metadata entry {item!r}, expected KEY=VALUE")
        metadata[key] = value
    return metadata


__all__ = [
    "DatabaseMeta",
    "Tag",
    "TagsDatabase",
    "UPDATABLE_FIELDS",
    "new_database",
    "new_tag",
    "parse_metadata",
    "validate_query",
    "validate_tag_name",
]
