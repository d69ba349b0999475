"""Typed failures raised by the tag store."""

from __future__ import annotations


class TagStoreError(Exception):
    """Base class for every error surfaced by :mod:`ollama_tag`."""


class NotFoundError(TagStoreError, LookupError):
    """A tag name (or an expected file) does not exist."""


class AlreadyExistsError(TagStoreError):
    """An add targeted a tag name that is already present."""


class StorageError(TagStoreError, OSError):
    """Reading, writing, copying or creating a directory failed.

    The lower-level cause is chained as ``__cause__``.
    """


class ValidationError(TagStoreError, ValueError):
    """Caller-level input rejected before reaching the store."""


__all__ = [
    "AlreadyExistsError",
    "NotFoundError",
    "StorageError",
    "TagStoreError",
    "ValidationError",
]
