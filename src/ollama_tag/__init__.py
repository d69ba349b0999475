"""Public package surface for the ollama-tag store."""

__version__ = "1.0.0"

from .errors import AlreadyExistsError, NotFoundError, StorageError, TagStoreError, ValidationError
from .store import TagStore
from .tags_types import Tag, TagsDatabase, new_tag



__all__ = [
    "AlreadyExistsError",
    "NotFoundError",
    "StorageError",
    "Tag",
    "TagStore",
    "TagStoreError",
    "TagsDatabase",
    "ValidationError",
    "new_tag",
]
