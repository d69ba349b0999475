"""Core tag store: owns the cached database document and its file."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Optional

from . import files
from .config import default_db_path
from .errors import AlreadyExistsError, NotFoundError, StorageError
from .tags_types import UPDATABLE_FIELDS, Tag, TagsDatabase, new_database
from .utils import utc_now_iso


class TagStore:
    """Load/cache/save lifecycle and CRUD operations over one tag database.

    The document is read from disk on first use and cached for the lifetime of
    the instance; the file is not re-read and external edits are not noticed.
    Every mutating call rewrites the whole document before returning. There is
    no locking: two stores on the same path can overwrite each other's changes.
    """

    def __init__(self, path: Optional[str | os.PathLike[str]] = None) -> None:
        """Bind a store to a database file.

        Parameters
        ----------
        path
            Location of the JSON database. Defaults to
            :func:`ollama_tag.config.default_db_path`.
        """
        self._path = Path(path) if path is not None else default_db_path()
        self._db: TagsDatabase | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> TagsDatabase:
        """Return the cached database, reading or creating the file on first use.

        Returns
        -------
        TagsDatabase
            The live cached document.

        Raises
        ------
        StorageError
            If the directory cannot be created, the file cannot be read, or
            its content is not a tag database.
        """
        if self._db is not None:
            return self._db

        files.ensure_directory(self._path.parent)
        if files.file_exists(self._path):
            document = files.read_json(self._path)
            if not _is_database(document):
                raise StorageError(f"Failed to load tag database {self._path}: malformed document")
            self._db = document  # type: ignore[assignment]
            self._logger.debug("Loaded %d tags from %s", len(document["tags"]), self._path)
            return self._db

        self._db = new_database()
        self._logger.info("Creating new tag database at %s", self._path)
        self.save()
        return self._db

    def save(self) -> None:
        """Write the whole cached document back to disk, refreshing ``lastUpdated``.

        On failure the cache keeps its pending changes (and its previous
        ``lastUpdated``), so calling ``save`` again retries the same state.
        """
        if self._db is None:
            raise StorageError("Database not loaded")
        stamp = utc_now_iso()
        files.write_json(self._path, {**self._db, "lastUpdated": stamp})
        self._db["lastUpdated"] = stamp
        self._logger.debug("Saved %d tags to %s", len(self._db["tags"]), self._path)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def exists(self, name: str) -> bool:
        """Return whether a tag called ``name`` exists."""
        return name in self.load()["tags"]

    def get(self, name: str) -> Tag:
        """Return a copy of the tag called ``name``.

        Raises
        ------
        NotFoundError
            If no such tag exists.
        """
        tags = self.load()["tags"]
        if name not in tags:
            raise NotFoundError(f'Tag "{name}" does not exist')
        return copy.deepcopy(tags[name])

    def add(self, tag: Tag) -> Tag:
        """Insert ``tag`` as given and persist.

        Blank names are not rejected here; see
        :func:`ollama_tag.tags_types.validate_tag_name`.

        Raises
        ------
        AlreadyExistsError
            If a tag with the same name is already stored.
        """
        tags = self.load()["tags"]
        name = tag["name"]
        if name in tags:
            raise AlreadyExistsError(f'Tag "{name}" already exists')

        tags[name] = copy.deepcopy(tag)
        self.save()
        self._logger.debug("Added tag %s", name)
        return copy.deepcopy(tags[name])

    def delete(self, name: str) -> None:
        """Remove the tag called ``name`` and persist.

        Raises
        ------
        NotFoundError
            If no such tag exists.
        """
        tags = self.load()["tags"]
        if name not in tags:
            raise NotFoundError(f'Tag "{name}" does not exist')

        del tags[name]
        self.save()
        self._logger.debug("Deleted tag %s", name)

    def update(
        self,
        name: str,
        *,
        category: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Tag:
        """Merge the given fields into an existing tag and persist.

        ``name`` and ``createdAt`` are never changed. Arguments left as ``None``
        keep their current value; ``updatedAt`` is always set to now.

        Parameters
        ----------
        name
            Tag to update.
        category
            New category.
        description
            New description.
        metadata
            Replacement metadata mapping.

        Returns
        -------
        Tag
            Copy of the updated record.

        Raises
        ------
        NotFoundError
            If no such tag exists.
        """
        tags = self.load()["tags"]
        if name not in tags:
            raise NotFoundError(f'Tag "{name}" does not exist')

        supplied = zip(UPDATABLE_FIELDS, (category, description, metadata))
        changes = {field: copy.deepcopy(value) for field, value in supplied if value is not None}
        updated: dict[str, Any] = {**tags[name], **changes, "updatedAt": utc_now_iso()}
        tags[name] = updated  # type: ignore[assignment]
        self.save()
        self._logger.debug("Updated tag %s (%s)", name, ", ".join(sorted(changes)) or "timestamp only")
        return copy.deepcopy(tags[name])

    def list(self, category: Optional[str] = None) -> list[Tag]:
        """Return all tags, or only those whose category equals ``category``.

        An empty ``category`` is treated as no filter.
        """
        tags = self.load()["tags"].values()
        return [copy.deepcopy(tag) for tag in tags if _matches_category(tag, category)]

    def search(self, query: str, category: Optional[str] = None) -> list[Tag]:
        """Return tags whose name or description contains ``query``.

        Matching is case-insensitive; a missing description never matches. When
        ``category`` is given the tag's category must also equal it exactly.
        """
        needle = query.lower()
        return [
            copy.deepcopy(tag)
            for tag in self.load()["tags"].values()
            if _matches_query(tag, needle) and _matches_category(tag, category)
        ]

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------
    def backup(self) -> Path:
        """Copy the database file to a timestamped ``.backup`` sibling.

        Returns
        -------
        Path
            Location of the backup. Two backups in the same millisecond share
            a name; the later one wins.
        """
        self.load()
        try:
            backup_path = files.backup_file(self._path)
        except StorageError as exc:
            raise StorageError(f"Failed to backup tag database: {exc}") from exc
        self._logger.info("Backed up tag database to %s", backup_path)
        return backup_path


def _is_database(document: object) -> bool:
    """Check the document shape: a ``tags`` object of records keyed by their own name."""
    if not isinstance(document, dict):
        return False
    tags = document.get("tags")
    if not isinstance(tags, dict):
        return False
    return all(isinstance(tag, dict) and tag.get("name") == key for key, tag in tags.items())


def _matches_category(tag: Tag, category: Optional[str]) -> bool:
    return not category or tag.get("category") == category


def _matches_query(tag: Tag, needle: str) -> bool:
    if needle in tag["name"].lower():
        return True
    description = tag.get("description")
    return isinstance(description, str) and needle in description.lower()


__all__ = ["TagStore"]
