"""File helpers the tag store builds on.

Every failure is re-raised as a typed error from :mod:`ollama_tag.errors`
with the original exception chained.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Any

from .errors import NotFoundError, StorageError
from .utils import timestamp_token, utc_now_iso

_logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


def file_exists(path: PathLike) -> bool:
    """Return ``True`` when ``path`` is an existing regular file."""
    return Path(path).is_file()


def dir_exists(path: PathLike) -> bool:
    """Return ``True`` when ``path`` is an existing directory."""
    return Path(path).is_dir()


def ensure_directory(path: PathLike) -> None:
    """Create ``path`` (and parents) if it does not exist yet."""
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Failed to create directory {path}: {exc}") from exc


def read_json(path: PathLike) -> Any:
    """Read and parse a JSON file.

    Raises
    ------
    NotFoundError
        If ``path`` does not exist.
    StorageError
        If the file cannot be read or is not valid JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise NotFoundError(f"File {path} does not exist") from exc
    except (OSError, ValueError) as exc:
        raise StorageError(f"Failed to read JSON file {path}: {exc}") from exc


def _file_mode(target: Path) -> int:
    """Permission bits a fresh write of ``target`` should get.

    An existing file keeps its mode; a new one gets ``0o666`` minus the umask,
    like a plain ``open(..., "w")``.
    """
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_json(path: PathLike, data: Any) -> None:
    """Write ``data`` as indented JSON, replacing ``path`` atomically.

    The document goes to a temporary file in the target directory first and is
    moved over ``path`` with :func:`os.replace`, so readers never see a
    half-written file. The target's permission bits are preserved.
    """
    target = Path(path)
    ensure_directory(target.parent)
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as tmp:
            tmp_path = tmp.name
            json.dump(data, tmp, indent=2, ensure_ascii=False)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_path, _file_mode(target))
        os.replace(tmp_path, target)
    except (OSError, TypeError, ValueError) as exc:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
        raise StorageError(f"Failed to write JSON file {target}: {exc}") from exc


def copy_file(src: PathLike, dst: PathLike) -> None:
    """Copy ``src`` to ``dst`` byte for byte (metadata included)."""
    if not file_exists(src):
        raise NotFoundError(f"File {src} does not exist")
    try:
        shutil.copy2(src, dst)
    except OSError as exc:
        raise StorageError(f"Failed to copy {src} to {dst}: {exc}") from exc


def backup_file(path: PathLike) -> Path:
    """Copy ``path`` to a timestamped ``.backup`` sibling and return its path."""
    source = Path(path)
    backup_path = source.with_name(f"{source.name}.{timestamp_token(utc_now_iso())}.backup")
    copy_file(source, backup_path)
    _logger.debug("Copied %s to %s", source, backup_path)
    return backup_path


__all__ = [
    "backup_file",
    "copy_file",
    "dir_exists",
    "ensure_directory",
    "file_exists",
    "read_json",
    "write_json",
]
