"""Constants and default locations for the tag database."""

from __future__ import annotations

import os
from pathlib import Path

import typer

TOOL_NAME = "ollama-tag-cli"
SCHEMA_VERSION = "1.0.0"
APP_NAME = "ollama"
DB_ENV_VAR = "OLLAMA_TAG_DB"


def default_db_path() -> Path:
    """Return the database path used when none is given.

    ``$OLLAMA_TAG_DB`` wins when set; otherwise the per-user application
    directory for ``ollama`` (platform specific) joined with ``tags/tags.json``.
    """
    override = os.environ.get(DB_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(typer.get_app_dir(APP_NAME)) / "tags" / "tags.json"


__all__ = ["APP_NAME", "DB_ENV_VAR", "SCHEMA_VERSION", "TOOL_NAME", "default_db_path"]
