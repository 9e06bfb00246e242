"""Persistence for the project registry.

The registry lives in a single JSON document at
``$XDG_CONFIG_HOME/project-manager/projects.json`` (``~/.config`` when the
variable is unset). It is read once per command and written back in full.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from .errors import DirectoryUnresolvableError, ProjectIOError
from .types import ProjectConfig

logger = logging.getLogger(__name__)

APP_DIR_NAME = "project-manager"
CONFIG_FILE_NAME = "projects.json"


def get_config_dir() -> Path:
    """Get the project-manager config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if not xdg_config:
        try:
            xdg_config = str(Path.home() / ".config")
        except (RuntimeError, KeyError) as e:
            raise DirectoryUnresolvableError("Failed to get config directory") from e
    return Path(xdg_config) / APP_DIR_NAME


def get_config_path() -> Path:
    """Get the path to the registry document."""
    return get_config_dir() / CONFIG_FILE_NAME


def get_log_path() -> Path:
    """Get the path to the debug log file."""
    return get_config_dir() / "debug.log"


def _serialize(config: ProjectConfig) -> str:
    return json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n"


def _atomic_write(path: Path, content: str) -> None:
    """Write content to a temp file next to path, then rename it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".projects-", suffix=".tmp")
        os.write(fd, content.encode("utf-8"))
        os.close(fd)
        fd = None
        os.replace(tmp_path, path)
        tmp_path = None
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)


def _read_or_init(config_path: Path) -> ProjectConfig:
    if not config_path.exists():
        logger.debug("Creating default registry at %s", config_path)
        _atomic_write(config_path, _serialize(ProjectConfig()))

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)
    return ProjectConfig.from_dict(data)


def load_config() -> ProjectConfig:
    """Load the registry, creating a default document on first run.

    Never raises: a missing, unreadable or corrupt document yields a fresh
    default registry. The broken file is left as it is.
    """
    try:
        config_path = get_config_path()
        return _read_or_init(config_path)
    except DirectoryUnresolvableError as e:
        logger.warning("%s; using an empty registry", e)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning("Could not load registry: %s; using an empty registry", e)
    return ProjectConfig()


def save_config(config: ProjectConfig) -> Path:
    """Write the whole registry document. Returns the path written.

    Raises:
        ProjectIOError: If the document cannot be written. The previous
            file content is left untouched in that case.
    """
    config_path = get_config_path()
    try:
        _atomic_write(config_path, _serialize(config))
    except OSError as e:
        raise ProjectIOError(f"Failed to save registry to {config_path}: {e}") from e
    logger.debug("Saved %d project(s) to %s", len(config.projects), config_path)
    return config_path
