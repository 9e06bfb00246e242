"""Mapping between project names' stored paths and the filesystem."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import DirectoryUnresolvableError, PathOutsideRootError, ProjectIOError
from .types import ProjectConfig


def get_home_dir() -> Path:
    """Get the user's home directory."""
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise DirectoryUnresolvableError("Failed to get home directory") from e


def root_directory(config: ProjectConfig) -> Path:
    """Get the absolute directory all projects live under."""
    return get_home_dir() / config.root_dir


def project_directory(config: ProjectConfig, relative_path: str | Path) -> Path:
    """Get the absolute directory for a project's stored path.

    Raises:
        PathOutsideRootError: If the stored path escapes the root
            (absolute, or climbing out with ``..``).
    """
    root = Path(os.path.normpath(root_directory(config)))
    target = Path(os.path.normpath(root / relative_path))
    if target == root or not target.is_relative_to(root):
        raise PathOutsideRootError(f"Project path {relative_path!r} is outside the root directory {root}")
    return target


def relative_to_root(directory: str | Path, config: ProjectConfig) -> str:
    """Turn an existing directory into a path relative to the root.

    Both sides are canonicalized first, so symlinks and ``..`` segments
    cannot be used to point outside the root.

    Raises:
        ProjectIOError: If the directory does not exist.
        PathOutsideRootError: If the directory is not strictly inside the root.
    """
    try:
        resolved = Path(directory).expanduser().resolve(strict=True)
    except OSError as e:
        raise ProjectIOError(f"Cannot access directory {directory}: {e}") from e

    root = root_directory(config).resolve()
    if resolved == root or not resolved.is_relative_to(root):
        raise PathOutsideRootError(f"{resolved} is not inside the root directory {root}")
    return str(resolved.relative_to(root))
