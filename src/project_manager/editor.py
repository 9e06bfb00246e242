"""Launching the configured editor on a project directory."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path

from .errors import ProjectIOError

logger = logging.getLogger(__name__)


def default_editor() -> str:
    """Pick the editor command for a fresh registry.

    Uses $VISUAL or $EDITOR, then the first of nano/vi found on PATH.
    """
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
    if editor:
        return editor
    for candidate in ("nano", "vi"):
        if shutil.which(candidate):
            return candidate
    return "vi"


def launch_editor(editor: str, path: Path) -> int:
    """Run ``editor <path>`` and wait for it to exit.

    Returns the editor's exit code. It is not interpreted here.

    Raises:
        ProjectIOError: If the command is empty or cannot be started.
    """
    try:
        argv = shlex.split(editor)
    except ValueError as e:
        raise ProjectIOError(f"Invalid editor command {editor!r}: {e}") from e
    if not argv:
        raise ProjectIOError("No editor configured")

    argv.append(str(path))
    logger.debug("Launching editor: %s", argv)
    try:
        result = subprocess.run(argv, check=False)
    except OSError as e:
        raise ProjectIOError(f"Failed to start editor {argv[0]!r}: {e}") from e

    if result.returncode != 0:
        logger.warning("Editor %r exited with status %d", argv[0], result.returncode)
    return result.returncode
