"""Registry operations: the workflows behind each pm command.

A ProjectManager wraps one loaded ProjectConfig for the duration of a single
command. Operations mutate the registry in memory only; the caller checks
``modified`` and saves the document afterwards.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

from . import paths
from .editor import launch_editor
from .errors import (
    InvalidSourceError,
    NotFoundError,
    ProjectIOError,
    SourceUnavailableError,
)
from .fetchers import detect_source, fetch_source
from .prompts import Prompter, StdPrompter, confirm
from .types import Project, ProjectConfig, ProjectTable, RemoveResult, Source

logger = logging.getLogger(__name__)

LogFn = Callable[[str], None]


def _noop(_msg: str) -> None:
    return


def path_from_url(url: str) -> str:
    """Derive a project directory name from a source URL.

    Takes the last path segment and strips a trailing ``.git``, so
    ``https://host/org/sample.git`` and ``git@host:sample.git`` both give
    ``sample``.

    Raises:
        InvalidSourceError: If no usable name remains.
    """
    name = url.rstrip("/").rsplit("/", 1)[-1]
    name = name.rsplit(":", 1)[-1]
    if name.endswith(".git"):
        name = name[:-4]
    if name in ("", ".", ".."):
        raise InvalidSourceError(f"Cannot derive a project path from URL: {url!r}")
    return name


class ProjectManager:
    """Runs registry operations against an in-memory ProjectConfig."""

    def __init__(
        self,
        config: ProjectConfig,
        prompter: Prompter | None = None,
        log: LogFn | None = None,
    ):
        self.config = config
        self.prompter = prompter or StdPrompter()
        self._log = log or _noop
        self.modified = False

    # ── lookup ──

    def find(self, name: str) -> Project | None:
        """Get a project by exact name, or None."""
        return self.config.find(name)

    def get(self, name: str) -> Project:
        """Get a project by exact name.

        Raises:
            NotFoundError: If no project has that name.
        """
        project = self.config.find(name)
        if project is None:
            raise NotFoundError(name)
        return project

    def project_dir(self, project: Project) -> Path:
        return paths.project_directory(self.config, project.path)

    # ── materialization ──

    def resolve_or_fetch(self, project: Project) -> Path:
        """Get the project's directory, fetching it from its source if missing.

        Raises:
            SourceUnavailableError: If the directory is missing and the
                project has no source.
        """
        project_dir = self.project_dir(project)
        if project_dir.exists():
            return project_dir

        self._log("Project is not on the filesystem")
        if project.source is None:
            raise SourceUnavailableError(
                f"Project source is not available for {project.name!r} ({project_dir} is missing)"
            )

        self._log(f"Fetching project from source {project.source.url}...")
        fetch_source(project.source, project_dir)
        return project_dir

    def open(self, name: str) -> Path:
        """Open a project in the configured editor and wait for it to close."""
        project_dir = self.resolve_or_fetch(self.get(name))
        launch_editor(self.config.editor, project_dir)
        return project_dir

    def navigate(self, name: str) -> Path:
        """Get a project's absolute directory, fetching it if needed."""
        return self.resolve_or_fetch(self.get(name))

    def edit_config(self, config_path: Path) -> None:
        """Open the registry document itself in the configured editor."""
        launch_editor(self.config.editor, config_path)

    # ── adding ──

    def _ask_project_name(self) -> str:
        """Prompt until the user gives a non-empty name that is not taken."""
        while True:
            name = self.prompter.prompt("Enter project name: ")
            if not name:
                self._log("Project name cannot be empty")
            elif self.config.find(name) is not None:
                self._log("Project name already exists")
            else:
                return name

    def _ask_description(self) -> str | None:
        return self.prompter.prompt("Enter project description: ") or None

    def add_from_directory(self, directory: str | Path) -> Project:
        """Register an existing directory under the root.

        Raises:
            ProjectIOError: If the directory does not exist.
            PathOutsideRootError: If it is not inside the root directory.
        """
        relative = paths.relative_to_root(directory, self.config)
        project_dir = paths.root_directory(self.config).resolve() / relative
        if not project_dir.is_dir():
            raise ProjectIOError(f"Not a directory: {project_dir}")

        name = self._ask_project_name()
        description = self._ask_description()

        source = detect_source(project_dir)
        if source is None:
            self._log("Project is not a supported external source")
        else:
            self._log(f"Git repository URL: {source.url}")

        project = Project(name=name, path=relative, description=description, source=source)
        self.config.add(project)
        self.modified = True
        logger.debug("Added project %r at %s", name, relative)
        return project

    def add_from_source(self, source: Source) -> Project:
        """Register a project that will be fetched from source on first use."""
        name = self._ask_project_name()
        relative = path_from_url(source.url)
        description = self._ask_description()

        project = Project(name=name, path=relative, description=description, source=source)
        self.config.add(project)
        self.modified = True
        logger.debug("Added project %r from %s", name, source.url)
        return project

    # ── removing ──

    def remove(self, name: str) -> RemoveResult:
        """Delete a project's directory and optionally its registry entry.

        First confirmation: delete the directory at all (declining aborts).
        Second confirmation: also drop the registry entry (declining keeps it
        so the project can be re-fetched later).
        """
        project = self.get(name)
        project_dir = self.project_dir(project)

        self._log(f"You are about to remove the following directory: {project_dir}")
        if not confirm(self.prompter, f"Are you sure you want to remove {name}? (y/N): "):
            self._log("Project removal aborted")
            return RemoveResult(aborted=True)

        result = RemoveResult()
        if confirm(self.prompter, f"Do you want to remove {name} from the project list? (y/N): "):
            self.config.remove(name)
            self.modified = True
            result.entry_removed = True
        else:
            self._log("Keeping project in the project list")

        if project_dir.exists():
            try:
                shutil.rmtree(project_dir)
            except OSError as e:
                raise ProjectIOError(f"Failed to remove {project_dir}: {e}") from e
            result.directory_removed = True
            self._log("Project directory removed")
        return result

    # ── reading ──

    def list_projects(
        self,
        path: bool = False,
        description: bool = False,
        languages: bool = False,
        source: bool = False,
    ) -> ProjectTable:
        """Project listing sorted by name (case-insensitive).

        Only the requested columns are included; Name leads whenever any
        column is requested.
        """
        columns: list[str] = []
        if path:
            columns.append("Path")
        if description:
            columns.append("Description")
        if languages:
            columns.append("Languages")
        if source:
            columns.append("Source")
        if columns:
            columns.insert(0, "Name")

        rows: list[list[str]] = []
        for project in sorted(self.config.projects, key=lambda p: p.name.lower()):
            row = [project.name]
            if path:
                row.append(project.path)
            if description:
                row.append(project.description or "")
            if languages:
                row.append(", ".join(project.languages))
            if source:
                row.append(project.source.url if project.source else "")
            rows.append(row)
        return ProjectTable(columns=columns, rows=rows)

    def inspect(self) -> list[str]:
        """Folders directly under the root that no project is registered at.

        Raises:
            ProjectIOError: If the root directory does not exist.
        """
        root = paths.root_directory(self.config)
        if not root.is_dir():
            raise ProjectIOError(f"Root directory does not exist: {root}")

        registered = {Path(p.path).parts[0] for p in self.config.projects if Path(p.path).parts}
        try:
            entries = list(root.iterdir())
        except OSError as e:
            raise ProjectIOError(f"Failed to read {root}: {e}") from e

        return sorted(
            entry.name
            for entry in entries
            if entry.is_dir() and not entry.name.startswith(".") and entry.name not in registered
        )
