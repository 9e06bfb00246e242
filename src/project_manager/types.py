"""Type definitions for project-manager.

The registry document (ProjectConfig) and the records it holds, plus the
small result types returned by registry operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .editor import default_editor
from .errors import DuplicateProjectError

CONFIG_VERSION = "1.0"
DEFAULT_ROOT_DIR = "my_projects"


class SourceType(str, Enum):
    """Kinds of remote location a project can be fetched from."""

    GIT = "git"
    WEB = "web"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> "SourceType":
        """Create SourceType from a string, ignoring case.

        Raises:
            ValueError: If value is not recognized.
        """
        try:
            return cls(value.lower())
        except (ValueError, AttributeError):
            raise ValueError(f"Invalid source type: {value!r}. Must be 'git' or 'web'.")


@dataclass
class Source:
    """Where a project's files can be fetched from if absent locally."""

    source_type: SourceType
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.source_type.value, "url": self.url}

    @classmethod
    def from_dict(cls, data: Any) -> "Source":
        if not isinstance(data, dict):
            raise ValueError(f"Invalid source entry: {data!r}")
        url = data.get("url")
        if not isinstance(url, str):
            raise ValueError(f"Source is missing a url: {data!r}")
        return cls(SourceType.from_string(data.get("type", "")), url)


@dataclass
class Project:
    """A tracked project directory.

    Attributes:
        name: Unique, user-facing key.
        path: Location relative to the configured root directory.
        description: Optional free text.
        languages: Languages used by the project (filled in externally).
        source: Where to re-fetch the project from, if known.
    """

    name: str
    path: str
    description: str | None = None
    languages: list[str] = field(default_factory=list)
    source: Source | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "description": self.description,
            "languages": list(self.languages),
            "source": self.source.to_dict() if self.source else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Project":
        if not isinstance(data, dict):
            raise ValueError(f"Invalid project entry: {data!r}")
        name = data.get("name")
        path = data.get("path")
        if not isinstance(name, str) or not isinstance(path, str):
            raise ValueError(f"Project entry needs string 'name' and 'path': {data!r}")

        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise ValueError(f"Invalid description for project {name!r}")

        languages = data.get("languages") or []
        if not isinstance(languages, list) or not all(isinstance(lang, str) for lang in languages):
            raise ValueError(f"Invalid languages for project {name!r}")

        raw_source = data.get("source")
        source = Source.from_dict(raw_source) if raw_source is not None else None
        return cls(name, path, description, list(languages), source)


@dataclass
class ProjectConfig:
    """The registry document: settings plus the list of tracked projects."""

    version: str = CONFIG_VERSION
    editor: str = field(default_factory=default_editor)
    root_dir: str = DEFAULT_ROOT_DIR
    projects: list[Project] = field(default_factory=list)

    def find(self, name: str) -> Project | None:
        """Get the project with exactly this name, or None."""
        for project in self.projects:
            if project.name == name:
                return project
        return None

    def add(self, project: Project) -> None:
        """Append a project.

        Raises:
            DuplicateProjectError: If the name is already registered.
        """
        if self.find(project.name) is not None:
            raise DuplicateProjectError(project.name)
        self.projects.append(project)

    def remove(self, name: str) -> bool:
        """Remove a project by name. Returns True if it was registered."""
        before = len(self.projects)
        self.projects = [p for p in self.projects if p.name != name]
        return len(self.projects) != before

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "editor": self.editor,
            "root_dir": self.root_dir,
            "projects": [p.to_dict() for p in self.projects],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectConfig":
        """Build a registry from a parsed JSON document.

        Missing top-level keys fall back to defaults.

        Raises:
            ValueError: If the document does not match the schema.
        """
        if not isinstance(data, dict):
            raise ValueError("Registry document must be a JSON object")

        config = cls()
        for key in ("version", "editor", "root_dir"):
            if key in data:
                if not isinstance(data[key], str):
                    raise ValueError(f"Invalid value for {key!r}: {data[key]!r}")
                setattr(config, key, data[key])

        raw_projects = data.get("projects", [])
        if not isinstance(raw_projects, list):
            raise ValueError("'projects' must be a list")
        for raw in raw_projects:
            project = Project.from_dict(raw)
            try:
                config.add(project)
            except DuplicateProjectError as e:
                raise ValueError(str(e)) from e
        return config


@dataclass
class ProjectTable:
    """Rows for the project listing.

    columns is empty when no optional column was requested; rows then hold
    only the project name.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class RemoveResult:
    """Outcome of the two-step remove workflow."""

    aborted: bool = False
    entry_removed: bool = False
    directory_removed: bool = False
