"""Error types raised by project-manager.

Every error the CLI reports derives from ProjectManagerError, so the command
boundary can catch a single type and map it to a non-zero exit code.
"""

from __future__ import annotations


class ProjectManagerError(Exception):
    """Base class for all project-manager errors."""


class NotFoundError(ProjectManagerError):
    """No project is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Project not found: {name}")
        self.name = name


class DuplicateProjectError(ProjectManagerError):
    """A project with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Project name already exists: {name}")
        self.name = name


class SourceUnavailableError(ProjectManagerError):
    """The project directory is missing and there is no source to fetch it from."""


class UnsupportedSourceTypeError(ProjectManagerError):
    """No fetcher is registered for the source type."""


class InvalidSourceError(ProjectManagerError):
    """A source URL cannot be turned into a project path."""


class PathOutsideRootError(ProjectManagerError):
    """A directory is not inside the configured root directory."""


class CredentialsError(ProjectManagerError):
    """Fetching a source failed because no usable credentials were available."""


class ProjectIOError(ProjectManagerError):
    """Reading, writing, cloning or spawning a process failed."""


class DirectoryUnresolvableError(ProjectManagerError):
    """The home or user config directory could not be determined."""
