"""Fetching project sources into the filesystem.

A fetcher materializes a project's files from its Source into a target
directory. Fetchers are looked up by source type in FETCHERS; supporting a
new source type means writing one SourceFetcher subclass and adding it there.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from .errors import CredentialsError, ProjectIOError, UnsupportedSourceTypeError
from .types import Source, SourceType

logger = logging.getLogger(__name__)

# git stderr fragments that mean authentication failed
_AUTH_FAILURE_MARKERS = (
    "permission denied",
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "host key verification failed",
)

_SCP_LIKE_URL = re.compile(r"^[\w.-]+@[\w.-]+:")


class SourceFetcher(ABC):
    """Materializes a Source into a directory."""

    @abstractmethod
    def fetch(self, source: Source, target_dir: Path) -> Path:
        """Fetch source into target_dir and return the materialized path."""


def is_ssh_url(url: str) -> bool:
    """Check if a git URL is fetched over SSH."""
    return url.startswith("ssh://") or bool(_SCP_LIKE_URL.match(url))


def _git_env() -> dict[str, str]:
    """Environment for non-interactive git: no password or passphrase prompts."""
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    env.setdefault("GIT_SSH_COMMAND", "ssh -o BatchMode=yes")
    return env


class GitFetcher(SourceFetcher):
    """Full clone of a git repository, authenticated through the SSH agent."""

    def fetch(self, source: Source, target_dir: Path) -> Path:
        """Clone source.url into target_dir.

        Raises:
            CredentialsError: If the clone needs credentials that the SSH
                agent cannot provide.
            ProjectIOError: If git is missing or the clone fails otherwise.
        """
        if is_ssh_url(source.url) and not os.environ.get("SSH_AUTH_SOCK"):
            raise CredentialsError(
                f"No SSH agent available to authenticate {source.url} (SSH_AUTH_SOCK is not set)"
            )

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        cmd = ["git", "clone", source.url, str(target_dir)]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                env=_git_env(),
            )
        except FileNotFoundError as e:
            raise ProjectIOError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            if any(marker in stderr.lower() for marker in _AUTH_FAILURE_MARKERS):
                raise CredentialsError(f"Authentication failed for {source.url}: {stderr}") from e
            raise ProjectIOError(f"git clone of {source.url} failed: {stderr or e}") from e
        return target_dir


FETCHERS: dict[SourceType, type[SourceFetcher]] = {
    SourceType.GIT: GitFetcher,
}


def get_fetcher(source: Source) -> SourceFetcher:
    """Get the fetcher instance for a source.

    Raises:
        UnsupportedSourceTypeError: If no fetcher handles the source type.
    """
    fetcher_cls = FETCHERS.get(source.source_type)
    if fetcher_cls is None:
        raise UnsupportedSourceTypeError(f"Unsupported source type: {source.source_type}")
    return fetcher_cls()


def fetch_source(source: Source, target_dir: Path) -> Path:
    """Materialize source into target_dir with the matching fetcher."""
    fetcher = get_fetcher(source)
    logger.debug("Fetching %s with %s", source.url, type(fetcher).__name__)
    return fetcher.fetch(source, target_dir)


def get_remote_url(repo_dir: Path, remote: str = "origin") -> str:
    """Get a git remote's URL.

    Returns the URL, or empty string if there is no such remote or git fails.
    """
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            capture_output=True,
            text=True,
            cwd=str(repo_dir),
            timeout=10,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (subprocess.TimeoutExpired, OSError):
        pass
    return ""


def detect_source(project_dir: Path) -> Source | None:
    """Work out where an existing project directory was fetched from.

    Only git checkouts are recognised. A directory without a .git marker, or
    a checkout without an origin remote, has no source.
    """
    if not (project_dir / ".git").exists():
        logger.debug("%s is not a git checkout", project_dir)
        return None

    url = get_remote_url(project_dir)
    if not url:
        logger.debug("%s has no origin remote", project_dir)
        return None
    return Source(SourceType.GIT, url)
