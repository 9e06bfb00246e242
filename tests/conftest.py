"""Pytest fixtures for project-manager tests."""

from __future__ import annotations

import pytest

from project_manager.prompts import Prompter
from project_manager.types import ProjectConfig


class ScriptedPrompter(Prompter):
    """Prompter that replays canned answers and records the questions."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.messages: list[str] = []

    def prompt(self, message: str) -> str:
        self.messages.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message!r}")
        return self.answers.pop(0)


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point the home directory at a temp dir."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setattr("project_manager.paths.get_home_dir", lambda: home_dir)
    return home_dir


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp dir. Returns the app config dir."""
    xdg = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    return xdg / "project-manager"


@pytest.fixture
def root(home):
    """The projects root directory (created)."""
    root_dir = home / "projects"
    root_dir.mkdir()
    return root_dir


@pytest.fixture
def project_config(root):
    """An empty registry rooted at ~/projects."""
    return ProjectConfig(editor="true", root_dir="projects")


@pytest.fixture
def prompter():
    """Factory for scripted prompters."""
    return ScriptedPrompter
