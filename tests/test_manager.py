"""Tests for registry operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from project_manager import manager as manager_mod
from project_manager.errors import (
    CredentialsError,
    InvalidSourceError,
    NotFoundError,
    PathOutsideRootError,
    SourceUnavailableError,
    UnsupportedSourceTypeError,
)
from project_manager.manager import ProjectManager, path_from_url
from project_manager.types import Project, ProjectTable, Source, SourceType

SAMPLE_URL = "https://example.com/org/sample.git"


@pytest.fixture
def fetch_calls(monkeypatch):
    """Replace the source fetcher with one that creates the directory."""
    calls: list[tuple[Source, Path]] = []

    def _fetch(source, target_dir):
        calls.append((source, target_dir))
        target_dir.mkdir(parents=True)
        return target_dir

    monkeypatch.setattr(manager_mod, "fetch_source", _fetch)
    return calls


@pytest.fixture
def editor_calls(monkeypatch):
    calls: list[tuple[str, Path]] = []

    def _launch(editor, path):
        calls.append((editor, path))
        return 0

    monkeypatch.setattr(manager_mod, "launch_editor", _launch)
    return calls


@pytest.fixture
def make_manager(project_config, prompter):
    def _make(*answers, log=None):
        return ProjectManager(project_config, prompter=prompter(answers), log=log)

    return _make


class TestPathFromUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://example.com/org/sample.git", "sample"),
            ("https://example.com/org/sample", "sample"),
            ("https://example.com/org/sample/", "sample"),
            ("git@github.com:org/dotfiles.git", "dotfiles"),
            ("git@github.com:dotfiles.git", "dotfiles"),
            ("ssh://git@example.com/sample.git", "sample"),
        ],
    )
    def test_last_segment(self, url, expected):
        assert path_from_url(url) == expected

    @pytest.mark.parametrize("url", ["", "/", "https://example.com/..", "https://example.com/.git"])
    def test_invalid(self, url):
        with pytest.raises(InvalidSourceError):
            path_from_url(url)


class TestFind:
    def test_find(self, make_manager):
        manager = make_manager()
        manager.config.add(Project(name="a", path="a"))
        assert manager.find("a").path == "a"
        assert manager.find("b") is None

    def test_get_missing_raises(self, make_manager):
        with pytest.raises(NotFoundError, match="ghost"):
            make_manager().get("ghost")


class TestResolveOrFetch:
    def test_existing_directory_is_not_fetched(self, make_manager, root, fetch_calls):
        (root / "sample").mkdir()
        manager = make_manager()
        project = Project(name="sample", path="sample", source=Source(SourceType.GIT, SAMPLE_URL))

        assert manager.resolve_or_fetch(project) == root / "sample"
        assert fetch_calls == []

    def test_missing_directory_is_fetched_into_project_path(self, make_manager, root, fetch_calls):
        messages = []
        manager = make_manager(log=messages.append)
        source = Source(SourceType.GIT, SAMPLE_URL)
        project = Project(name="sample", path="group/sample", source=source)

        result = manager.resolve_or_fetch(project)

        assert result == root / "group" / "sample"
        assert fetch_calls == [(source, root / "group" / "sample")]
        assert "Project is not on the filesystem" in messages

    def test_missing_directory_without_source(self, make_manager, root, fetch_calls):
        manager = make_manager()
        project = Project(name="lost", path="lost")

        with pytest.raises(SourceUnavailableError):
            manager.resolve_or_fetch(project)

        assert fetch_calls == []
        assert list(root.iterdir()) == []

    def test_web_source_is_unsupported(self, make_manager, root):
        manager = make_manager()
        project = Project(name="site", path="site", source=Source(SourceType.WEB, "https://example.com"))

        with pytest.raises(UnsupportedSourceTypeError):
            manager.resolve_or_fetch(project)
        assert not (root / "site").exists()

    def test_fetch_errors_propagate(self, make_manager, monkeypatch):
        def _fail(source, target_dir):
            raise CredentialsError("no agent")

        monkeypatch.setattr(manager_mod, "fetch_source", _fail)
        project = Project(name="p", path="p", source=Source(SourceType.GIT, "git@h:p.git"))

        with pytest.raises(CredentialsError):
            make_manager().resolve_or_fetch(project)


class TestOpenAndNavigate:
    def test_open_launches_editor_on_directory(self, make_manager, root, editor_calls, fetch_calls):
        (root / "blog").mkdir()
        manager = make_manager()
        manager.config.add(Project(name="blog", path="blog"))

        assert manager.open("blog") == root / "blog"
        assert editor_calls == [("true", root / "blog")]
        assert fetch_calls == []
        assert manager.modified is False

    def test_open_fetches_first(self, make_manager, root, editor_calls, fetch_calls):
        manager = make_manager()
        manager.config.add(Project(name="s", path="sample", source=Source(SourceType.GIT, SAMPLE_URL)))

        manager.open("s")

        assert len(fetch_calls) == 1
        assert editor_calls == [("true", root / "sample")]

    def test_open_unknown(self, make_manager, editor_calls):
        with pytest.raises(NotFoundError):
            make_manager().open("nope")
        assert editor_calls == []

    def test_open_without_source_does_not_launch(self, make_manager, editor_calls):
        manager = make_manager()
        manager.config.add(Project(name="lost", path="lost"))

        with pytest.raises(SourceUnavailableError):
            manager.open("lost")
        assert editor_calls == []

    def test_navigate(self, make_manager, root, fetch_calls, editor_calls):
        manager = make_manager()
        manager.config.add(Project(name="s", path="sample", source=Source(SourceType.GIT, SAMPLE_URL)))

        assert manager.navigate("s") == root / "sample"
        assert len(fetch_calls) == 1
        assert editor_calls == []

    def test_edit_config(self, make_manager, tmp_path, editor_calls):
        path = tmp_path / "projects.json"
        make_manager().edit_config(path)
        assert editor_calls == [("true", path)]


class TestAddFromDirectory:
    @pytest.fixture(autouse=True)
    def no_git(self, monkeypatch):
        monkeypatch.setattr(manager_mod, "detect_source", lambda project_dir: None)

    def test_adds_relative_path(self, make_manager, root):
        (root / "group" / "blog").mkdir(parents=True)
        manager = make_manager("blog", "My blog")

        project = manager.add_from_directory(root / "group" / "blog")

        assert project == Project(name="blog", path="group/blog", description="My blog")
        assert manager.find("blog") is project
        assert manager.modified is True

    def test_empty_description_is_none(self, make_manager, root):
        (root / "blog").mkdir()
        project = make_manager("blog", "").add_from_directory(root / "blog")
        assert project.description is None

    def test_collision_reprompts(self, make_manager, root):
        (root / "one").mkdir()
        (root / "two").mkdir()
        manager = make_manager()
        manager.config.add(Project(name="taken", path="one"))
        manager.prompter.answers = ["taken", "", "fresh", "desc"]

        project = manager.add_from_directory(root / "two")

        assert project.name == "fresh"
        assert [p.name for p in manager.config.projects] == ["taken", "fresh"]
        assert manager.prompter.messages.count("Enter project name: ") == 3

    def test_outside_root(self, make_manager, home):
        outside = home / "elsewhere"
        outside.mkdir()
        manager = make_manager()

        with pytest.raises(PathOutsideRootError):
            manager.add_from_directory(outside)
        assert manager.config.projects == []
        assert manager.modified is False
        assert manager.prompter.messages == []

    def test_detected_source_is_stored(self, make_manager, root, monkeypatch):
        (root / "repo").mkdir()
        source = Source(SourceType.GIT, "git@example.com:org/repo.git")
        monkeypatch.setattr(manager_mod, "detect_source", lambda project_dir: source)

        project = make_manager("repo", "").add_from_directory(root / "repo")

        assert project.source == source


class TestAddFromSource:
    def test_scenario(self, make_manager, root, fetch_calls):
        manager = make_manager("sample", "")
        source = Source(SourceType.GIT, SAMPLE_URL)

        project = manager.add_from_source(source)

        assert project == Project(name="sample", path="sample", source=source)
        assert manager.config.projects == [project]
        assert manager.modified is True
        # Nothing is materialized until the project is opened
        assert fetch_calls == []
        assert not (root / "sample").exists()

        assert manager.list_projects() == ProjectTable(columns=[], rows=[["sample"]])
        assert manager.list_projects(path=True) == ProjectTable(
            columns=["Name", "Path"], rows=[["sample", "sample"]]
        )

    def test_name_collision_reprompts(self, make_manager):
        manager = make_manager()
        manager.config.add(Project(name="sample", path="sample"))
        manager.prompter.answers = ["sample", "sample-2", "second copy"]

        project = manager.add_from_source(Source(SourceType.GIT, SAMPLE_URL))

        assert project.name == "sample-2"
        assert project.description == "second copy"
        assert len({p.name for p in manager.config.projects}) == 2

    def test_invalid_url(self, make_manager):
        manager = make_manager("x")
        with pytest.raises(InvalidSourceError):
            manager.add_from_source(Source(SourceType.GIT, "https://example.com/.."))
        assert manager.config.projects == []


class TestRemove:
    @pytest.fixture
    def blog(self, make_manager, root):
        (root / "blog" / "src").mkdir(parents=True)
        (root / "blog" / "src" / "index.md").write_text("hi")

        def _make(*answers):
            manager = make_manager(*answers)
            manager.config.add(Project(name="blog", path="blog"))
            return manager

        return _make

    def test_decline_first_confirmation(self, blog, root):
        manager = blog("n")

        result = manager.remove("blog")

        assert result.aborted is True
        assert manager.find("blog") is not None
        assert (root / "blog" / "src" / "index.md").exists()
        assert manager.modified is False
        assert len(manager.prompter.messages) == 1

    def test_decline_second_confirmation(self, blog, root):
        manager = blog("y", "n")

        result = manager.remove("blog")

        assert result.directory_removed is True
        assert result.entry_removed is False
        assert not (root / "blog").exists()
        assert manager.find("blog") is not None

    def test_confirm_both(self, blog, root):
        manager = blog("yes", "Y")

        result = manager.remove("blog")

        assert result.entry_removed is True
        assert result.directory_removed is True
        assert manager.find("blog") is None
        assert not (root / "blog").exists()
        assert manager.modified is True

    def test_missing_directory(self, make_manager, root):
        manager = make_manager("y", "y")
        manager.config.add(Project(name="gone", path="gone"))

        result = manager.remove("gone")

        assert result.directory_removed is False
        assert result.entry_removed is True

    def test_unknown_project(self, make_manager):
        manager = make_manager()
        with pytest.raises(NotFoundError):
            manager.remove("ghost")
        assert manager.prompter.messages == []


class TestListProjects:
    @pytest.fixture
    def manager(self, make_manager):
        manager = make_manager()
        manager.config.add(Project(name="zeta", path="z", description="last", languages=["Go"]))
        manager.config.add(
            Project(
                name="Alpha",
                path="a",
                languages=["Rust", "C"],
                source=Source(SourceType.GIT, "https://example.com/a.git"),
            )
        )
        manager.config.add(Project(name="beta", path="b"))
        return manager

    def test_sorted_case_insensitively(self, manager):
        table = manager.list_projects()
        assert table.columns == []
        assert table.rows == [["Alpha"], ["beta"], ["zeta"]]

    def test_all_columns(self, manager):
        table = manager.list_projects(path=True, description=True, languages=True, source=True)

        assert table.columns == ["Name", "Path", "Description", "Languages", "Source"]
        assert table.rows == [
            ["Alpha", "a", "", "Rust, C", "https://example.com/a.git"],
            ["beta", "b", "", "", ""],
            ["zeta", "z", "last", "Go", ""],
        ]

    def test_single_column(self, manager):
        table = manager.list_projects(source=True)
        assert table.columns == ["Name", "Source"]
        assert table.rows[0] == ["Alpha", "https://example.com/a.git"]

    def test_does_not_reorder_registry(self, manager):
        manager.list_projects()
        assert [p.name for p in manager.config.projects] == ["zeta", "Alpha", "beta"]

    def test_empty(self, make_manager):
        assert make_manager().list_projects(path=True) == ProjectTable(columns=["Name", "Path"], rows=[])


class TestInspect:
    def test_scenario(self, make_manager, root):
        (root / "a").mkdir()
        (root / "b").mkdir()
        manager = make_manager()
        manager.config.add(Project(name="A", path="a"))

        assert manager.inspect() == ["b"]

    def test_ignores_files_and_hidden_dirs(self, make_manager, root):
        (root / "notes.txt").write_text("x")
        (root / ".cache").mkdir()
        (root / "c").mkdir()

        assert make_manager().inspect() == ["c"]

    def test_nested_project_claims_top_folder(self, make_manager, root):
        (root / "group" / "app").mkdir(parents=True)
        (root / "other").mkdir()
        manager = make_manager()
        manager.config.add(Project(name="app", path="group/app"))

        assert manager.inspect() == ["other"]

    def test_missing_root(self, home, prompter):
        from project_manager.errors import ProjectIOError
        from project_manager.types import ProjectConfig

        manager = ProjectManager(ProjectConfig(editor="true", root_dir="nowhere"), prompter=prompter([]))
        with pytest.raises(ProjectIOError, match="does not exist"):
            manager.inspect()
