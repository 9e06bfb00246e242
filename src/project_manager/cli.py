"""CLI interface for project-manager (``pm``).

Each subcommand loads the registry, runs one ProjectManager operation and
saves the registry if the operation changed it.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__, config
from .errors import ProjectManagerError
from .manager import ProjectManager
from .types import ProjectTable, Source, SourceType

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def _status(msg: str) -> None:
    """Status messages go to stderr so stdout stays usable in scripts."""
    err_console.print(f"[dim]{escape(msg)}[/dim]")


def _manager() -> ProjectManager:
    return ProjectManager(config.load_config(), log=_status)


def _save_if_modified(manager: ProjectManager) -> None:
    if manager.modified:
        config.save_config(manager.config)
        _status("Project configuration saved")


def render_table(table: ProjectTable) -> Table:
    """Build a borderless rich table from a project listing."""
    rich_table = Table(box=None, show_header=bool(table.columns), pad_edge=False)
    if table.columns:
        for column in table.columns:
            rich_table.add_column(column, header_style="bold")
    else:
        rich_table.add_column()
    for row in table.rows:
        rich_table.add_row(*row)
    return rich_table


def cmd_open(args):
    """Open a project in the configured editor."""
    manager = _manager()
    manager.open(args.project_name)


def cmd_pwd(args):
    """Print a project's directory, fetching it if needed."""
    manager = _manager()
    project_dir = manager.navigate(args.project_name)
    print(project_dir)


def cmd_add(args):
    """Register an existing directory."""
    manager = _manager()
    project = manager.add_from_directory(args.directory)
    console.print(f"[green]+[/green] Added {escape(project.name)} [dim]({escape(project.path)})[/dim]")
    _save_if_modified(manager)


def cmd_add_source(args):
    """Register a project to be fetched from a remote source."""
    manager = _manager()
    _status("Adding new source...")
    project = manager.add_from_source(Source(SourceType(args.type), args.url))
    console.print(f"[green]+[/green] Added {escape(project.name)} [dim]({escape(project.path)})[/dim]")
    _save_if_modified(manager)


def cmd_remove(args):
    """Remove a project's directory and, optionally, its registry entry."""
    manager = _manager()
    result = manager.remove(args.project_name)
    if result.entry_removed:
        console.print(f"Removed {escape(args.project_name)} from the project list")
    _save_if_modified(manager)


def cmd_list(args):
    """List registered projects."""
    manager = _manager()
    table = manager.list_projects(
        path=args.path,
        description=args.description,
        languages=args.languages,
        source=args.source,
    )
    if not table.rows:
        _status("No projects registered")
        return
    console.print(render_table(table))


def cmd_edit(args):
    """Open the registry document in the configured editor."""
    manager = _manager()
    manager.edit_config(config.get_config_path())


def cmd_inspect(args):
    """Show folders under the root directory that are not registered."""
    manager = _manager()
    folders = manager.inspect()
    if not folders:
        console.print("No unregistered folders found")
        return
    console.print("Unregistered folders:")
    for folder in folders:
        console.print(f"  {escape(folder)}")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pm",
        description="Project Manager CLI",
    )
    parser.add_argument("--version", action="version", version=f"pm {__version__}")
    parser.add_argument("--debug", action="store_true", help="Write debug log to the config directory")

    subparsers = parser.add_subparsers(dest="command")

    # open
    open_p = subparsers.add_parser("open", help="Open a project in the editor")
    open_p.add_argument("project_name", help="Project name")
    open_p.set_defaults(func=cmd_open)

    # pwd
    pwd_p = subparsers.add_parser("pwd", help="Print a project's directory")
    pwd_p.add_argument("project_name", help="Project name")
    pwd_p.set_defaults(func=cmd_pwd)

    # add
    add_p = subparsers.add_parser("add", help="Register an existing directory")
    add_p.add_argument("directory", help="Directory inside the root directory")
    add_p.set_defaults(func=cmd_add)

    # remove
    rm_p = subparsers.add_parser("remove", help="Remove a project")
    rm_p.add_argument("project_name", help="Project name")
    rm_p.set_defaults(func=cmd_remove)

    # add-source
    src_p = subparsers.add_parser("add-source", help="Register a project from a remote source")
    src_p.add_argument("url", help="Source URL")
    src_p.add_argument("--type", choices=[t.value for t in SourceType], default=SourceType.GIT.value,
                       help="Source type (default: git)")
    src_p.set_defaults(func=cmd_add_source)

    # list
    list_p = subparsers.add_parser("list", help="List registered projects")
    list_p.add_argument("-p", "--path", action="store_true", help="Show project paths")
    list_p.add_argument("-d", "--description", action="store_true", help="Show descriptions")
    list_p.add_argument("-l", "--languages", action="store_true", help="Show languages")
    list_p.add_argument("-s", "--source", action="store_true", help="Show source URLs")
    list_p.set_defaults(func=cmd_list)

    # edit
    edit_p = subparsers.add_parser("edit", help="Edit the project registry file")
    edit_p.set_defaults(func=cmd_edit)

    # inspect
    inspect_p = subparsers.add_parser("inspect", help="Find unregistered folders in the root directory")
    inspect_p.set_defaults(func=cmd_inspect)

    return parser


def setup_logging(debug: bool = False) -> None:
    """Send warnings to stderr, and everything to the debug log with --debug."""
    root = logging.getLogger("project_manager")
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(stderr_handler)

    if debug:
        try:
            log_path = config.get_log_path()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except (ProjectManagerError, OSError) as e:
            err_console.print(f"[yellow]Debug log unavailable:[/yellow] {escape(str(e))}")
            return
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        root.addHandler(file_handler)


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except ProjectManagerError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print(file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
