"""CLI commands using Typer."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from posixfs.context import AppContext
    from posixfs.iterators import DirectoryEntry

import typer
from rich.console import Console
from rich.logging import RichHandler

from posixfs import __version__
from posixfs.console import Reporter
from posixfs.context import create_context
from posixfs.errors import ErrorCode, FilesystemError
from posixfs.iterators import DirectoryIterator, RecursiveDirectoryIterator
from posixfs.operations import (
    create_directories,
    create_directory,
    file_size,
    remove,
    remove_all,
    status,
)
from posixfs.path import Path
from posixfs.types import FileKind

app = typer.Typer(
    name="posixfs",
    help="Inspect and modify directory trees",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration commands")

app.add_typer(config_app, name="config")

console = Console()
reporter = Reporter(console)

# Global options set by the app callback
state = {"verbose": False}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"posixfs v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-V", help="Log every filesystem call outcome")
    ] = False,
) -> None:
    """Inspect and modify directory trees."""
    state["verbose"] = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _load_context(context: AppContext | None) -> AppContext:
    """Return the injected context or build the default one."""
    if context is None:
        try:
            context = create_context()
        except ValueError as e:
            reporter.show_error(str(e))
            raise typer.Exit(1) from e
    # --verbose overrides the configured level
    level = logging.DEBUG if state["verbose"] else context.config.logging_level
    logging.getLogger("posixfs").setLevel(level)
    return context


def _lenient(ctx: AppContext) -> ErrorCode | None:
    """ErrorCode for keep-going mode, None for strict mode."""
    return ErrorCode() if ctx.config.keep_going else None


# ============================================================================
# Listing Commands
# ============================================================================


def _describe(entry: DirectoryEntry) -> tuple[FileKind, int | None]:
    """Kind and size of an entry for display; failures show as kind 'none'."""
    kind = entry.symlink_status(ec=ErrorCode())
    size = None
    if kind is FileKind.REGULAR:
        ec = ErrorCode()
        size = entry.file_size(ec=ec)
        if ec:
            size = None
    return kind, size


def _relative_name(root: Path, entry: DirectoryEntry) -> str:
    return entry.path.native[len(root.native) :].lstrip("/")


@app.command("ls")
def list_directory(
    path: Annotated[str, typer.Argument(help="Directory to list")] = ".",
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Descend into subdirectories")
    ] = False,
    _context=None,
) -> None:
    """List directory entries."""
    ctx = _load_context(_context)
    root = Path(path)
    ec = _lenient(ctx)
    iterator_cls = RecursiveDirectoryIterator if recursive else DirectoryIterator
    rows: list[tuple[str, FileKind, int | None]] = []
    had_errors = False

    try:
        with iterator_cls(
            root, options=ctx.config.directory_options(), syscalls=ctx.syscalls, ec=ec
        ) as entries:
            if ec:
                reporter.show_failure(ec)
                raise typer.Exit(1)
            for entry in entries:
                if ec:
                    reporter.show_failure(ec, warning=True)
                    had_errors = True
                rows.append((_relative_name(root, entry), *_describe(entry)))
            if ec:
                reporter.show_failure(ec, warning=True)
                had_errors = True
    except FilesystemError as e:
        reporter.show_failure(e)
        raise typer.Exit(1) from e

    reporter.show_entries(str(root), rows)
    if had_errors:
        raise typer.Exit(1)


@app.command("tree")
def show_tree(
    path: Annotated[str, typer.Argument(help="Root of the tree")] = ".",
    _context=None,
) -> None:
    """Show a directory tree."""
    ctx = _load_context(_context)
    root = Path(path)
    ec = _lenient(ctx)
    tree = reporter.new_tree(root)
    nodes = [tree]
    had_errors = False

    try:
        with RecursiveDirectoryIterator(
            root, options=ctx.config.directory_options(), syscalls=ctx.syscalls, ec=ec
        ) as entries:
            if ec:
                reporter.show_failure(ec)
                raise typer.Exit(1)
            for entry in entries:
                if ec:
                    reporter.show_failure(ec, warning=True)
                    had_errors = True
                depth = entries.depth
                del nodes[depth + 1 :]
                kind, _ = _describe(entry)
                nodes.append(nodes[depth].add(reporter.tree_label(entry.name, kind)))
            if ec:
                reporter.show_failure(ec, warning=True)
                had_errors = True
    except FilesystemError as e:
        reporter.show_failure(e)
        raise typer.Exit(1) from e

    reporter.show_tree(tree)
    if had_errors:
        raise typer.Exit(1)


@app.command("stat")
def show_status(
    path: Annotated[str, typer.Argument(help="Path to inspect")],
    _context=None,
) -> None:
    """Show the kind and size of a path."""
    ctx = _load_context(_context)
    target = Path(path)

    try:
        kind = status(target, syscalls=ctx.syscalls)
        size = file_size(target, syscalls=ctx.syscalls) if kind is FileKind.REGULAR else None
    except FilesystemError as e:
        reporter.show_failure(e)
        raise typer.Exit(1) from e

    if kind is FileKind.NOT_FOUND:
        reporter.show_error(f"'{target}' does not exist")
        raise typer.Exit(1)
    reporter.show_status(target, kind, size)


# ============================================================================
# Mutating Commands
# ============================================================================


@app.command("mkdir")
def make_directory(
    path: Annotated[str, typer.Argument(help="Directory to create")],
    parents: Annotated[
        bool, typer.Option("--parents", "-p", help="Create missing parent directories")
    ] = False,
    _context=None,
) -> None:
    """Create a directory."""
    ctx = _load_context(_context)
    target = Path(path)

    try:
        if parents:
            created = create_directories(target, syscalls=ctx.syscalls)
            if created:
                reporter.show_success(f"Created {created} directories for '{target}'")
            else:
                reporter.show_info(f"'{target}' already exists")
        elif create_directory(target, syscalls=ctx.syscalls):
            reporter.show_success(f"Created '{target}'")
        else:
            reporter.show_warning(f"'{target}' already exists")
    except FilesystemError as e:
        reporter.show_failure(e)
        raise typer.Exit(1) from e


@app.command("rm")
def remove_path(
    path: Annotated[str, typer.Argument(help="File or directory to remove")],
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Remove directories and their contents")
    ] = False,
    _context=None,
) -> None:
    """Remove a file or directory."""
    ctx = _load_context(_context)
    target = Path(path)
    ec = _lenient(ctx)

    try:
        if recursive:
            removed = remove_all(target, syscalls=ctx.syscalls, ec=ec)
            if ec:
                reporter.show_failure(ec)
                raise typer.Exit(1)
            if removed:
                reporter.show_success(f"Removed {removed} objects under '{target}'")
            else:
                reporter.show_warning(f"'{target}' does not exist")
        elif remove(target, syscalls=ctx.syscalls, ec=ec):
            reporter.show_success(f"Removed '{target}'")
        elif ec:
            reporter.show_failure(ec)
            raise typer.Exit(1)
        else:
            reporter.show_warning(f"'{target}' does not exist")
    except FilesystemError as e:
        reporter.show_failure(e)
        raise typer.Exit(1) from e


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    _context=None,
) -> None:
    """Show current configuration."""
    ctx = _load_context(_context)
    reporter.show_config(ctx.config, ctx.config_path)


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Configuration key")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
    _context=None,
) -> None:
    """Set a configuration value."""
    ctx = _load_context(_context)

    try:
        ctx.config.set_value(key, value)
    except KeyError as e:
        reporter.show_error(f"Unknown configuration key: {key}")
        raise typer.Exit(1) from e
    except ValueError as e:
        reporter.show_error(str(e))
        raise typer.Exit(1) from e

    ctx.config.save(ctx.config_path)
    reporter.show_success(f"Set {key} to {value}")


if __name__ == "__main__":
    app()
