"""Console output for the posixfs command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from posixfs.types import FileKind

if TYPE_CHECKING:
    from posixfs.config import FsConfig
    from posixfs.errors import ErrorCode, FilesystemError
    from posixfs.path import Path

_KIND_STYLES = {
    FileKind.DIRECTORY: "bold blue",
    FileKind.SYMLINK: "cyan",
    FileKind.OTHER: "magenta",
}


class Reporter:
    """Renders command results and failures."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def show_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def show_info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    def show_failure(self, error: FilesystemError | ErrorCode, warning: bool = False) -> None:
        """Show a filesystem failure as ``kind: message (path)``.

        Args:
            error: A raised FilesystemError or a set ErrorCode.
            warning: Render as a warning instead of an error.
        """
        kind = error.kind.value if error.kind else "unknown"
        message = getattr(error, "strerror", None) or getattr(error, "message", "")
        text = f"{kind}: {message}"
        if error.path1 is not None:
            text += f" ({error.path1})"
        if warning:
            self.show_warning(text)
        else:
            self.show_error(text)

    def show_entries(self, title: str, rows: list[tuple[str, FileKind, int | None]]) -> None:
        """Display directory entries as a table.

        Args:
            title: Table title (usually the listed directory).
            rows: (name, kind, size) tuples; size is None where unavailable.
        """
        if not rows:
            self.console.print("[yellow]Directory is empty[/yellow]")
            return

        table = Table(title=escape(title))
        table.add_column("Name", style="cyan")
        table.add_column("Kind")
        table.add_column("Size", justify="right")
        for name, kind, size in rows:
            table.add_row(
                escape(name),
                f"[{_KIND_STYLES.get(kind, 'default')}]{kind.value}[/]",
                "" if size is None else str(size),
            )
        self.console.print(table)

    def show_tree(self, tree: Tree) -> None:
        self.console.print(tree)

    def new_tree(self, root: Path) -> Tree:
        return Tree(f"[bold blue]{escape(str(root))}[/bold blue]")

    def tree_label(self, name: str, kind: FileKind) -> str:
        style = _KIND_STYLES.get(kind)
        return f"[{style}]{escape(name)}[/]" if style else escape(name)

    def show_status(self, path: Path, kind: FileKind, size: int | None) -> None:
        self.console.print(f"[bold]{escape(str(path))}[/bold]")
        self.console.print(f"  Kind: {kind.value}")
        if size is not None:
            self.console.print(f"  Size: {size}")

    def show_config(self, config: FsConfig, location: object) -> None:
        self.console.print("\n[bold]Configuration[/bold]")
        self.console.print(f"  Config file: {escape(str(location))}")
        for name, value in config.model_dump().items():
            self.console.print(f"  {name.replace('_', '-')}: {value}")
