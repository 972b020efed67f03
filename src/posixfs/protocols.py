"""Protocol definition for the operating-system boundary.

posixfs never calls ``os`` directly outside of OsSyscalls. Everything else
talks to an object satisfying the Syscalls protocol, so tests can inject
failures (for example a permission error on one directory) regardless of the
privileges the test runner has.

All implementations signal failure by raising OSError with ``errno`` set.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from posixfs.types import Metadata


@runtime_checkable
class Syscalls(Protocol):
    """Protocol for the raw filesystem calls posixfs is built on."""

    def stat(self, path: str, follow_symlinks: bool = True) -> Metadata:
        """Query metadata for a path.

        Args:
            path: Path text.
            follow_symlinks: Describe the link target rather than the link.

        Returns:
            Metadata for the object.

        Raises:
            OSError: ENOENT if nothing exists there, or any other failure.
        """
        ...

    def opendir(self, path: str) -> Any:
        """Open a directory for reading.

        Args:
            path: Directory path text.

        Returns:
            An opaque handle for readdir/closedir.

        Raises:
            OSError: ENOTDIR, ENOENT, EACCES and so on.
        """
        ...

    def readdir(self, handle: Any) -> str | None:
        """Read the next raw entry name.

        Args:
            handle: Handle returned by opendir.

        Returns:
            The entry name, or None at end of directory. Implementations may
            return "." and "..".
        """
        ...

    def closedir(self, handle: Any) -> None:
        """Release a directory handle."""
        ...

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        """Create a single directory."""
        ...

    def unlink(self, path: str) -> None:
        """Remove a non-directory object."""
        ...

    def rmdir(self, path: str) -> None:
        """Remove an empty directory."""
        ...
