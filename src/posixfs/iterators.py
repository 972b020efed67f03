"""Directory enumeration.

DirectoryIterator walks the immediate children of one directory;
RecursiveDirectoryIterator walks a whole tree depth-first (pre-order) by
keeping an explicit stack of DirectoryIterators, one per level.

Both position themselves on the first entry at construction, never yield
"." or "..", and collapse into a single end state that compares equal to
every other end iterator. Each live level owns exactly one directory handle,
released as soon as the level is exhausted, closed, or the iterator is
garbage collected.
"""

from __future__ import annotations

import errno
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from posixfs import queries
from posixfs.errors import ErrorCode, FilesystemError, invoke, reports_errors
from posixfs.path import Path, PathArg
from posixfs.protocols import Syscalls
from posixfs.syscalls import OsSyscalls
from posixfs.types import DirectoryOptions, FileKind

__all__ = ["DirectoryEntry", "DirectoryIterator", "RecursiveDirectoryIterator"]

logger = logging.getLogger(__name__)

_SKIPPED_NAMES = (".", "..")
_PERMISSION_ERRNOS = (errno.EACCES, errno.EPERM)


@dataclass(frozen=True)
class DirectoryEntry:
    """A path produced by directory iteration.

    Attributes:
        path: Directory path joined with the entry name.
        name: The raw name the OS returned for the entry.
    """

    path: Path
    name: str
    syscalls: Syscalls | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.name or self.name in _SKIPPED_NAMES:
            raise ValueError(f"invalid directory entry name: {self.name!r}")

    def __fspath__(self) -> str:
        return str(self.path)

    def status(self, *, ec: ErrorCode | None = None) -> FileKind:
        return queries.status(self.path, syscalls=self.syscalls, ec=ec)

    def symlink_status(self, *, ec: ErrorCode | None = None) -> FileKind:
        return queries.symlink_status(self.path, syscalls=self.syscalls, ec=ec)

    def is_directory(self, *, ec: ErrorCode | None = None) -> bool:
        return queries.is_directory(self.path, syscalls=self.syscalls, ec=ec)

    def is_regular_file(self, *, ec: ErrorCode | None = None) -> bool:
        return queries.is_regular_file(self.path, syscalls=self.syscalls, ec=ec)

    def is_symlink(self, *, ec: ErrorCode | None = None) -> bool:
        return queries.is_symlink(self.path, syscalls=self.syscalls, ec=ec)

    def file_size(self, *, ec: ErrorCode | None = None) -> int:
        return queries.file_size(self.path, syscalls=self.syscalls, ec=ec)


class _EndComparable(ABC):
    """Equality shared by both iterators: all end states are equal."""

    at_end: bool

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        if self.at_end and other.at_end:
            return True
        return self is other

    __hash__ = None  # type: ignore[assignment]

    def __copy__(self) -> Any:
        raise TypeError(f"{type(self).__name__} owns directory handles and cannot be copied")

    def __deepcopy__(self, memo: dict) -> Any:
        return self.__copy__()

    def __enter__(self) -> Any:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    @abstractmethod
    def close(self) -> None:
        """Release every handle and move to the end state."""


class DirectoryIterator(_EndComparable):
    """Lazy iteration over the immediate children of one directory.

    Construction opens the directory and positions on the first entry.
    Passing ``ec`` selects the lenient convention for construction and for
    every later advance made through iteration; an open failure then yields
    an iterator already at the end.

    Example:
        >>> for entry in DirectoryIterator("/etc"):
        ...     print(entry.name)
    """

    def __init__(
        self,
        path: PathArg | None = None,
        *,
        options: DirectoryOptions = DirectoryOptions.NONE,
        syscalls: Syscalls | None = None,
        ec: ErrorCode | None = None,
    ) -> None:
        self._syscalls = syscalls or OsSyscalls()
        self._options = options
        self._ec = ec
        self._handle: Any = None
        self._directory: Path | None = None
        self._entry: DirectoryEntry | None = None
        self._delivered = False
        if path is not None:
            invoke(self._open, Path(path), ec=ec)

    @property
    def at_end(self) -> bool:
        return self._handle is None

    @property
    def entry(self) -> DirectoryEntry | None:
        """The current entry, or None at the end."""
        return self._entry

    @property
    def directory(self) -> Path | None:
        """The directory being listed, or None if it was never opened."""
        return self._directory

    @property
    def options(self) -> DirectoryOptions:
        return self._options

    def _open(self, path: Path, *, ec: ErrorCode) -> None:
        ec.clear()
        try:
            self._handle = self._syscalls.opendir(str(path))
        except OSError as e:
            if e.errno in _PERMISSION_ERRNOS and DirectoryOptions.SKIP_PERMISSION_DENIED in self._options:
                logger.debug("Skipping unreadable directory %s", path)
                return
            ec.assign(e.errno, path)
            return
        self._directory = path
        self._advance(ec=ec)

    def _advance(self, *, ec: ErrorCode) -> None:
        ec.clear()
        self._delivered = False
        while self._handle is not None:
            try:
                name = self._syscalls.readdir(self._handle)
            except OSError as e:
                ec.assign(e.errno, self._directory)
                self.close()
                return
            if name is None:
                self.close()
                return
            if name in _SKIPPED_NAMES:
                continue
            self._entry = DirectoryEntry(self._directory / name, name, self._syscalls)
            return

    @reports_errors
    def increment(self, *, ec: ErrorCode) -> DirectoryIterator:
        """Advance to the next entry.

        Returns:
            This iterator, for chaining.
        """
        if self.at_end:
            raise ValueError("cannot advance an exhausted directory iterator")
        self._advance(ec=ec)
        return self

    def close(self) -> None:
        """Release the directory handle and move to the end state."""
        handle, self._handle = getattr(self, "_handle", None), None
        self._entry = None
        if handle is not None:
            self._syscalls.closedir(handle)

    def __iter__(self) -> DirectoryIterator:
        return self

    def __next__(self) -> DirectoryEntry:
        if self.at_end:
            raise StopIteration
        if self._delivered:
            self.increment(ec=self._ec)
            if self.at_end:
                raise StopIteration
        self._delivered = True
        return self._entry

    def __repr__(self) -> str:
        if self.at_end:
            return "DirectoryIterator(<end>)"
        return f"DirectoryIterator({self._entry.path!r})"


class RecursiveDirectoryIterator(_EndComparable):
    """Depth-first, pre-order iteration over a directory tree.

    A directory entry is yielded before its children. Levels are kept on an
    explicit stack (deepest last), so traversal depth never consumes Python
    stack frames.

    Errors opening or reading any level are reported once, at the step where
    they happen. In lenient mode the failing level is abandoned and the
    traversal continues with its parent; in strict mode every level is
    closed and the error is raised.

    In lenient mode the ErrorCode given at construction reflects the most
    recent step only, so a caller iterating with ``for`` checks it after
    each entry (and once more after the loop):

        >>> ec = ErrorCode()
        >>> for entry in RecursiveDirectoryIterator(root, ec=ec):
        ...     if ec:
        ...         print("skipped", ec.path1)
    """

    def __init__(
        self,
        path: PathArg | None = None,
        *,
        options: DirectoryOptions = DirectoryOptions.NONE,
        syscalls: Syscalls | None = None,
        ec: ErrorCode | None = None,
    ) -> None:
        self._syscalls = syscalls or OsSyscalls()
        self._options = options
        self._ec = ec
        self._stack: list[DirectoryIterator] = []
        self._unsearchable: DirectoryIterator | None = None
        self._recursion_pending = True
        self._delivered = False
        if path is not None:
            invoke(self._open, Path(path), ec=ec)

    @property
    def at_end(self) -> bool:
        return not self._stack

    @property
    def entry(self) -> DirectoryEntry | None:
        return self._stack[-1].entry if self._stack else None

    @property
    def depth(self) -> int:
        """Nesting level of the current entry; 0 for the starting directory."""
        return len(self._stack) - 1

    @property
    def options(self) -> DirectoryOptions:
        return self._options

    @property
    def recursion_pending(self) -> bool:
        """Whether the next advance may descend into the current entry."""
        return self._recursion_pending

    def disable_recursion_pending(self) -> None:
        """Skip the children of the current entry on the next advance."""
        self._recursion_pending = False

    def _level(self, path: Path, ec: ErrorCode) -> DirectoryIterator:
        return DirectoryIterator(path, options=self._options, syscalls=self._syscalls, ec=ec)

    def _open(self, path: Path, *, ec: ErrorCode) -> None:
        level = self._level(path, ec)
        if not level.at_end:
            self._stack.append(level)

    def _should_descend(self, level: DirectoryIterator, entry: DirectoryEntry, ec: ErrorCode) -> bool:
        kind = entry.symlink_status(ec=ec)
        if ec.value in _PERMISSION_ERRNOS:
            self._report_unsearchable(level, ec)
            return False
        if kind is FileKind.SYMLINK and DirectoryOptions.FOLLOW_DIRECTORY_SYMLINK in self._options:
            kind = entry.status(ec=ec)
        return kind is FileKind.DIRECTORY

    def _report_unsearchable(self, level: DirectoryIterator, ec: ErrorCode) -> None:
        # A listable but unsearchable directory fails lstat for every entry;
        # report it once, against the directory itself.
        if level is self._unsearchable or DirectoryOptions.SKIP_PERMISSION_DENIED in self._options:
            ec.clear()
            return
        self._unsearchable = level
        ec.assign(ec.value, level.directory)

    def _increment(self, *, ec: ErrorCode) -> None:
        ec.clear()
        self._delivered = False
        descend = self._recursion_pending
        self._recursion_pending = True
        if descend:
            level = self._stack[-1]
            entry = level.entry
            step = ErrorCode()
            if self._should_descend(level, entry, step):
                child = self._level(entry.path, step)
                if not child.at_end:
                    self._stack.append(child)
                    return
            if step:
                logger.debug("Abandoning %s: %s", entry.path, step.message)
                ec.assign_from(step)
        self._advance_levels(ec)

    def _advance_levels(self, ec: ErrorCode) -> None:
        # Move the deepest level on; exhausted or failed levels are popped
        # and their parent advanced in turn.
        while self._stack:
            step = ErrorCode()
            self._stack[-1].increment(ec=step)
            if step and not ec:
                ec.assign_from(step)
            if not self._stack[-1].at_end:
                return
            self._stack.pop().close()

    def increment(self, *, ec: ErrorCode | None = None) -> RecursiveDirectoryIterator:
        """Advance to the next entry in pre-order.

        Returns:
            This iterator, for chaining.

        Raises:
            FilesystemError: In strict mode; the traversal is closed first.
        """
        if self.at_end:
            raise ValueError("cannot advance an exhausted directory iterator")
        try:
            invoke(self._increment, ec=ec)
        except FilesystemError:
            self.close()
            raise
        return self

    @reports_errors
    def pop(self, *, ec: ErrorCode) -> RecursiveDirectoryIterator:
        """Leave the current directory and continue with its parent's next entry."""
        ec.clear()
        self._delivered = False
        self._recursion_pending = True
        if self._stack:
            self._stack.pop().close()
            self._advance_levels(ec)
        return self

    def close(self) -> None:
        """Release every open level."""
        stack = getattr(self, "_stack", None) or []
        while stack:
            stack.pop().close()

    def __iter__(self) -> RecursiveDirectoryIterator:
        return self

    def __next__(self) -> DirectoryEntry:
        if self.at_end:
            raise StopIteration
        if self._delivered:
            self.increment(ec=self._ec)
            if self.at_end:
                raise StopIteration
        self._delivered = True
        return self.entry

    def __repr__(self) -> str:
        if self.at_end:
            return "RecursiveDirectoryIterator(<end>)"
        return f"RecursiveDirectoryIterator({self.entry.path!r}, depth={self.depth})"
