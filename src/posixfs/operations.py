"""Create and remove operations.

Each function supports both error conventions (see posixfs.errors). The
status queries are re-exported here so callers can import every operation
from one place.
"""

from __future__ import annotations

import errno
import logging
from dataclasses import dataclass
from typing import Callable

from posixfs.errors import ERROR_VALUE, ErrorCode, reports_errors
from posixfs.iterators import DirectoryIterator
from posixfs.path import Path, PathArg
from posixfs.protocols import Syscalls
from posixfs.queries import (
    exists,
    file_size,
    is_directory,
    is_regular_file,
    is_symlink,
    status,
    symlink_status,
)
from posixfs.syscalls import OsSyscalls
from posixfs.types import FileKind

__all__ = [
    "create_directories",
    "create_directory",
    "exists",
    "file_size",
    "is_directory",
    "is_regular_file",
    "is_symlink",
    "remove",
    "remove_all",
    "status",
    "symlink_status",
]

logger = logging.getLogger(__name__)


@reports_errors
def create_directory(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> bool:
    """Create a single directory.

    Args:
        p: Directory to create; its parent must already exist.
        syscalls: Syscall layer override.
        ec: ErrorCode for the lenient convention.

    Returns:
        True if a directory was created, False if something already existed
        at ``p``.
    """
    syscalls = syscalls or OsSyscalls()
    ec.clear()
    try:
        syscalls.mkdir(str(p))
    except OSError as e:
        if e.errno != errno.EEXIST:
            ec.assign(e.errno, p)
        return False
    logger.debug("Created directory %s", p)
    return True


def _trim_separators(p: Path) -> Path:
    text = p.native
    floor = len(p.root_path().native)
    while len(text) > floor and text.endswith("/"):
        text = text[:-1]
    return Path(text)


@reports_errors
def create_directories(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> int:
    """Create ``p`` and every missing ancestor.

    Args:
        p: Directory path to create.
        syscalls: Syscall layer override.
        ec: ErrorCode for the lenient convention.

    Returns:
        Number of directories created (0 if ``p`` already was a directory),
        or ERROR_VALUE on a lenient failure.

    Raises:
        FilesystemError: FILE_EXISTS if ``p`` itself is not a directory,
            NOT_A_DIRECTORY if an ancestor is not a directory.
    """
    syscalls = syscalls or OsSyscalls()
    ec.clear()
    target = Path(p)
    missing: list[Path] = []
    current = _trim_separators(target)
    while not current.empty():
        kind = status(current, syscalls=syscalls, ec=ec)
        if ec:
            return ERROR_VALUE
        if kind is FileKind.DIRECTORY:
            break
        if kind is not FileKind.NOT_FOUND:
            ec.assign(errno.ENOTDIR if missing else errno.EEXIST, current, target)
            return ERROR_VALUE
        missing.append(current)
        parent = current.parent_path()
        if parent == current:
            break
        current = parent

    created = 0
    for directory in reversed(missing):
        try:
            syscalls.mkdir(str(directory))
        except OSError as e:
            # Lost a race with another creator; fine as long as it is a directory
            if e.errno == errno.EEXIST and is_directory(directory, syscalls=syscalls, ec=ErrorCode()):
                continue
            ec.assign(e.errno, directory, target)
            return ERROR_VALUE
        created += 1
    if created:
        logger.debug("Created %d directories for %s", created, target)
    return created


def _remove_one(p: Path, kind: FileKind, syscalls: Syscalls, ec: ErrorCode) -> bool:
    try:
        if kind is FileKind.DIRECTORY:
            syscalls.rmdir(str(p))
        else:
            syscalls.unlink(str(p))
    except OSError as e:
        if e.errno in (errno.ENOENT, errno.ENOTDIR):
            return False
        ec.assign(e.errno, p)
        return False
    logger.debug("Removed %s", p)
    return True


@reports_errors
def remove(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> bool:
    """Remove a file or an empty directory.

    Symlinks are removed, not followed. The empty path refers to nothing.

    Returns:
        True if an object was removed, False if nothing existed at ``p``.

    Raises:
        FilesystemError: DIRECTORY_NOT_EMPTY for a non-empty directory.
    """
    syscalls = syscalls or OsSyscalls()
    ec.clear()
    target = Path(p)
    if target.empty():
        return False
    kind = symlink_status(target, syscalls=syscalls, ec=ec)
    if ec or kind is FileKind.NOT_FOUND:
        return False
    return _remove_one(target, kind, syscalls, ec)


@dataclass
class _RemovalFrame:
    """One directory being emptied by remove_all."""

    path: Path
    entries: DirectoryIterator
    blocked: bool = False


@reports_errors
def remove_all(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> int:
    """Remove ``p`` and everything beneath it.

    Directories are emptied depth-first using an explicit stack of
    DirectoryIterators. When an object cannot be removed, removal carries on
    with everything else it can reach; only the ancestors of the failed
    object are left behind. The first failure is then reported.

    Returns:
        Number of objects removed (0 if nothing existed at ``p``), or
        ERROR_VALUE on a lenient failure.
    """
    syscalls = syscalls or OsSyscalls()
    ec.clear()
    target = Path(p)
    kind = symlink_status(target, syscalls=syscalls, ec=ec)
    if ec:
        return ERROR_VALUE
    if kind is FileKind.NOT_FOUND:
        return 0
    if kind is not FileKind.DIRECTORY:
        return 1 if _remove_one(target, kind, syscalls, ec) else (ERROR_VALUE if ec else 0)

    first_error = ErrorCode()
    removed = 0

    def fail(step: ErrorCode, frame: _RemovalFrame | None) -> None:
        if not first_error:
            first_error.assign_from(step)
        if frame is not None:
            frame.blocked = True

    stack: list[_RemovalFrame] = []
    step = ErrorCode()
    root = DirectoryIterator(target, syscalls=syscalls, ec=step)
    if step:
        ec.assign_from(step)
        return ERROR_VALUE
    stack.append(_RemovalFrame(target, root))

    while stack:
        frame = stack[-1]
        entry = frame.entries.entry
        if entry is None:
            stack.pop()
            parent = stack[-1] if stack else None
            if frame.blocked:
                if parent is not None:
                    parent.blocked = True
                continue
            step = ErrorCode()
            if _remove_one(frame.path, FileKind.DIRECTORY, syscalls, step):
                removed += 1
            elif step:
                fail(step, parent)
            continue

        step = ErrorCode()
        entry_kind = entry.symlink_status(ec=step)
        if step:
            fail(step, frame)
        elif entry_kind is FileKind.DIRECTORY:
            child_step = ErrorCode()
            child = DirectoryIterator(entry.path, syscalls=syscalls, ec=child_step)
            if child_step:
                fail(child_step, frame)
            else:
                # Advance past the subdirectory before descending so the
                # frame resumes at its next sibling afterwards.
                _advance(frame, fail)
                stack.append(_RemovalFrame(entry.path, child))
                continue
        elif _remove_one(entry.path, entry_kind, syscalls, step):
            removed += 1
        elif step:
            fail(step, frame)
        _advance(frame, fail)

    if first_error:
        ec.assign_from(first_error)
        return ERROR_VALUE
    logger.debug("Removed %d objects under %s", removed, target)
    return removed


def _advance(frame: _RemovalFrame, fail: Callable[[ErrorCode, _RemovalFrame], None]) -> None:
    step = ErrorCode()
    frame.entries.increment(ec=step)
    if step:
        fail(step, frame)
