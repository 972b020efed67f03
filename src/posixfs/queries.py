"""Existence, type and size queries.

"Not found" is not an error for status queries: ENOENT, and ENOTDIR for a
path running through a non-directory, both produce FileKind.NOT_FOUND.
Every other OS failure is reported.
"""

from __future__ import annotations

import errno

from posixfs.errors import ERROR_VALUE, ErrorCode, reports_errors
from posixfs.path import Path, PathArg
from posixfs.protocols import Syscalls
from posixfs.syscalls import OsSyscalls
from posixfs.types import FileKind

__all__ = [
    "exists",
    "file_size",
    "is_directory",
    "is_regular_file",
    "is_symlink",
    "status",
    "symlink_status",
]

_NOT_FOUND_ERRNOS = (errno.ENOENT, errno.ENOTDIR)


def _query(p: PathArg, follow_symlinks: bool, syscalls: Syscalls | None, ec: ErrorCode) -> FileKind:
    syscalls = syscalls or OsSyscalls()
    ec.clear()
    try:
        return syscalls.stat(str(p), follow_symlinks=follow_symlinks).kind
    except OSError as e:
        if e.errno in _NOT_FOUND_ERRNOS:
            return FileKind.NOT_FOUND
        ec.assign(e.errno, p)
        return FileKind.NONE


@reports_errors
def status(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> FileKind:
    """Type of the object at ``p``, following symlinks.

    Returns:
        The FileKind, NOT_FOUND if nothing is there, NONE on a lenient failure.
    """
    return _query(p, True, syscalls, ec)


@reports_errors
def symlink_status(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> FileKind:
    """Type of the object at ``p`` without following a final symlink."""
    return _query(p, False, syscalls, ec)


@reports_errors
def exists(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> bool:
    """Check if anything exists at ``p``."""
    return status(p, syscalls=syscalls, ec=ec) not in (FileKind.NONE, FileKind.NOT_FOUND)


@reports_errors
def is_directory(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> bool:
    return status(p, syscalls=syscalls, ec=ec) is FileKind.DIRECTORY


@reports_errors
def is_regular_file(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> bool:
    return status(p, syscalls=syscalls, ec=ec) is FileKind.REGULAR


@reports_errors
def is_symlink(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> bool:
    return symlink_status(p, syscalls=syscalls, ec=ec) is FileKind.SYMLINK


@reports_errors
def file_size(p: PathArg, *, syscalls: Syscalls | None = None, ec: ErrorCode) -> int:
    """Size in bytes of the regular file at ``p``.

    Args:
        p: Path to a regular file.
        syscalls: Syscall layer override.
        ec: ErrorCode for the lenient convention.

    Returns:
        The size, or ERROR_VALUE on a lenient failure.

    Raises:
        FilesystemError: IS_A_DIRECTORY for directories, NOT_SUPPORTED for
            other non-regular objects, or the underlying OS failure.
    """
    syscalls = syscalls or OsSyscalls()
    ec.clear()
    try:
        meta = syscalls.stat(str(p))
    except OSError as e:
        ec.assign(e.errno, p)
        return ERROR_VALUE
    if meta.kind is FileKind.DIRECTORY:
        ec.assign(errno.EISDIR, p)
        return ERROR_VALUE
    if meta.kind is not FileKind.REGULAR:
        ec.assign(errno.ENOTSUP, p)
        return ERROR_VALUE
    return meta.size
