"""Error classification and the strict/lenient reporting convention.

Every OS-facing function in posixfs takes a keyword-only ``ec`` argument.
Passing an ErrorCode selects the lenient convention: the code is cleared on
success, set on failure, and a safe default is returned. Omitting it selects
the strict convention: the same function runs against a private ErrorCode
and a FilesystemError is raised if anything was reported.
"""

from __future__ import annotations

import errno
import functools
import logging
import os
from enum import Enum
from typing import Any, Callable, TypeVar

from posixfs.path import Path

__all__ = [
    "ERROR_VALUE",
    "ErrorCode",
    "ErrorKind",
    "FilesystemError",
    "classify",
    "invoke",
    "reports_errors",
]

logger = logging.getLogger(__name__)

# Returned by counting and sizing operations that fail in lenient mode
ERROR_VALUE = -1

T = TypeVar("T")


class ErrorKind(Enum):
    """Canonical failure kinds."""

    NOT_A_DIRECTORY = "not_a_directory"
    IS_A_DIRECTORY = "is_a_directory"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    FILE_EXISTS = "file_exists"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    NOT_SUPPORTED = "not_supported"
    UNKNOWN = "unknown"


_ERRNO_KINDS: dict[int, ErrorKind] = {
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno.EISDIR: ErrorKind.IS_A_DIRECTORY,
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.EEXIST: ErrorKind.FILE_EXISTS,
    errno.ENOTEMPTY: ErrorKind.DIRECTORY_NOT_EMPTY,
    errno.ENOTSUP: ErrorKind.NOT_SUPPORTED,
    errno.EOPNOTSUPP: ErrorKind.NOT_SUPPORTED,
}


def classify(code: int) -> ErrorKind:
    """Map an OS error number to its canonical kind.

    Args:
        code: errno value reported by the operating system.

    Returns:
        The matching ErrorKind, or ErrorKind.UNKNOWN.
    """
    return _ERRNO_KINDS.get(code, ErrorKind.UNKNOWN)


class ErrorCode:
    """Mutable error slot used by the lenient convention.

    An ErrorCode is falsy while clear and truthy once an error has been
    assigned, so callers can write ``if ec: ...``.

    Example:
        >>> ec = ErrorCode()
        >>> ec.assign(errno.ENOENT, "/missing")
        >>> ec == ErrorKind.NOT_FOUND
        True
    """

    __slots__ = ("value", "path1", "path2")

    def __init__(self) -> None:
        self.value = 0
        self.path1: Path | None = None
        self.path2: Path | None = None

    @property
    def kind(self) -> ErrorKind | None:
        """Kind of the stored error, or None while clear."""
        if not self.value:
            return None
        return classify(self.value)

    @property
    def message(self) -> str:
        return os.strerror(self.value) if self.value else ""

    def clear(self) -> None:
        self.value = 0
        self.path1 = None
        self.path2 = None

    def assign(self, code: int | None, path1: Any = None, path2: Any = None) -> None:
        """Store an OS error number and the path(s) involved.

        An OSError without an errno is stored as EIO, so the code is still set
        and classifies as UNKNOWN.
        """
        self.value = code or errno.EIO
        self.path1 = None if path1 is None else Path(path1)
        self.path2 = None if path2 is None else Path(path2)
        logger.debug("%s: %s (%s)", self.kind.value, self.message, self.path1)

    def assign_from(self, other: ErrorCode) -> None:
        self.value = other.value
        self.path1 = other.path1
        self.path2 = other.path2

    def raise_if_set(self) -> None:
        """Raise the stored error as a FilesystemError."""
        if self.value:
            raise FilesystemError(self.value, self.path1, self.path2)

    def __bool__(self) -> bool:
        return self.value != 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorKind):
            return self.kind is other
        if isinstance(other, ErrorCode):
            return self.value == other.value
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not self.value:
            return "ErrorCode()"
        return f"ErrorCode({self.kind.value}, errno={self.value}, path={self.path1})"


class FilesystemError(OSError):
    """Failure raised by the strict convention.

    Subclasses OSError so ``errno``, ``strerror``, ``filename`` and
    ``filename2`` are populated; ``kind`` gives the canonical classification.
    """

    def __init__(self, code: int, path1: Path | None = None, path2: Path | None = None) -> None:
        super().__init__(
            code,
            os.strerror(code),
            None if path1 is None else str(path1),
            None,
            None if path2 is None else str(path2),
        )
        self.kind = classify(code)
        self.path1 = path1
        self.path2 = path2


def invoke(func: Callable[..., T], *args: Any, ec: ErrorCode | None = None, **kwargs: Any) -> T:
    """Call a lenient-form function under the convention selected by ``ec``.

    Args:
        func: Function accepting a keyword-only ``ec`` ErrorCode.
        ec: Caller's ErrorCode for lenient mode, or None for strict mode.

    Returns:
        Whatever ``func`` returns.

    Raises:
        FilesystemError: In strict mode, when ``func`` reported an error.
    """
    if ec is not None:
        return func(*args, ec=ec, **kwargs)
    local = ErrorCode()
    result = func(*args, ec=local, **kwargs)
    local.raise_if_set()
    return result


def reports_errors(func: Callable[..., T]) -> Callable[..., T]:
    """Give a lenient-form function both calling conventions.

    The decorated function always receives an ErrorCode as ``ec``; callers
    may omit it to get the raising form.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, ec: ErrorCode | None = None, **kwargs: Any) -> T:
        return invoke(func, *args, ec=ec, **kwargs)

    return wrapper
