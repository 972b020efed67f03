"""Shared data types for posixfs."""

from __future__ import annotations

import stat
from dataclasses import dataclass
from enum import Enum, Flag, auto

__all__ = ["DirectoryOptions", "FileKind", "Metadata"]


class FileKind(Enum):
    """Type of a filesystem object as reported by a status query."""

    NONE = "none"
    NOT_FOUND = "not_found"
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> FileKind:
        """Classify an ``st_mode`` value."""
        if stat.S_ISREG(mode):
            return cls.REGULAR
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        return cls.OTHER


class DirectoryOptions(Flag):
    """Behaviour switches for directory iteration."""

    NONE = 0
    FOLLOW_DIRECTORY_SYMLINK = auto()
    SKIP_PERMISSION_DENIED = auto()


@dataclass(frozen=True)
class Metadata:
    """Result of a metadata query.

    Attributes:
        kind: Object type (never NONE or NOT_FOUND; those are failures).
        size: Size in bytes as reported by the OS.
        mode: Raw ``st_mode`` bits.
    """

    kind: FileKind
    size: int
    mode: int = 0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.kind in (FileKind.NONE, FileKind.NOT_FOUND):
            raise ValueError(f"metadata cannot describe a {self.kind.value} object")
        if self.size < 0:
            raise ValueError("size cannot be negative")
