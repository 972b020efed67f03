"""POSIX path value type.

A Path wraps path text exactly as given. Nothing is normalised on
construction; every component is derived from the text on demand.
"""

from __future__ import annotations

import os
from functools import total_ordering
from typing import Union

__all__ = ["Path", "SEPARATOR"]

SEPARATOR = "/"

PathArg = Union["Path", str, os.PathLike]


@total_ordering
class Path:
    """Hierarchical path text using the POSIX separator grammar.

    Decomposition follows these rules:

    - ``root_name``: a leading ``//name`` segment (exactly two separators
      followed by a non-separator), up to the next separator.
    - ``root_directory``: the separator(s) following the root name, or a
      leading ``/``.
    - ``filename``: the text after the last separator; empty when the path
      is empty or ends in a separator.

    Example:
        >>> (Path("/foo") / "bar.txt").extension()
        '.txt'
    """

    __slots__ = ("_text",)

    def __init__(self, text: PathArg = "") -> None:
        """Initialize a path.

        Args:
            text: Path text, another Path, or any os.PathLike.
        """
        if isinstance(text, Path):
            self._text = text._text
        else:
            self._text = os.fspath(text)
        if not isinstance(self._text, str):
            raise TypeError(f"expected str path, got {type(self._text).__name__}")

    # ------------------------------------------------------------------
    # Text access
    # ------------------------------------------------------------------

    @property
    def native(self) -> str:
        """The path text in its native form."""
        return self._text

    def __str__(self) -> str:
        return self._text

    def __fspath__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Path({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Path):
            return self._text == other._text
        if isinstance(other, str):
            return self._text == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Path):
            return self._text < other._text
        if isinstance(other, str):
            return self._text < other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)

    def __bool__(self) -> bool:
        return bool(self._text)

    def empty(self) -> bool:
        """Check if the path text is empty."""
        return not self._text

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def __truediv__(self, other: PathArg) -> Path:
        """Append ``other`` as a new path element.

        An absolute right-hand side replaces the left entirely. Otherwise a
        separator is inserted only when the left side has a filename, so an
        empty right-hand side leaves a trailing separator behind.
        """
        try:
            rhs = Path(other)
        except TypeError:
            return NotImplemented
        if rhs.is_absolute():
            return rhs
        if self.has_filename():
            return Path(self._text + SEPARATOR + rhs._text)
        return Path(self._text + rhs._text)

    def __rtruediv__(self, other: PathArg) -> Path:
        try:
            return Path(other) / self
        except TypeError:
            return NotImplemented

    # ------------------------------------------------------------------
    # Root decomposition
    # ------------------------------------------------------------------

    def _root_name_length(self) -> int:
        text = self._text
        if len(text) > 2 and text[0] == SEPARATOR and text[1] == SEPARATOR and text[2] != SEPARATOR:
            end = text.find(SEPARATOR, 2)
            return len(text) if end == -1 else end
        return 0

    def _root_path_length(self) -> int:
        pos = self._root_name_length()
        while pos < len(self._text) and self._text[pos] == SEPARATOR:
            pos += 1
        return pos

    def root_name(self) -> Path:
        """The ``//name`` prefix, or an empty path."""
        return Path(self._text[: self._root_name_length()])

    def root_directory(self) -> Path:
        """The separator(s) following the root name, or an empty path."""
        start = self._root_name_length()
        return Path(self._text[start : self._root_path_length()])

    def root_path(self) -> Path:
        """Root name followed by root directory."""
        return Path(self._text[: self._root_path_length()])

    def relative_path(self) -> Path:
        """Everything after the root path."""
        return Path(self._text[self._root_path_length() :])

    def has_root_name(self) -> bool:
        return self._root_name_length() > 0

    def has_root_directory(self) -> bool:
        return not self.root_directory().empty()

    def has_root_path(self) -> bool:
        return self._root_path_length() > 0

    def has_relative_path(self) -> bool:
        return self._root_path_length() < len(self._text)

    def is_absolute(self) -> bool:
        """Check if the path starts at a root (directory or name)."""
        return self._text.startswith(SEPARATOR)

    def is_relative(self) -> bool:
        return not self.is_absolute()

    # ------------------------------------------------------------------
    # Filename decomposition
    # ------------------------------------------------------------------

    def filename(self) -> Path:
        """The final path element.

        Empty for the empty path and for paths ending in a separator. ``.``
        and ``..`` are returned verbatim.
        """
        text = self._text
        if not text or text.endswith(SEPARATOR):
            return Path()
        return Path(text[text.rfind(SEPARATOR) + 1 :])

    def has_filename(self) -> bool:
        return not self.filename().empty()

    def _extension_start(self) -> int:
        """Index of the extension dot within the filename, or -1."""
        name = self.filename()._text
        if name in ("", ".", ".."):
            return -1
        pos = name.rfind(".")
        # A single leading dot marks a hidden file, not an extension.
        return pos if pos > 0 else -1

    def stem(self) -> Path:
        """Filename without its final extension."""
        name = self.filename()._text
        pos = self._extension_start()
        return Path(name if pos == -1 else name[:pos])

    def has_stem(self) -> bool:
        return not self.stem().empty()

    def extension(self) -> Path:
        """The last dot of the filename and everything after it."""
        pos = self._extension_start()
        if pos == -1:
            return Path()
        return Path(self.filename()._text[pos:])

    def has_extension(self) -> bool:
        return not self.extension().empty()

    # ------------------------------------------------------------------
    # Modifiers (each returns a new path)
    # ------------------------------------------------------------------

    def remove_filename(self) -> Path:
        """Drop the filename, keeping the separator that preceded it."""
        return Path(self._text[: self._text.rfind(SEPARATOR) + 1])

    def replace_filename(self, name: PathArg) -> Path:
        return self.remove_filename() / name

    def replace_extension(self, extension: PathArg = "") -> Path:
        """Swap the extension for ``extension``; an empty value removes it.

        A replacement without a leading dot gets one.
        """
        ext = Path(extension)._text
        pos = self._extension_start()
        base = self._text if pos == -1 else self._text[: len(self._text) - len(self.filename()._text) + pos]
        if ext and not ext.startswith("."):
            ext = "." + ext
        return Path(base + ext)

    def parent_path(self) -> Path:
        """The path with its final element and trailing separators removed.

        The root path is never shortened: ``/foo`` has parent ``/`` and ``/``
        is its own parent. A bare root name such as ``//host`` has parent
        ``//``, so parent and filename always rebuild the path.
        """
        if not self.has_relative_path():
            return self.remove_filename() if self.has_filename() else Path(self)
        root_len = self._root_path_length()
        end = self._text.rfind(SEPARATOR) + 1
        while end > root_len and self._text[end - 1] == SEPARATOR:
            end -= 1
        return Path(self._text[:end])
