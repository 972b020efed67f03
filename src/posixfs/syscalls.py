"""Operating-system implementation of the Syscalls protocol.

OsSyscalls wraps the standard library ``os`` calls. It keeps no state, so a
fresh instance can be created wherever one is needed.
"""

from __future__ import annotations

import os
from typing import Any

from posixfs.types import FileKind, Metadata


class OsSyscalls:
    """Production syscall layer.

    Satisfies the Syscalls protocol structurally.
    """

    def stat(self, path: str, follow_symlinks: bool = True) -> Metadata:
        """Query metadata with os.stat (or lstat when not following)."""
        st = os.stat(path, follow_symlinks=follow_symlinks)
        return Metadata(kind=FileKind.from_mode(st.st_mode), size=st.st_size, mode=st.st_mode)

    def opendir(self, path: str) -> Any:
        """Open a directory stream with os.scandir."""
        return os.scandir(path)

    def readdir(self, handle: Any) -> str | None:
        """Read the next entry name from a scandir stream."""
        entry = next(handle, None)
        return None if entry is None else entry.name

    def closedir(self, handle: Any) -> None:
        handle.close()

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        os.mkdir(path, mode)

    def unlink(self, path: str) -> None:
        os.unlink(path)

    def rmdir(self, path: str) -> None:
        os.rmdir(path)
