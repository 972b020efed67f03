"""Test doubles and shared constants for the posixfs test-suite."""

from __future__ import annotations

import errno
import os
from typing import Any

import pytest

from posixfs.syscalls import OsSyscalls
from posixfs.types import Metadata

# Layout from which the enumeration tests build their tree. Names ending in
# ".file" are files, everything else is a directory.
SAMPLE_TREE = [
    "dir/1_entry/1a.file",
    "dir/2_entries/2a.dir",
    "dir/2_entries/2b.file",
    "dir/3_entries/3a.dir",
    "dir/3_entries/3b.dir",
    "dir/3_entries/3c.file",
    "file.file",
]

# Every object below (and including) the sample root
SAMPLE_TREE_OBJECTS = 12

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0
needs_unprivileged = pytest.mark.skipif(running_as_root, reason="root ignores permission bits")


class FaultySyscalls(OsSyscalls):
    """OsSyscalls that fails chosen calls with chosen errno values.

    Faults are keyed by call name and path text, e.g.
    ``fail("opendir", "/tmp/x/denied", errno.EACCES)``.
    """

    def __init__(self) -> None:
        self.faults: dict[tuple[str, str], int] = {}
        self.one_shot: set[tuple[str, str]] = set()
        self.readdir_faults: dict[str, int] = {}
        self.open_handles = 0
        self.calls: list[tuple[str, str]] = []

    def fail(self, call: str, path: Any, code: int = errno.EACCES, once: bool = False) -> None:
        key = (call, str(path))
        self.faults[key] = code
        if once:
            self.one_shot.add(key)

    def fail_readdir(self, path: Any, code: int = errno.EIO) -> None:
        self.readdir_faults[str(path)] = code

    def _check(self, call: str, path: str) -> None:
        key = (call, path)
        self.calls.append(key)
        code = self.faults.get(key)
        if code is None:
            return
        if key in self.one_shot:
            del self.faults[key]
        raise OSError(code, os.strerror(code), path)

    def stat(self, path: str, follow_symlinks: bool = True) -> Metadata:
        self._check("stat", path)
        return super().stat(path, follow_symlinks=follow_symlinks)

    def opendir(self, path: str) -> Any:
        self._check("opendir", path)
        handle = super().opendir(path)
        self.open_handles += 1
        return (path, handle)

    def readdir(self, handle: Any) -> str | None:
        path, inner = handle
        code = self.readdir_faults.get(path)
        if code is not None:
            raise OSError(code, os.strerror(code), path)
        return super().readdir(inner)

    def closedir(self, handle: Any) -> None:
        self.open_handles -= 1
        super().closedir(handle[1])

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        self._check("mkdir", path)
        super().mkdir(path, mode)

    def unlink(self, path: str) -> None:
        self._check("unlink", path)
        super().unlink(path)

    def rmdir(self, path: str) -> None:
        self._check("rmdir", path)
        super().rmdir(path)


class ScriptedSyscalls(OsSyscalls):
    """OsSyscalls whose directory reads come from a fixed list of names."""

    def __init__(self, names: list[str]) -> None:
        self.names = names

    def opendir(self, path: str) -> Any:
        return iter(self.names)

    def readdir(self, handle: Any) -> str | None:
        return next(handle, None)

    def closedir(self, handle: Any) -> None:
        pass

