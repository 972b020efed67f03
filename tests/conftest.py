"""Shared test fixtures."""

from __future__ import annotations

import errno
import os
from pathlib import Path as StdPath

import pytest

from posixfs.path import Path
from tests.helpers import SAMPLE_TREE, FaultySyscalls


@pytest.fixture
def root(tmp_path: StdPath) -> Path:
    """Empty scratch directory as a posixfs Path."""
    directory = tmp_path / "root"
    directory.mkdir()
    return Path(directory)


@pytest.fixture
def faulty() -> FaultySyscalls:
    return FaultySyscalls()


@pytest.fixture
def sample_tree(root: Path) -> Path:
    """Build SAMPLE_TREE under ``root`` and return ``root``."""
    for relative in SAMPLE_TREE:
        target = StdPath(str(root), relative)
        if target.suffix == ".file":
            target.parent.mkdir(parents=True, exist_ok=True)
            target.touch()
        else:
            target.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def denied_tree(root: Path, faulty: FaultySyscalls) -> Path:
    """``root`` holding an unreadable ``denied`` directory next to readable siblings."""
    for name in ("a_before", "denied", "z_after"):
        os.mkdir(str(root / name))
    (StdPath(str(root)) / "a_before" / "inner.file").touch()
    (StdPath(str(root)) / "z_after" / "inner.file").touch()
    faulty.fail("opendir", root / "denied", errno.EACCES)
    return root
