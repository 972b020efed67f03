"""Tests for flat and recursive directory iteration."""

from __future__ import annotations

import copy
import errno
import os
from collections import Counter

import pytest

from posixfs.errors import ErrorCode, ErrorKind, FilesystemError
from posixfs.iterators import (
    DirectoryEntry,
    DirectoryIterator,
    RecursiveDirectoryIterator,
    _EndComparable,
)
from posixfs.path import Path
from posixfs.types import DirectoryOptions, FileKind

from tests.helpers import SAMPLE_TREE, FaultySyscalls, ScriptedSyscalls, needs_unprivileged


def _names(entries) -> list[str]:
    return sorted(entry.name for entry in entries)


class TestConstructionErrors:
    """Errors opening the starting directory."""

    @pytest.mark.parametrize("iterator_cls", [DirectoryIterator, RecursiveDirectoryIterator])
    def test_not_a_directory_strict(self, iterator_cls) -> None:
        with pytest.raises(FilesystemError) as exc_info:
            iterator_cls(Path("/dev/null"))
        assert exc_info.value.kind is ErrorKind.NOT_A_DIRECTORY

    @pytest.mark.parametrize("iterator_cls", [DirectoryIterator, RecursiveDirectoryIterator])
    def test_not_a_directory_lenient(self, iterator_cls) -> None:
        ec = ErrorCode()
        it = iterator_cls(Path("/dev/null"), ec=ec)
        assert ec == ErrorKind.NOT_A_DIRECTORY
        assert it == iterator_cls()
        assert list(it) == []

    def test_missing_directory(self, root: Path) -> None:
        ec = ErrorCode()
        DirectoryIterator(root / "missing", ec=ec)
        assert ec == ErrorKind.NOT_FOUND
        assert ec.path1 == root / "missing"

    def test_permission_denied(self, root: Path, faulty: FaultySyscalls) -> None:
        faulty.fail("opendir", root, errno.EACCES)
        with pytest.raises(FilesystemError) as exc_info:
            DirectoryIterator(root, syscalls=faulty)
        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED

    def test_skip_permission_denied(self, root: Path, faulty: FaultySyscalls) -> None:
        faulty.fail("opendir", root, errno.EACCES)
        ec = ErrorCode()
        it = DirectoryIterator(
            root, options=DirectoryOptions.SKIP_PERMISSION_DENIED, syscalls=faulty, ec=ec
        )
        assert not ec
        assert it.at_end


class TestEndState:
    """The end sentinel is a single canonical value."""

    @pytest.mark.parametrize("iterator_cls", [DirectoryIterator, RecursiveDirectoryIterator])
    def test_empty_directory_is_end(self, root: Path, iterator_cls) -> None:
        ec = ErrorCode()
        assert iterator_cls(root) == iterator_cls()
        assert iterator_cls(root, ec=ec) == iterator_cls()
        assert not ec

    def test_default_iterators_are_equal(self) -> None:
        assert DirectoryIterator() == DirectoryIterator()
        assert RecursiveDirectoryIterator() == RecursiveDirectoryIterator()

    def test_live_iterators_are_not_equal(self, sample_tree: Path) -> None:
        first = DirectoryIterator(sample_tree)
        second = DirectoryIterator(sample_tree / "dir")
        assert first != second
        assert first == first
        assert first != DirectoryIterator()

    def test_exhausted_equals_end(self, sample_tree: Path) -> None:
        it = DirectoryIterator(sample_tree)
        list(it)
        assert it == DirectoryIterator()
        assert it.entry is None

    def test_different_iterator_types_are_not_equal(self) -> None:
        assert DirectoryIterator() != RecursiveDirectoryIterator()

    def test_increment_past_end_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            DirectoryIterator().increment()

    def test_close_is_required(self) -> None:
        class Unclosable(_EndComparable):
            at_end = True

        with pytest.raises(TypeError):
            Unclosable()

    def test_cannot_copy(self, sample_tree: Path) -> None:
        it = DirectoryIterator(sample_tree)
        with pytest.raises(TypeError):
            copy.copy(it)
        with pytest.raises(TypeError):
            copy.deepcopy(it)


class TestDirectoryIterator:
    """Tests for flat iteration."""

    def test_yields_immediate_children(self, sample_tree: Path) -> None:
        assert _names(DirectoryIterator(sample_tree)) == ["dir", "file.file"]

    def test_entry_paths(self, sample_tree: Path) -> None:
        for entry in DirectoryIterator(sample_tree / "dir"):
            assert entry.path == sample_tree / "dir" / entry.name
            assert entry.path.native != ""

    def test_trailing_separator(self, sample_tree: Path) -> None:
        paths = sorted(entry.path for entry in DirectoryIterator(sample_tree / "dir" / ""))
        assert paths[0] == sample_tree / "dir" / "1_entry"

    def test_skips_dot_entries(self) -> None:
        it = DirectoryIterator(Path("/x"), syscalls=ScriptedSyscalls([".", "a", "..", "b"]))
        assert [entry.name for entry in it] == ["a", "b"]

    def test_only_dot_entries_is_end(self) -> None:
        it = DirectoryIterator(Path("/x"), syscalls=ScriptedSyscalls([".", ".."]))
        assert it == DirectoryIterator()

    def test_manual_increment(self) -> None:
        it = DirectoryIterator(Path("/x"), syscalls=ScriptedSyscalls(["a", "b"]))
        assert it.entry.name == "a"
        assert it.increment().entry.name == "b"
        it.increment()
        assert it.at_end

    def test_next_after_manual_increment(self) -> None:
        it = DirectoryIterator(Path("/x"), syscalls=ScriptedSyscalls(["a", "b", "c"]))
        assert next(it).name == "a"
        it.increment()
        assert next(it).name == "b"
        assert next(it).name == "c"
        with pytest.raises(StopIteration):
            next(it)

    def test_not_restartable(self, sample_tree: Path) -> None:
        it = DirectoryIterator(sample_tree)
        assert len(list(it)) == 2
        assert list(it) == []

    def test_read_error_strict(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        it = DirectoryIterator(sample_tree, syscalls=faulty)
        faulty.fail_readdir(sample_tree, errno.EIO)
        with pytest.raises(FilesystemError) as exc_info:
            it.increment()
        assert exc_info.value.errno == errno.EIO
        assert it.at_end

    def test_read_error_lenient_ends(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        ec = ErrorCode()
        it = DirectoryIterator(sample_tree, syscalls=faulty, ec=ec)
        faulty.fail_readdir(sample_tree, errno.EIO)

        it.increment(ec=ec)

        assert ec == ErrorKind.UNKNOWN
        assert it == DirectoryIterator()
        assert faulty.open_handles == 0

    def test_entry_queries(self, sample_tree: Path) -> None:
        entries = {entry.name: entry for entry in DirectoryIterator(sample_tree)}
        assert entries["dir"].is_directory()
        assert entries["dir"].status() is FileKind.DIRECTORY
        assert entries["file.file"].is_regular_file()
        assert entries["file.file"].file_size() == 0
        assert not entries["file.file"].is_symlink()
        assert os.fspath(entries["dir"]) == str(sample_tree / "dir")

    def test_entry_rejects_dot_names(self) -> None:
        with pytest.raises(ValueError):
            DirectoryEntry(Path("/x/."), ".")


class TestHandleRelease:
    """Handles are released on exhaustion, close and context exit."""

    def test_released_on_exhaustion(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        list(DirectoryIterator(sample_tree, syscalls=faulty))
        assert faulty.open_handles == 0

    def test_released_on_close(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        it = DirectoryIterator(sample_tree, syscalls=faulty)
        assert faulty.open_handles == 1
        it.close()
        assert faulty.open_handles == 0
        assert it.at_end

    def test_released_by_context_manager(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        with RecursiveDirectoryIterator(sample_tree, syscalls=faulty) as it:
            next(it)
            it.increment()
            assert faulty.open_handles >= 1
        assert faulty.open_handles == 0

    def test_recursive_releases_every_level(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        list(RecursiveDirectoryIterator(sample_tree, syscalls=faulty))
        assert faulty.open_handles == 0


class TestExhaustiveness:
    """Every entry is visited exactly once."""

    def test_flat_iteration_per_directory(self, sample_tree: Path) -> None:
        expected = Counter(Path(relative).filename().native for relative in SAMPLE_TREE)
        seen: Counter[str] = Counter()
        directories = {(sample_tree / relative).remove_filename() for relative in SAMPLE_TREE}
        for directory in directories:
            for entry in DirectoryIterator(directory):
                if entry.name in expected:
                    seen[entry.name] += 1
        assert seen == expected

    def test_recursive_visits_each_entry_once(self, sample_tree: Path) -> None:
        visited = Counter(entry.path for entry in RecursiveDirectoryIterator(sample_tree))

        assert all(count == 1 for count in visited.values())
        # 7 leaves plus dir, 1_entry, 2_entries and 3_entries
        assert len(visited) == 11
        for relative in SAMPLE_TREE:
            assert sample_tree / relative in visited

    def test_recursive_types(self, sample_tree: Path) -> None:
        for entry in RecursiveDirectoryIterator(sample_tree):
            if entry.path.extension().native == ".file":
                assert entry.is_regular_file()
                assert not entry.is_directory()
            else:
                assert not entry.is_regular_file()
                assert entry.is_directory()


class TestRecursiveOrder:
    """Pre-order traversal and depth tracking."""

    def test_directory_before_its_children(self, sample_tree: Path) -> None:
        order = [entry.path for entry in RecursiveDirectoryIterator(sample_tree)]
        for index, path in enumerate(order):
            parent = path.parent_path()
            if parent != sample_tree:
                assert parent in order[:index]

    def test_depth(self, sample_tree: Path) -> None:
        depths = {}
        with RecursiveDirectoryIterator(sample_tree) as it:
            for entry in it:
                depths[entry.name] = it.depth
        assert depths["dir"] == 0
        assert depths["file.file"] == 0
        assert depths["2_entries"] == 1
        assert depths["2a.dir"] == 2

    def test_disable_recursion_pending(self, sample_tree: Path) -> None:
        names = []
        with RecursiveDirectoryIterator(sample_tree) as it:
            for entry in it:
                names.append(entry.name)
                if entry.name == "dir":
                    it.disable_recursion_pending()
                    assert not it.recursion_pending
        assert sorted(names) == ["dir", "file.file"]

    def test_pop(self, sample_tree: Path) -> None:
        with RecursiveDirectoryIterator(sample_tree / "dir") as it:
            while it.entry.name != "3_entries":
                it.increment()
            it.increment()
            assert it.depth == 1
            it.pop()
            assert it.at_end or it.depth == 0

    def test_does_not_follow_directory_symlinks(self, sample_tree: Path) -> None:
        os.symlink(str(sample_tree / "dir"), str(sample_tree / "link"))

        plain = [entry.name for entry in RecursiveDirectoryIterator(sample_tree)]
        followed = [
            entry.name
            for entry in RecursiveDirectoryIterator(
                sample_tree, options=DirectoryOptions.FOLLOW_DIRECTORY_SYMLINK
            )
        ]

        assert plain.count("1a.file") == 1
        assert followed.count("1a.file") == 2


class TestRecursiveErrors:
    """Access failures below the starting directory."""

    def test_strict_failure_raises_and_ends(self, denied_tree: Path, faulty: FaultySyscalls) -> None:
        it = RecursiveDirectoryIterator(denied_tree, syscalls=faulty)
        with pytest.raises(FilesystemError) as exc_info:
            for _ in it:
                pass
        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        assert exc_info.value.path1 == denied_tree / "denied"
        assert it.at_end
        assert faulty.open_handles == 0

    def test_lenient_failure_reported_once_and_continues(
        self, denied_tree: Path, faulty: FaultySyscalls
    ) -> None:
        ec = ErrorCode()
        names = []
        failures = []
        for entry in RecursiveDirectoryIterator(denied_tree, syscalls=faulty, ec=ec):
            names.append(entry.name)
            if ec:
                failures.append(ec.path1)
        if ec:
            failures.append(ec.path1)

        assert failures == [denied_tree / "denied"]
        assert sorted(names) == ["a_before", "denied", "inner.file", "inner.file", "z_after"]

    def test_lenient_manual_increment_resumes(self, denied_tree: Path, faulty: FaultySyscalls) -> None:
        ec = ErrorCode()
        it = RecursiveDirectoryIterator(denied_tree, syscalls=faulty, ec=ec)
        errors = 0
        visited = 0
        while not it.at_end:
            visited += 1
            it.increment(ec=ec)
            if ec:
                errors += 1
                assert ec == ErrorKind.PERMISSION_DENIED
        assert errors == 1
        assert visited == 5

    def test_skip_permission_denied(self, denied_tree: Path, faulty: FaultySyscalls) -> None:
        ec = ErrorCode()
        it = RecursiveDirectoryIterator(
            denied_tree, options=DirectoryOptions.SKIP_PERMISSION_DENIED, syscalls=faulty, ec=ec
        )
        count = 0
        for _ in it:
            count += 1
            assert not ec
        assert count == 5

    def test_read_error_abandons_level(self, sample_tree: Path, faulty: FaultySyscalls) -> None:
        faulty.fail_readdir(sample_tree / "dir" / "3_entries", errno.EIO)
        ec = ErrorCode()
        names = []
        errors = []
        for entry in RecursiveDirectoryIterator(sample_tree, syscalls=faulty, ec=ec):
            names.append(entry.name)
            if ec:
                errors.append(ec.value)
        if ec:
            errors.append(ec.value)

        assert errors == [errno.EIO]
        assert "3a.dir" not in names
        assert "2b.file" in names
        assert "file.file" in names

    def test_unsearchable_directory_reported_once(self, root: Path, faulty: FaultySyscalls) -> None:
        """Entries of a listable but unsearchable directory fail lstat one by one."""
        locked = root / "locked"
        os.mkdir(str(locked))
        for name in ("a", "b", "c"):
            os.mkdir(str(locked / name))
            faulty.fail("stat", locked / name, errno.EACCES)
        ec = ErrorCode()
        names = []
        errors = []
        for entry in RecursiveDirectoryIterator(root, syscalls=faulty, ec=ec):
            names.append(entry.name)
            if ec:
                errors.append(ec.path1)
        if ec:
            errors.append(ec.path1)

        assert sorted(names) == ["a", "b", "c", "locked"]
        assert errors == [locked]

    def test_unsearchable_directory_strict(self, root: Path, faulty: FaultySyscalls) -> None:
        locked = root / "locked"
        os.mkdir(str(locked))
        open(str(locked / "file"), "w").close()
        faulty.fail("stat", locked / "file", errno.EACCES)

        it = RecursiveDirectoryIterator(root, syscalls=faulty)
        it.increment()
        with pytest.raises(FilesystemError) as exc_info:
            it.increment()
        assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        assert exc_info.value.path1 == locked
        assert it.at_end

    def test_unsearchable_directory_skipped(self, root: Path, faulty: FaultySyscalls) -> None:
        locked = root / "locked"
        os.mkdir(str(locked))
        for name in ("a", "b"):
            os.mkdir(str(locked / name))
            faulty.fail("stat", locked / name, errno.EACCES)
        ec = ErrorCode()
        it = RecursiveDirectoryIterator(
            root, options=DirectoryOptions.SKIP_PERMISSION_DENIED, syscalls=faulty, ec=ec
        )
        names = []
        for entry in it:
            names.append(entry.name)
            assert not ec
        assert not ec
        assert sorted(names) == ["a", "b", "locked"]

    @needs_unprivileged
    def test_real_unreadable_directory(self, root: Path) -> None:
        denied = root / "denied"
        os.mkdir(str(denied))
        os.chmod(str(denied), 0)
        try:
            it = RecursiveDirectoryIterator(root)
            with pytest.raises(FilesystemError) as exc_info:
                it.increment()
            assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
        finally:
            os.chmod(str(denied), 0o700)
