"""POSIX path handling and directory-tree operations with dual error reporting."""

__version__ = "0.1.0"

from posixfs.errors import ERROR_VALUE, ErrorCode, ErrorKind, FilesystemError
from posixfs.iterators import DirectoryEntry, DirectoryIterator, RecursiveDirectoryIterator
from posixfs.operations import (
    create_directories,
    create_directory,
    exists,
    file_size,
    is_directory,
    is_regular_file,
    is_symlink,
    remove,
    remove_all,
    status,
    symlink_status,
)
from posixfs.path import Path
from posixfs.protocols import Syscalls
from posixfs.types import DirectoryOptions, FileKind, Metadata

__all__ = [
    "__version__",
    "ERROR_VALUE",
    "DirectoryEntry",
    "DirectoryIterator",
    "DirectoryOptions",
    "ErrorCode",
    "ErrorKind",
    "FileKind",
    "FilesystemError",
    "Metadata",
    "Path",
    "RecursiveDirectoryIterator",
    "Syscalls",
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
