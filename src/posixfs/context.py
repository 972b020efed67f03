"""Application context for dependency injection.

This module separates object creation from object use, so CLI commands can
be exercised in tests with an injected syscall layer and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from posixfs.config import FsConfig
from posixfs.protocols import Syscalls


def _default_syscalls() -> Syscalls:
    """Create the default syscall implementation."""
    from posixfs.syscalls import OsSyscalls
    return OsSyscalls()


@dataclass
class AppContext:
    """Container for command dependencies.

    The syscall layer is typed with the Syscalls protocol, so test doubles
    can be injected without inheritance.
    """

    config: FsConfig = field(default_factory=FsConfig)
    config_path: Path = field(default_factory=FsConfig.default_path)
    syscalls: Syscalls = field(default_factory=_default_syscalls)


def create_context(config_path: Path | None = None) -> AppContext:
    """Factory for application dependencies.

    Args:
        config_path: Override configuration file location (for testing).

    Returns:
        Configured AppContext.

    Raises:
        ValueError: If the configuration file is invalid.
    """
    path = config_path or FsConfig.default_path()
    return AppContext(
        config=FsConfig.from_file(path),
        config_path=path,
        syscalls=_default_syscalls(),
    )
