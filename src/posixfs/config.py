"""User configuration for the posixfs command line."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from posixfs.types import DirectoryOptions

# Default configuration location
CONFIG_DIR = Path.home() / ".posixfs"
CONFIG_FILE = "config.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class FsConfig(BaseModel):
    """Settings applied to every command."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    follow_directory_symlinks: bool = Field(default=False, alias="followDirectorySymlinks")
    skip_permission_denied: bool = Field(default=False, alias="skipPermissionDenied")
    keep_going: bool = Field(default=False, alias="keepGoing")
    log_level: str = Field(default="WARNING", alias="logLevel")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level '{value}'")
        return level

    @classmethod
    def default_path(cls) -> Path:
        return CONFIG_DIR / CONFIG_FILE

    @classmethod
    def from_file(cls, path: Path) -> FsConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the configuration file.

        Returns:
            Parsed FsConfig, or defaults if the file doesn't exist.

        Raises:
            ValueError: If the YAML or its values are invalid.
        """
        if not path.exists():
            return cls()
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration file {path}: expected a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

    def save(self, path: Path) -> None:
        """Write configuration to a YAML file, creating its directory."""
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(by_alias=True)
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))

    def set_value(self, key: str, value: str) -> None:
        """Set a setting from its command-line spelling (e.g. ``keep-going``).

        Raises:
            KeyError: If the key is unknown.
            ValueError: If the value is invalid for the key.
        """
        name = key.replace("-", "_")
        if name not in type(self).model_fields:
            raise KeyError(key)
        if type(self).model_fields[name].annotation is bool:
            lowered = value.strip().lower()
            if lowered not in ("true", "false", "yes", "no", "1", "0", "on", "off"):
                raise ValueError(f"expected a boolean for {key}, got '{value}'")
            setattr(self, name, lowered in ("true", "yes", "1", "on"))
        else:
            try:
                setattr(self, name, value)
            except ValidationError as e:
                raise ValueError(str(e)) from e

    def directory_options(self) -> DirectoryOptions:
        options = DirectoryOptions.NONE
        if self.follow_directory_symlinks:
            options |= DirectoryOptions.FOLLOW_DIRECTORY_SYMLINK
        if self.skip_permission_denied:
            options |= DirectoryOptions.SKIP_PERMISSION_DENIED
        return options

    @property
    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level)
