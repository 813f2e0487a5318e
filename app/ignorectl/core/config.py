"""User configuration for ignorectl.

Settings are stored in ~/.config/ignorectl/config.toml and are split into
a [scan] and a [delete] table. Every value has a default, so a missing
file is equivalent to an empty one. Command-line options override the
values loaded here.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ignorectl.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from ignorectl.core.paths import get_config_path
from ignorectl.filesystem.models import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_IGNORE_FILE_NAMES,
    DEFAULT_PROGRESS_INTERVAL,
)
from ignorectl.ignore.matchers import MatcherKind

logger = logging.getLogger(__name__)


class ScanSettings(BaseModel):
    """Scan configuration.

    Attributes:
        ignore_file_names: Ignore file names loaded in every directory.
        matcher: Pattern matching engine.
        progress_interval: Entries between progress updates.
    """

    model_config = ConfigDict(extra="forbid")

    ignore_file_names: Annotated[
        list[str],
        Field(min_length=1, description="Ignore file names, later names override earlier"),
    ] = list(DEFAULT_IGNORE_FILE_NAMES)
    matcher: Annotated[
        MatcherKind,
        Field(description="Pattern matching engine (glob or pathspec)"),
    ] = MatcherKind.GLOB
    progress_interval: Annotated[
        int,
        Field(ge=1, le=10000, description="Entries between progress updates"),
    ] = DEFAULT_PROGRESS_INTERVAL

    @field_validator("ignore_file_names")
    @classmethod
    def validate_file_names(cls, v: list[str]) -> list[str]:
        """Names must be non-empty and must not contain path separators."""
        cleaned: list[str] = []
        for name in v:
            name = name.strip()
            if not name:
                raise ValueError("ignore file names must not be empty")
            if "/" in name or "\\" in name:
                raise ValueError(f"ignore file name must not contain a separator: {name}")
            cleaned.append(name)
        return cleaned


class DeleteSettings(BaseModel):
    """Deletion configuration.

    Attributes:
        permanent: Delete permanently instead of moving to the trash.
        batch_size: Paths handed to the trash per call.
    """

    model_config = ConfigDict(extra="forbid")

    permanent: bool = False
    batch_size: Annotated[
        int,
        Field(ge=1, le=1000, description="Paths per trash batch (1-1000)"),
    ] = DEFAULT_BATCH_SIZE


class IgnorectlConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    scan: ScanSettings = Field(default_factory=ScanSettings)
    delete: DeleteSettings = Field(default_factory=DeleteSettings)


def load_config(path: Path | None = None) -> IgnorectlConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated IgnorectlConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return IgnorectlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def get_effective_config(path: Path | None = None) -> IgnorectlConfig:
    """Load the configuration, falling back to defaults when no file exists.

    Raises:
        ConfigError: If an existing file is invalid.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return IgnorectlConfig()


def config_to_dict(config: IgnorectlConfig) -> dict[str, Any]:
    """Convert IgnorectlConfig to a dictionary for TOML serialization."""
    return config.model_dump(mode="json")


def save_config(config: IgnorectlConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The IgnorectlConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config_to_dict(config), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    logger.debug("Saved config to %s", config_path)
    return config_path
