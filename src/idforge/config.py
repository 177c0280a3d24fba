"""
Configuration management for idforge.

Loads and validates configuration from idforge.toml files using Pydantic.
Environment variables override defaults (``IDFORGE_LOG_LEVEL``,
``IDFORGE_SNOWFLAKE_WORKER_ID``, ...).
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional, Union

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from idforge.codecs.nanoid import DEFAULT_LENGTH, URL_SAFE_ALPHABET
from idforge.codecs.snowflake import resolve_epoch

CONFIG_FILENAME = "idforge.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SnowflakeConfig(BaseSettings):
    """Snowflake generator defaults."""

    model_config = SettingsConfigDict(env_prefix="IDFORGE_SNOWFLAKE_")

    epoch: int = Field(
        default=0,
        description="Epoch in Unix milliseconds, or 'twitter' / 'discord'",
    )
    datacenter_id: int = Field(default=0, ge=0, le=31, description="Datacenter ID (0-31)")
    worker_id: int = Field(default=0, ge=0, le=31, description="Worker ID (0-31)")

    @field_validator("epoch", mode="before")
    @classmethod
    def _resolve_epoch(cls, value: Union[int, str]) -> int:
        return resolve_epoch(value)


class NanoIdConfig(BaseSettings):
    """NanoID generator defaults."""

    model_config = SettingsConfigDict(env_prefix="IDFORGE_NANOID_")

    alphabet: str = Field(default=URL_SAFE_ALPHABET, min_length=1, max_length=255)
    length: int = Field(default=DEFAULT_LENGTH, ge=1, description="Number of characters")


class DetectionConfig(BaseSettings):
    """Detection defaults."""

    model_config = SettingsConfigDict(env_prefix="IDFORGE_DETECTION_")

    strict_mode: bool = Field(
        default=False, description="Require input to be in canonical form"
    )


class Config(BaseSettings):
    """Main configuration for idforge."""

    model_config = SettingsConfigDict(env_prefix="IDFORGE_")

    log_level: str = Field(default="WARNING", description="Logging level")
    snowflake: SnowflakeConfig = Field(default_factory=SnowflakeConfig)
    nanoid: NanoIdConfig = Field(default_factory=NanoIdConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @classmethod
    def from_toml(cls, path: Path | str) -> Config:
        """
        Load configuration from TOML file.

        Args:
            path: Path to idforge.toml file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        return cls(**data)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> Config:
        """
        Find and load configuration from idforge.toml.

        Searches for idforge.toml starting from start_dir and walking up
        parent directories until found or reaching filesystem root.

        Args:
            start_dir: Directory to start search (defaults to current directory)

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If no config file found
        """
        if start_dir is None:
            start_dir = Path.cwd()

        current = Path(start_dir).resolve()

        while True:
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return cls.from_toml(config_path)

            parent = current.parent
            if parent == current:
                break
            current = parent

        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found in {start_dir} or parent directories."
        )

    def to_toml(self, path: Path | str) -> None:
        """
        Write configuration to TOML file.

        Args:
            path: Path to write idforge.toml
        """
        toml_content = f"""# idforge configuration

log_level = {json.dumps(self.log_level)}

[snowflake]
epoch = {self.snowflake.epoch}
datacenter_id = {self.snowflake.datacenter_id}
worker_id = {self.snowflake.worker_id}

[nanoid]
alphabet = {json.dumps(self.nanoid.alphabet)}
length = {self.nanoid.length}

[detection]
strict_mode = {str(self.detection.strict_mode).lower()}
"""

        Path(path).write_text(toml_content)


# Default configuration instance
DEFAULT_CONFIG = Config()
