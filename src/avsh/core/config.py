"""Configuration management for avsh.

This module provides a Pydantic-based configuration system that supports:
- YAML configuration files
- Environment variable overrides
- Default values with validation
- Locating the Vagrantfile for the current directory

The default config location is ~/.avsh/config.yaml, which can be
overridden with the AVSH_CONFIG environment variable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import yaml
from pydantic import BaseModel, Field, field_validator

from avsh.core.exceptions import ConfigurationError, VagrantfileNotFoundError
from avsh.utils.logging import get_logger

logger = get_logger("config")

VAGRANTFILE_NAME = "Vagrantfile"


def get_default_config_path() -> Path:
    """Get the default configuration file path.

    The path can be overridden by setting the AVSH_CONFIG
    environment variable.

    Returns:
        Path to the configuration file.
    """
    env_path = os.environ.get("AVSH_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".avsh" / "config.yaml"


def find_vagrantfile_dir(start: str | Path, vagrant_cwd: str | Path | None = None) -> str:
    """Find the directory containing the Vagrantfile.

    Args:
        start: Directory to start searching upward from.
        vagrant_cwd: Explicit project directory. Takes precedence over the
            search, like Vagrant's VAGRANT_CWD.

    Returns:
        Absolute path of the Vagrantfile directory.

    Raises:
        VagrantfileNotFoundError: If no Vagrantfile is found.
    """
    if vagrant_cwd:
        candidate = Path(vagrant_cwd).expanduser().resolve()
        if (candidate / VAGRANTFILE_NAME).is_file():
            return str(candidate)
        raise VagrantfileNotFoundError(str(candidate))

    start_path = Path(start).expanduser().resolve()
    for directory in (start_path, *start_path.parents):
        if (directory / VAGRANTFILE_NAME).is_file():
            logger.debug(f"Found Vagrantfile in {directory}")
            return str(directory)
    raise VagrantfileNotFoundError(str(start_path))


class LoggingConfig(BaseModel):
    """Logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        file: Path to log file (optional).
    """

    level: str = Field(default="WARNING", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


class Config(BaseModel):
    """Main configuration model for avsh.

    Args:
        vagrantfile_dir: Fixed project directory. When unset, the Vagrantfile
            is searched for upward from the current directory.
        socket_dir: Directory for ssh control sockets.
        control_persist: Seconds an idle master connection stays open.
        logging: Logging configuration.

    Example config.yaml:
        ```yaml
        vagrantfile_dir: ~/projects/webapp
        socket_dir: /tmp
        control_persist: 600

        logging:
          level: INFO
          file: ~/.avsh/logs/avsh.log
        ```
    """

    vagrantfile_dir: str | None = Field(default=None, description="Project directory")
    socket_dir: str = Field(default="/tmp", description="Control socket directory")
    control_persist: Annotated[int, Field(ge=0, le=86400)] = Field(
        default=600, description="Idle master connection lifetime in seconds"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging config")


class ConfigManager:
    """Reads the avsh configuration file.

    Args:
        path: Optional path to config file. Uses default if not specified.

    Attributes:
        path: Path to the configuration file.
        config: The loaded and validated Config object.

    Example:
        >>> cm = ConfigManager()
        >>> cm.config.socket_dir
        '/tmp'
    """

    def __init__(self, path: Path | str | None = None) -> None:
        if path is None:
            self.path = get_default_config_path()
        else:
            self.path = Path(path).expanduser()

        self.config = self._load_or_create()

    def _load_or_create(self) -> Config:
        """Load config from file or fall back to defaults."""
        if self.path.exists():
            return self._load()
        logger.debug(f"No config file at {self.path}, using defaults")
        return Config()

    def _load(self) -> Config:
        """Load and validate configuration from file.

        Raises:
            ConfigurationError: If the config file is invalid.
        """
        try:
            with self.path.open("r") as f:
                data = yaml.safe_load(f) or {}
            return Config.model_validate(data)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file: {e}",
                details={"path": str(self.path)},
            ) from e
        except Exception as e:
            raise ConfigurationError(
                f"Failed to load config: {e}",
                details={"path": str(self.path)},
            ) from e

    def vagrantfile_dir(self, cwd: str | Path) -> str:
        """Locate the project directory for a working directory.

        Precedence is the config file's ``vagrantfile_dir``, then the
        VAGRANT_CWD environment variable, then an upward search from cwd.
        """
        explicit = self.config.vagrantfile_dir or os.environ.get("VAGRANT_CWD")
        return find_vagrantfile_dir(cwd, explicit)

    @classmethod
    def create_example_config(cls, path: Path | None = None) -> Path:
        """Create an example configuration file.

        Args:
            path: Optional path for the config. Uses default if not specified.

        Returns:
            Path to the created config file.
        """
        path = get_default_config_path() if path is None else Path(path).expanduser()

        path.parent.mkdir(parents=True, exist_ok=True)

        example_config = {
            "socket_dir": "/tmp",
            "control_persist": 600,
            "logging": {
                "level": "WARNING",
                "file": str(Path.home() / ".avsh" / "logs" / "avsh.log"),
            },
        }

        with path.open("w") as f:
            yaml.safe_dump(example_config, f, default_flow_style=False, sort_keys=False)

        return path
