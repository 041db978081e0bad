"""Custom exceptions for avsh.

This module defines a hierarchy of exceptions used throughout avsh
to provide meaningful error messages and enable proper error handling.

Exception Hierarchy:
    AvshError (base)
    ├── ConfigurationError
    │   ├── ManifestError
    │   └── VagrantfileNotFoundError
    ├── InvalidPatternError
    ├── MachineNotFoundError
    ├── SSHMasterError
    └── ExecError
"""

from __future__ import annotations

from typing import Any


class AvshError(Exception):
    """Base exception for all avsh errors.

    Args:
        message: Human-readable error message.
        details: Optional dictionary with additional error context.

    Attributes:
        message: The error message.
        details: Additional context about the error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(AvshError):
    """Raised when there is a configuration-related error.

    Examples:
        - Invalid YAML syntax in config file
        - Invalid configuration values
    """


class ManifestError(ConfigurationError):
    """Raised when a project's machine manifest cannot be loaded.

    Args:
        path: Path of the manifest file.
        message: Description of the problem.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(
            f"Invalid project manifest: {message}",
            details={"path": path},
        )
        self.path = path


class VagrantfileNotFoundError(ConfigurationError):
    """Raised when no Vagrantfile can be located.

    Args:
        start_dir: Directory the search started from.
    """

    def __init__(self, start_dir: str) -> None:
        super().__init__(
            f"Could not find a Vagrantfile in '{start_dir}' or any parent directory",
            details={"start_dir": start_dir},
        )
        self.start_dir = start_dir


class InvalidPatternError(AvshError):
    """Raised when a /regex/ machine search string does not compile.

    Args:
        pattern: The text between the slashes.
        reason: The regular expression compiler's error text.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(
            f"Invalid machine pattern '/{pattern}/': {reason}",
            details={"pattern": pattern},
        )
        self.pattern = pattern
        self.reason = reason


class MachineNotFoundError(AvshError):
    """Raised when a search string matches no declared machine.

    Args:
        search_string: The search string that failed to match.
        vagrantfile_dir: Directory of the Vagrantfile that was searched.
    """

    def __init__(self, search_string: str, vagrantfile_dir: str) -> None:
        super().__init__(
            f"Could not find any machines matching '{search_string}' "
            f"in Vagrantfile at '{vagrantfile_dir}'",
            details={"search_string": search_string},
        )
        self.search_string = search_string
        self.vagrantfile_dir = vagrantfile_dir


class SSHMasterError(AvshError):
    """Raised when the multiplexed master connection cannot be established.

    Args:
        machine: Name of the machine.
        message: Description of the failure.
    """

    def __init__(self, machine: str, message: str) -> None:
        super().__init__(
            f"Failed to open SSH master connection to '{machine}': {message}",
            details={"machine": machine},
        )
        self.machine = machine


class ExecError(AvshError):
    """Raised when the ssh executable cannot be started.

    Args:
        executable: The program that failed to start.
        message: Description of the failure.
    """

    def __init__(self, executable: str, message: str) -> None:
        super().__init__(f"Failed to execute '{executable}': {message}")
        self.executable = executable
