"""Core functionality for avsh.

This module contains the core logic: configuration, machine resolution,
directory matching, and SSH command construction.
"""

from avsh.core.config import Config, ConfigManager
from avsh.core.dir_matcher import DirectoryMatcher
from avsh.core.exceptions import (
    AvshError,
    ConfigurationError,
    ExecError,
    InvalidPatternError,
    MachineNotFoundError,
    ManifestError,
    SSHMasterError,
    VagrantfileNotFoundError,
)
from avsh.core.parsed_config import MatchResult, ParsedConfig
from avsh.core.project import load_parsed_config
from avsh.core.ssh import SSHCommandExecutor, SSHMasterSocket

__all__ = [
    "AvshError",
    "Config",
    "ConfigManager",
    "ConfigurationError",
    "DirectoryMatcher",
    "ExecError",
    "InvalidPatternError",
    "MachineNotFoundError",
    "ManifestError",
    "MatchResult",
    "ParsedConfig",
    "SSHCommandExecutor",
    "SSHMasterError",
    "SSHMasterSocket",
    "VagrantfileNotFoundError",
    "load_parsed_config",
]
