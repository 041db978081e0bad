"""avsh - a faster 'vagrant ssh'.

This package resolves Vagrant machines and their synced folders, and
connects to them through a reusable SSH master connection, starting in
the guest directory that matches the current host directory.

Example:
    $ avsh
    $ avsh make test
    $ avsh -m web,db uptime
"""

__version__ = "0.1.0"

from avsh.core.exceptions import (
    AvshError,
    ConfigurationError,
    ExecError,
    InvalidPatternError,
    MachineNotFoundError,
    SSHMasterError,
)

__all__ = [
    "AvshError",
    "ConfigurationError",
    "ExecError",
    "InvalidPatternError",
    "MachineNotFoundError",
    "SSHMasterError",
    "__version__",
]
