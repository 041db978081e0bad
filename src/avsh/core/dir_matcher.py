"""Host to guest directory matching.

Given the directory avsh was started in, find the machine whose synced
folders cover it and the matching directory inside that machine, so that
the remote shell starts in the same place the user is working.
"""

from __future__ import annotations

import os
import posixpath

from avsh.core.parsed_config import ParsedConfig
from avsh.utils.logging import get_logger

logger = get_logger("dir_matcher")


def _relative_to(host_dir: str, host_path: str) -> str | None:
    """Return host_dir relative to host_path, or None if it is outside."""
    if host_dir == host_path:
        return ""
    prefix = host_path.rstrip(os.sep) + os.sep
    if host_dir.startswith(prefix):
        return host_dir[len(prefix) :]
    return None


class DirectoryMatcher:
    """Matches host directories to machines and guest directories.

    Args:
        parsed_config: The project's ParsedConfig.

    Example:
        >>> matcher = DirectoryMatcher(parsed_config)
        >>> matcher.match("/home/me/project/app")
        ('web', '/vagrant/app')
    """

    def __init__(self, parsed_config: ParsedConfig) -> None:
        self.parsed_config = parsed_config

    def match(self, host_dir: str, machine: str | None = None) -> tuple[str, str | None]:
        """Find the machine and guest directory for a host directory.

        Machines are tried primary first, then in declaration order, and
        within a machine folders are tried in map order. The first folder
        whose host path contains host_dir wins.

        Args:
            host_dir: Absolute directory on the host.
            machine: Restrict matching to this machine.

        Returns:
            Tuple of (machine name, guest directory). The guest directory is
            None when no synced folder covers host_dir, in which case the
            machine is the requested one, else the primary machine, else
            the first declared machine.
        """
        host_dir = os.path.normpath(host_dir)
        folders_by_machine = self.parsed_config.collect_folders_by_machine()

        for name, folders in folders_by_machine.items():
            if machine is not None and name != machine:
                continue
            for guest_path, host_path in folders.items():
                relative = _relative_to(host_dir, os.path.normpath(host_path))
                if relative is None:
                    continue
                parts = relative.split(os.sep) if relative else []
                guest_dir = posixpath.join(guest_path, *parts)
                logger.debug(f"{host_dir} maps to {name}:{guest_dir}")
                return name, guest_dir

        logger.debug(f"No synced folder covers {host_dir}")
        fallback = self.parsed_config.primary_machine or self.parsed_config.first_machine()
        return machine or fallback, None
