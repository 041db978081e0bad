"""Machine resolution and synced folder merging.

This module provides the ParsedConfig value object, an immutable snapshot
of a Vagrant project's machines and synced folders. It answers two
questions for the rest of avsh:

- Which machines does a user search string refer to?
- Which guest directories map back to which host directories, per machine?

The folder merging reproduces Vagrant's own rules, including the implicit
``/vagrant`` share of the Vagrantfile directory.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from avsh.core.exceptions import AvshError, InvalidPatternError, MachineNotFoundError
from avsh.models.synced_folder import SyncedFolder
from avsh.utils.logging import get_logger

logger = get_logger("parsed_config")

DEFAULT_MACHINE = "default"
VAGRANT_SHARE = "/vagrant"

FolderMap = dict[str, str]

_REGEX_SEARCH = re.compile(r"^/(.+?)/$")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of resolving a machine search string.

    Args:
        search_string: The search string that was resolved.
        machines: Matched machine names, in resolution order.
        error: The error that stopped resolution, if any.
    """

    search_string: str
    machines: list[str] = field(default_factory=list)
    error: AvshError | None = None

    @property
    def ok(self) -> bool:
        """True if at least one machine matched."""
        return self.error is None

    def unwrap(self) -> list[str]:
        """Return the matched machines, raising the carried error if any."""
        if self.error is not None:
            raise self.error
        return self.machines


@dataclass(frozen=True)
class ParsedConfig:
    """Read-only snapshot of a project's machine and synced folder layout.

    Args:
        vagrantfile_dir: Absolute directory containing the Vagrantfile. Used
            as the host path of the implicit ``/vagrant`` share.
        global_synced_folders: Guest path to SyncedFolder declarations made
            outside any machine block.
        machine_synced_folders: Machine name to that machine's own synced
            folder declarations. Empty when the project declares no machines.
        primary_machine: Name of the machine marked primary, if any.

    Example:
        >>> config = ParsedConfig(
        ...     "/home/me/project",
        ...     {},
        ...     {"web": {}, "db": {}},
        ...     primary_machine="db",
        ... )
        >>> config.match_machines("/w.b/")
        ['web']
        >>> list(config.collect_folders_by_machine())
        ['db', 'web']
    """

    vagrantfile_dir: str
    global_synced_folders: Mapping[str, SyncedFolder] = field(default_factory=dict)
    machine_synced_folders: Mapping[str, Mapping[str, SyncedFolder]] = field(
        default_factory=dict
    )
    primary_machine: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "global_synced_folders",
            MappingProxyType(dict(self.global_synced_folders)),
        )
        object.__setattr__(
            self,
            "machine_synced_folders",
            MappingProxyType(
                {
                    name: MappingProxyType(dict(folders))
                    for name, folders in self.machine_synced_folders.items()
                }
            ),
        )

    @property
    def machine_names(self) -> list[str]:
        """Declared machine names in declaration order."""
        return list(self.machine_synced_folders)

    def match_machines(self, search_string: str) -> list[str]:
        """Return the machines matching a search string.

        The search string may be an exact machine name, a regular expression
        wrapped in slashes (``/web\\d/``), or a comma separated list of either.

        Args:
            search_string: The user supplied machine identifier.

        Returns:
            Matched machine names. List results are concatenated in the
            order given and are not deduplicated.

        Raises:
            InvalidPatternError: If a /regex/ does not compile.
            MachineNotFoundError: If the search string, or any part of a
                comma separated list, matches no machine.
        """
        return self.resolve_machines(search_string).unwrap()

    def resolve_machines(self, search_string: str) -> MatchResult:
        """Resolve a search string without raising.

        Args:
            search_string: The user supplied machine identifier.

        Returns:
            MatchResult carrying either the machines or the typed error.
        """
        machines: list[str] = []
        regex_match = _REGEX_SEARCH.match(search_string)

        if regex_match:
            pattern = regex_match.group(1)
            try:
                regex = re.compile(pattern)
            except re.error as e:
                error = InvalidPatternError(pattern, str(e))
                error.__cause__ = e
                return MatchResult(search_string, error=error)
            machines = [name for name in self.machine_names if regex.search(name)]
        elif "," in search_string:
            pieces = search_string.split(",")
            # Trailing empty pieces are ignored ("web," is just "web")
            while pieces and not pieces[-1]:
                pieces.pop()
            for piece in pieces:
                result = self.resolve_machines(piece.strip())
                if not result.ok:
                    return result
                machines.extend(result.machines)
        elif search_string in self.machine_synced_folders:
            machines = [search_string]

        if not machines:
            return MatchResult(
                search_string,
                error=MachineNotFoundError(search_string, self.vagrantfile_dir),
            )

        logger.debug(f"Search '{search_string}' matched machines: {machines}")
        return MatchResult(search_string, machines=machines)

    def first_machine(self) -> str:
        """Return the first declared machine, or ``default`` if none."""
        return next(iter(self.machine_synced_folders), DEFAULT_MACHINE)

    def collect_folders_by_machine(self) -> dict[str, FolderMap]:
        """Return the merged synced folders for every machine.

        The primary machine, when set, is moved to the front since it should
        be matched first. All other machines keep their declaration order.
        """
        if not self.machine_synced_folders:
            return {DEFAULT_MACHINE: self.default_synced_folders()}

        folders = [
            (name, self.merge_with_defaults(synced_folders))
            for name, synced_folders in self.machine_synced_folders.items()
        ]

        if self.primary_machine:
            folders.sort(key=lambda item: 0 if item[0] == self.primary_machine else 1)

        return dict(folders)

    def default_synced_folders(self) -> FolderMap:
        """Return the global synced folders that apply to every machine."""
        defaults: FolderMap = {
            guest_path: folder.host_path
            for guest_path, folder in self.global_synced_folders.items()
            if not folder.disabled
        }
        return self._add_vagrant_default(defaults)

    def merge_with_defaults(self, synced_folders: Mapping[str, SyncedFolder]) -> FolderMap:
        """Apply one machine's synced folder declarations on top of the defaults.

        Args:
            synced_folders: The machine's own declarations, in declared order.

        Returns:
            A new folder map. Disabled declarations remove the guest path
            entirely, and remapping the Vagrantfile directory drops the
            implicit ``/vagrant`` share.
        """
        merged = self.default_synced_folders()
        for guest_path, folder in synced_folders.items():
            if folder.disabled:
                merged.pop(guest_path, None)
                continue
            if folder.host_path == self.vagrantfile_dir:
                merged.pop(VAGRANT_SHARE, None)
            merged[guest_path] = folder.host_path
        return merged

    def _add_vagrant_default(self, synced_folders: FolderMap) -> FolderMap:
        # Vagrant shares the project directory at /vagrant unless it is
        # already shared somewhere else.
        if (
            VAGRANT_SHARE not in synced_folders
            and self.vagrantfile_dir not in synced_folders.values()
        ):
            synced_folders[VAGRANT_SHARE] = self.vagrantfile_dir
        return synced_folders
