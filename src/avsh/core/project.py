"""Project manifest loading.

Vagrant's own configuration is Ruby code, which avsh does not evaluate.
Instead each project describes its machines and synced folders in a small
YAML manifest (``.avsh.yml``) next to the Vagrantfile. This module loads
that manifest and turns it into a ParsedConfig.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from avsh.core.exceptions import ManifestError
from avsh.core.parsed_config import ParsedConfig
from avsh.models.synced_folder import ProjectManifest, SyncedFolder
from avsh.utils.logging import get_logger

logger = get_logger("project")

MANIFEST_NAME = ".avsh.yml"


def expand_host_path(host_path: str, vagrantfile_dir: str) -> str:
    """Expand a host path the way Vagrant does.

    Args:
        host_path: Host path as declared, possibly relative or using ``~``.
        vagrantfile_dir: Directory relative paths are resolved against.

    Returns:
        Normalized absolute path.
    """
    expanded = os.path.expanduser(host_path)
    return os.path.normpath(os.path.join(vagrantfile_dir, expanded))


def _expand_folders(
    folders: Mapping[str, SyncedFolder], vagrantfile_dir: str
) -> dict[str, SyncedFolder]:
    return {
        guest_path: folder.model_copy(
            update={"host_path": expand_host_path(folder.host_path, vagrantfile_dir)}
        )
        for guest_path, folder in folders.items()
    }


def load_manifest(vagrantfile_dir: str | Path) -> ProjectManifest:
    """Load and validate a project's manifest.

    A project without a manifest is treated as a single-machine project
    with no extra synced folders.

    Args:
        vagrantfile_dir: Directory containing the Vagrantfile.

    Returns:
        Validated ProjectManifest.

    Raises:
        ManifestError: If the manifest is not valid YAML or fails validation.
    """
    path = Path(vagrantfile_dir) / MANIFEST_NAME
    if not path.exists():
        logger.debug(f"No manifest at {path}, assuming a single default machine")
        return ProjectManifest()

    try:
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        return ProjectManifest.model_validate(data)
    except yaml.YAMLError as e:
        raise ManifestError(str(path), f"invalid YAML: {e}") from e
    except ValidationError as e:
        raise ManifestError(str(path), str(e)) from e


def build_parsed_config(manifest: ProjectManifest, vagrantfile_dir: str) -> ParsedConfig:
    """Build a ParsedConfig from a manifest.

    Args:
        manifest: The validated manifest.
        vagrantfile_dir: Absolute directory containing the Vagrantfile.

    Returns:
        ParsedConfig with every host path expanded.
    """
    return ParsedConfig(
        vagrantfile_dir=vagrantfile_dir,
        global_synced_folders=_expand_folders(manifest.synced_folders, vagrantfile_dir),
        machine_synced_folders={
            name: _expand_folders(machine.synced_folders, vagrantfile_dir)
            for name, machine in manifest.machines.items()
        },
        primary_machine=manifest.primary,
    )


def load_parsed_config(vagrantfile_dir: str | Path) -> ParsedConfig:
    """Load the ParsedConfig for the project in a directory."""
    vagrantfile_dir = os.path.abspath(os.path.expanduser(str(vagrantfile_dir)))
    manifest = load_manifest(vagrantfile_dir)
    config = build_parsed_config(manifest, vagrantfile_dir)
    logger.debug(
        f"Loaded project at {vagrantfile_dir} with machines {config.machine_names or ['default']}"
    )
    return config
