"""Synced folder and machine models for avsh.

This module defines the data models for the project manifest, the YAML
file that declares a Vagrant project's machines and synced folders.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _check_guest_paths(folders: dict[str, Any]) -> dict[str, Any]:
    for guest_path in folders:
        if not guest_path.startswith("/"):
            raise ValueError(f"Guest path must be absolute: {guest_path}")
    return folders


def _coerce_folders(value: Any) -> Any:
    # Allow the "/guest: ./host" shorthand
    if isinstance(value, dict):
        return {
            guest: {"host_path": opts} if isinstance(opts, str) else opts
            for guest, opts in value.items()
        }
    return value


class SyncedFolder(BaseModel):
    """A single guest to host directory mapping.

    Args:
        host_path: Directory on the host. Relative paths are resolved
            against the Vagrantfile directory when the manifest is loaded.
        disabled: Whether the mapping is switched off.

    Example:
        >>> SyncedFolder(host_path="/home/me/project/app")
        SyncedFolder(host_path='/home/me/project/app', disabled=False)
    """

    model_config = ConfigDict(frozen=True)

    host_path: Annotated[str, Field(min_length=1, description="Host directory")]
    disabled: bool = Field(default=False, description="Mapping is disabled")


class MachineDefinition(BaseModel):
    """Declarations made inside one machine block.

    Args:
        synced_folders: Guest path to SyncedFolder, in declared order.
    """

    synced_folders: dict[str, SyncedFolder] = Field(default_factory=dict)

    @field_validator("synced_folders", mode="before")
    @classmethod
    def coerce_synced_folders(cls, v: Any) -> Any:
        """Expand the string shorthand into full declarations."""
        return _coerce_folders(v)

    @field_validator("synced_folders")
    @classmethod
    def validate_guest_paths(cls, v: dict[str, SyncedFolder]) -> dict[str, SyncedFolder]:
        """Ensure guest paths are absolute."""
        return _check_guest_paths(v)


class ProjectManifest(BaseModel):
    """The full project manifest.

    Args:
        primary: Name of the primary machine, if any.
        synced_folders: Global synced folders shared by all machines.
        machines: Machine name to MachineDefinition, in declared order.

    Example manifest (.avsh.yml):
        ```yaml
        primary: web
        synced_folders:
          /shared: ./shared
        machines:
          web:
            synced_folders:
              /srv/web: {host_path: ./web}
          db: {}
        ```
    """

    primary: str | None = Field(default=None, description="Primary machine")
    synced_folders: dict[str, SyncedFolder] = Field(default_factory=dict)
    machines: dict[str, MachineDefinition] = Field(default_factory=dict)

    @field_validator("synced_folders", mode="before")
    @classmethod
    def coerce_synced_folders(cls, v: Any) -> Any:
        """Expand the string shorthand into full declarations."""
        return _coerce_folders(v)

    @field_validator("synced_folders")
    @classmethod
    def validate_guest_paths(cls, v: dict[str, SyncedFolder]) -> dict[str, SyncedFolder]:
        """Ensure guest paths are absolute."""
        return _check_guest_paths(v)

    @field_validator("machines", mode="before")
    @classmethod
    def coerce_machines(cls, v: Any) -> Any:
        """Treat a bare machine entry (``db:``) as an empty definition."""
        if isinstance(v, dict):
            return {name: definition or {} for name, definition in v.items()}
        return v

    @model_validator(mode="after")
    def validate_primary(self) -> ProjectManifest:
        """Ensure the primary machine is one of the declared machines."""
        if self.primary is not None and self.primary not in self.machines:
            raise ValueError(f"Primary machine '{self.primary}' is not declared")
        return self
