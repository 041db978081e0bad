"""Data models for avsh.

This module contains Pydantic models for the project manifest.
"""

from avsh.models.synced_folder import MachineDefinition, ProjectManifest, SyncedFolder

__all__ = [
    "MachineDefinition",
    "ProjectManifest",
    "SyncedFolder",
]
