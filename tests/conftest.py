"""Pytest configuration and fixtures for avsh tests.

This module provides shared fixtures for testing avsh components
including sample projects, parsed configurations, and config files.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import yaml

from avsh.core.parsed_config import ParsedConfig
from avsh.models.synced_folder import SyncedFolder

if TYPE_CHECKING:
    from click.testing import CliRunner

VAGRANTFILE_DIR = "/home/me/project"


@pytest.fixture
def single_machine_config() -> ParsedConfig:
    """A project that declares no machines."""
    return ParsedConfig(
        VAGRANTFILE_DIR,
        {"/shared": SyncedFolder(host_path="/home/me/shared")},
        {},
        None,
    )


@pytest.fixture
def multi_machine_config() -> ParsedConfig:
    """A project with three machines and a primary."""
    return ParsedConfig(
        VAGRANTFILE_DIR,
        {
            "/shared": SyncedFolder(host_path="/home/me/shared"),
            "/cache": SyncedFolder(host_path="/home/me/cache", disabled=True),
        },
        {
            "web1": {"/srv/web": SyncedFolder(host_path="/home/me/project/web")},
            "db": {"/shared": SyncedFolder(host_path="/ignored", disabled=True)},
            "web2": {"/code": SyncedFolder(host_path=VAGRANTFILE_DIR)},
        },
        "db",
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A temporary project directory containing a Vagrantfile and manifest."""
    (tmp_path / "Vagrantfile").write_text('Vagrant.configure("2") do |config|\nend\n')
    (tmp_path / "app").mkdir()
    manifest = {
        "primary": "web",
        "synced_folders": {"/shared": "./shared"},
        "machines": {
            "db": None,
            "web": {"synced_folders": {"/srv/app": {"host_path": "./app"}}},
        },
    }
    with (tmp_path / ".avsh.yml").open("w") as f:
        yaml.safe_dump(manifest, f, sort_keys=False)
    return tmp_path


@pytest.fixture
def temp_config_file(tmp_path: Path, project_dir: Path) -> Path:
    """An avsh config file pointing at the sample project."""
    config_path = tmp_path / "avsh-config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "vagrantfile_dir": str(project_dir),
                "socket_dir": str(tmp_path / "sockets"),
                "control_persist": 60,
            }
        )
    )
    return config_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    from click.testing import CliRunner

    return CliRunner()
