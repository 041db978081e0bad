"""Tests for the avsh command."""

from __future__ import annotations

import sys
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from avsh import __version__
from avsh.cli.main import cli, main
from avsh.core.config import ConfigManager


@pytest.fixture
def in_app_dir(project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from the sample project's app directory."""
    app_dir = project_dir / "app"
    monkeypatch.chdir(app_dir)
    monkeypatch.delenv("VAGRANT_CWD", raising=False)
    return app_dir


@pytest.fixture
def mock_ensure() -> Generator[MagicMock, None, None]:
    """Pretend a master connection is always available."""
    with patch("avsh.cli.main.SSHMasterSocket.ensure", return_value="/s.sock") as mock:
        yield mock


@pytest.fixture
def mock_executor() -> Generator[MagicMock, None, None]:
    """Replace the SSH executor so nothing is exec'd."""
    with patch("avsh.cli.main.SSHCommandExecutor") as mock_cls:
        mock_cls.return_value.run.return_value = 0
        yield mock_cls


class TestConnect:
    """Tests for connecting to a single machine."""

    def test_shell_in_matching_dir(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_ensure: MagicMock,
        mock_executor: MagicMock,
    ) -> None:
        """Test that a bare invocation opens a shell in the matching guest dir."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file)])

        assert result.exit_code == 0, result.output
        mock_ensure.assert_called_once_with("web", reconnect=False)
        mock_executor.assert_called_once_with("web", "/s.sock")
        mock_executor.return_value.execute.assert_called_once_with("", "/vagrant/app")

    def test_command_on_named_machine(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_ensure: MagicMock,
        mock_executor: MagicMock,
    ) -> None:
        """Test that the remaining arguments form the command."""
        result = cli_runner.invoke(
            cli, ["--config", str(temp_config_file), "-m", "db", "ls", "-la"]
        )

        assert result.exit_code == 0, result.output
        mock_executor.assert_called_once_with("db", "/s.sock")
        mock_executor.return_value.execute.assert_called_once_with("ls -la", "/vagrant/app")

    def test_reconnect(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_ensure: MagicMock,
        mock_executor: MagicMock,
    ) -> None:
        """Test that --reconnect restarts the master connection."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file), "-r", "pwd"])

        assert result.exit_code == 0, result.output
        mock_ensure.assert_called_once_with("web", reconnect=True)

    def test_unknown_machine(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_executor: MagicMock,
    ) -> None:
        """Test that an unknown machine is reported."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file), "-m", "nope"])

        assert result.exit_code == 1
        assert "Could not find any machines" in result.output
        mock_executor.assert_not_called()

    def test_invalid_pattern(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_executor: MagicMock,
    ) -> None:
        """Test that an invalid regex is reported."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file), "-m", "/[/"])

        assert result.exit_code == 1
        assert "Invalid machine pattern" in result.output

    def test_no_vagrantfile(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test running outside of any project."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("VAGRANT_CWD", raising=False)

        result = cli_runner.invoke(cli, ["--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 1
        assert "Could not find a Vagrantfile" in result.output


class TestMultipleMachines:
    """Tests for commands sent to several machines."""

    def test_runs_on_each_machine(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_ensure: MagicMock,
        mock_executor: MagicMock,
    ) -> None:
        """Test that the command runs on every matched machine in order."""
        result = cli_runner.invoke(
            cli, ["--config", str(temp_config_file), "-m", "/.*/", "uptime"]
        )

        assert result.exit_code == 0, result.output
        machines = [c.args[0] for c in mock_executor.call_args_list]
        assert machines == ["db", "web"]
        assert mock_executor.return_value.run.call_count == 2
        mock_executor.return_value.execute.assert_not_called()

    def test_exit_status_of_failure(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_ensure: MagicMock,
        mock_executor: MagicMock,
    ) -> None:
        """Test that the first failing exit status is returned."""
        mock_executor.return_value.run.side_effect = [0, 7]

        result = cli_runner.invoke(
            cli, ["--config", str(temp_config_file), "-m", "db,web", "false"]
        )

        assert result.exit_code == 7
        assert "exited with 7 on web" in result.output

    def test_command_required(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_ensure: MagicMock,
        mock_executor: MagicMock,
    ) -> None:
        """Test that a shell can't be opened on several machines."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file), "-m", "db,web"])

        assert result.exit_code == 2
        assert "A command is required" in result.output
        mock_executor.assert_not_called()


class TestFolders:
    """Tests for --folders."""

    def test_json(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
        mock_executor: MagicMock,
    ) -> None:
        """Test printing the synced folders as JSON."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file), "--folders", "json"])

        assert result.exit_code == 0, result.output
        assert '"/srv/app"' in result.output
        assert result.output.index('"web"') < result.output.index('"db"')
        mock_executor.assert_not_called()

    def test_table(
        self,
        cli_runner: CliRunner,
        temp_config_file: Path,
        in_app_dir: Path,
    ) -> None:
        """Test the default table output."""
        result = cli_runner.invoke(cli, ["--config", str(temp_config_file), "--folders"])

        assert result.exit_code == 0, result.output
        assert "Synced Folders" in result.output


class TestInitConfig:
    """Tests for --init-config."""

    def test_writes_example_config(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        mock_executor: MagicMock,
    ) -> None:
        """Test that an example config is written without needing a project."""
        monkeypatch.chdir(tmp_path)
        config_path = tmp_path / "nested" / "config.yaml"

        result = cli_runner.invoke(cli, ["--config", str(config_path), "--init-config"])

        assert result.exit_code == 0, result.output
        assert config_path.is_file()
        assert "Wrote example config" in result.output
        assert ConfigManager(config_path).config.control_persist == 600
        mock_executor.assert_not_called()


class TestVersion:
    """Tests for --version."""

    def test_version(self, cli_runner: CliRunner) -> None:
        """Test that --version prints the version."""
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestMain:
    """Tests for the main() entry point."""

    def test_error_exit_code(
        self,
        temp_config_file: Path,
        in_app_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that avsh errors exit with status 1."""
        monkeypatch.setattr(sys, "argv", ["avsh", "--config", str(temp_config_file), "-m", "x"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1

    def test_usage_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that click usage errors keep their exit status."""
        monkeypatch.setattr(sys, "argv", ["avsh", "--folders", "xml"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 2
