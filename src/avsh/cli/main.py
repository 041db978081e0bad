"""Main CLI entry point for avsh.

avsh runs a command (or opens a login shell) on a Vagrant machine, in the
guest directory that corresponds to the current host directory. Everything
after the options is sent to the machine as the command.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click
from rich.console import Console

from avsh import __version__
from avsh.core.config import ConfigManager, get_default_config_path
from avsh.core.dir_matcher import DirectoryMatcher
from avsh.core.exceptions import AvshError
from avsh.core.parsed_config import DEFAULT_MACHINE, ParsedConfig
from avsh.core.project import load_parsed_config
from avsh.core.ssh import SSHCommandExecutor, SSHMasterSocket
from avsh.utils.logging import configure_logging, get_logger
from avsh.utils.output import (
    OutputFormat,
    OutputFormatter,
    error_console,
    print_error,
    print_info,
    print_warning,
)

logger = get_logger("cli")


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"avsh version [cyan]{__version__}[/cyan]")
    ctx.exit()


def resolve_machines(
    parsed_config: ParsedConfig,
    search_string: str | None,
    matcher: DirectoryMatcher,
    cwd: str,
) -> list[str]:
    """Turn the --machine option into machine names.

    Without a search string the machine is picked from the current
    directory. A project with no declared machines only has ``default``.
    """
    if search_string is None:
        machine, _guest_dir = matcher.match(cwd)
        return [machine]
    if not parsed_config.machine_names and search_string == DEFAULT_MACHINE:
        return [DEFAULT_MACHINE]
    return parsed_config.match_machines(search_string)


def run_on_machines(
    machines: list[str],
    command: str,
    matcher: DirectoryMatcher,
    master: SSHMasterSocket,
    cwd: str,
    reconnect: bool = False,
) -> int:
    """Run a command on several machines one after another.

    Returns:
        The first non-zero exit status, or 0 if every run succeeded.
    """
    status = 0
    for machine in machines:
        _machine, guest_dir = matcher.match(cwd, machine)
        socket_path = master.ensure(machine, reconnect=reconnect)
        print_info(f"Running on {machine}")
        exit_code = SSHCommandExecutor(machine, socket_path).run(command, guest_dir)
        if exit_code != 0:
            print_warning(f"Command exited with {exit_code} on {machine}")
            status = status or exit_code
    return status


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": ["-h", "--help"],
    }
)
@click.option(
    "-m",
    "--machine",
    "machine_search",
    default=None,
    help="Machine to connect to: a name, a /regex/, or a comma separated list.",
)
@click.option(
    "-r",
    "--reconnect",
    is_flag=True,
    default=False,
    help="Re-open the SSH master connection before connecting.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v, -vv, -vvv for more).",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Show full error tracebacks.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    envvar="AVSH_CONFIG",
    help=f"Path to config file (default: {get_default_config_path()}).",
)
@click.option(
    "--folders",
    "folders_format",
    is_flag=False,
    flag_value="table",
    default=None,
    type=click.Choice([f.value for f in OutputFormat]),
    help="Show the synced folders of every machine and exit.",
)
@click.option(
    "--init-config",
    is_flag=True,
    default=False,
    help="Write an example config file and exit.",
)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
def cli(
    machine_search: str | None,
    reconnect: bool,
    verbose: int,
    debug: bool,
    config_path: str | None,
    folders_format: str | None,
    init_config: bool,
    command: tuple[str, ...],
) -> None:
    """avsh - a fast 'vagrant ssh'.

    Runs COMMAND on a Vagrant machine in the guest directory matching the
    current directory, or opens a login shell there if no COMMAND is given.

    Examples:

        # Open a shell in the matching guest directory

        $ avsh

        # Run a command on the machine that owns this directory

        $ avsh make test

        # Run a command on every machine whose name starts with "web"

        $ avsh -m '/^web/' uptime
    """
    try:
        if init_config:
            written = ConfigManager.create_example_config(
                Path(config_path) if config_path else None
            )
            print_info(f"Wrote example config to {written}")
            return

        manager = ConfigManager(Path(config_path) if config_path else None)
        configure_logging(
            verbosity=verbose,
            log_file=manager.config.logging.file,
            log_level=manager.config.logging.level,
        )

        cwd = os.getcwd()
        vagrantfile_dir = manager.vagrantfile_dir(cwd)
        parsed_config = load_parsed_config(vagrantfile_dir)

        if folders_format:
            formatter = OutputFormatter(OutputFormat(folders_format))
            formatter.print_folders(parsed_config.collect_folders_by_machine())
            return

        matcher = DirectoryMatcher(parsed_config)
        master = SSHMasterSocket(
            parsed_config.vagrantfile_dir,
            manager.config.socket_dir,
            manager.config.control_persist,
        )
        command_str = " ".join(command)
        machines = resolve_machines(parsed_config, machine_search, matcher, cwd)
        logger.debug(f"Target machines: {machines}")

        if len(machines) > 1:
            if not command_str:
                raise click.UsageError("A command is required when targeting multiple machines.")
            status = run_on_machines(machines, command_str, matcher, master, cwd, reconnect)
            raise SystemExit(status)

        machine = machines[0]
        _machine, guest_dir = matcher.match(cwd, machine)
        socket_path = master.ensure(machine, reconnect=reconnect)
        SSHCommandExecutor(machine, socket_path).execute(command_str, guest_dir)

    except AvshError as e:
        if debug:
            error_console.print_exception()
        print_error(str(e))
        raise SystemExit(1) from e


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except AvshError as e:
        print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        error_console.print("\n[dim]Interrupted[/dim]")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("AVSH_DEBUG") or "--debug" in sys.argv:
            import traceback

            traceback.print_exc()
        else:
            print_error(f"Unexpected error: {e}")
            error_console.print("[dim]Use --debug for full traceback[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()
