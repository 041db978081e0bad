"""SSH command construction and multiplexed master connections.

This module provides:
- SSHCommandExecutor, which builds the ssh argument vector for a machine
  and replaces the current process with it
- SSHMasterSocket, which keeps one ControlMaster connection per machine
  open so that each avsh invocation skips Vagrant's slow startup
"""

from __future__ import annotations

import hashlib
import os
import subprocess
import tempfile
from pathlib import Path
from typing import NoReturn

import paramiko

from avsh.core.exceptions import ExecError, SSHMasterError
from avsh.utils.logging import get_logger

logger = get_logger("ssh")

SSH_EXECUTABLE = "ssh"
LOGIN_SHELL = "exec $SHELL -l"


def control_socket_path(socket_dir: str | Path, vagrantfile_dir: str, machine: str) -> str:
    """Get the control socket path for a project's machine.

    The path includes a short digest of the Vagrantfile directory so that
    machines with the same name in different projects don't collide.

    Args:
        socket_dir: Directory the sockets live in.
        vagrantfile_dir: Directory containing the Vagrantfile.
        machine: Machine name.

    Returns:
        Path of the control socket.
    """
    digest = hashlib.sha1(vagrantfile_dir.encode("utf-8")).hexdigest()[:10]
    return str(Path(socket_dir).expanduser() / f"avsh_{digest}_{machine}.sock")


class SSHCommandExecutor:
    """Builds and executes the ssh command for one machine.

    Args:
        machine_name: Name of the machine, used as the ssh host.
        socket_path: Path to the master connection's control socket.

    Example:
        >>> executor = SSHCommandExecutor("web", "/tmp/web.sock")
        >>> executor.build_args("ls", "/srv/app")
        ['ssh', '-o ControlPath /tmp/web.sock', 'web', 'cd /srv/app; ls']
    """

    def __init__(self, machine_name: str, socket_path: str) -> None:
        self.machine_name = machine_name
        self.socket_path = socket_path

    def build_args(self, command: str = "", guest_dir: str | None = None) -> list[str]:
        """Build the ssh argument vector.

        An empty command opens an interactive login shell, which needs a
        terminal (``-t``). A non-empty command runs without one.

        Args:
            command: Command to run on the machine. Empty for a login shell.
            guest_dir: Directory on the machine to change into first.

        Returns:
            Argument vector, starting with the executable name.
        """
        args = [SSH_EXECUTABLE, f"-o ControlPath {self.socket_path}"]

        if not command:
            args.append("-t")
            command = LOGIN_SHELL

        if guest_dir:
            command = f"cd {guest_dir}; {command}"

        args.extend([self.machine_name, command])
        return args

    def execute(self, command: str = "", guest_dir: str | None = None) -> NoReturn:
        """Replace the current process with ssh.

        This never returns on success: the avsh process becomes the ssh
        client.

        Args:
            command: Command to run on the machine. Empty for a login shell.
            guest_dir: Directory on the machine to change into first.

        Raises:
            ExecError: If the ssh executable could not be started.
        """
        args = self.build_args(command, guest_dir)
        logger.debug(f"Executing: {args}")
        try:
            os.execvp(SSH_EXECUTABLE, args)
        except OSError as e:
            raise ExecError(SSH_EXECUTABLE, str(e)) from e
        raise ExecError(SSH_EXECUTABLE, "exec returned unexpectedly")

    def run(self, command: str, guest_dir: str | None = None) -> int:
        """Run ssh as a child process and wait for it.

        Args:
            command: Command to run on the machine.
            guest_dir: Directory on the machine to change into first.

        Returns:
            Exit status of the ssh process.

        Raises:
            ExecError: If the ssh executable could not be started.
        """
        args = self.build_args(command, guest_dir)
        logger.debug(f"Running on {self.machine_name}: {args}")
        try:
            return subprocess.call(args)
        except OSError as e:
            raise ExecError(SSH_EXECUTABLE, str(e)) from e


class SSHMasterSocket:
    """Manages the ControlMaster connection for each machine of a project.

    The master is started from the output of ``vagrant ssh-config``, and
    stays alive for ``control_persist`` seconds after its last client
    disconnects.

    Args:
        vagrantfile_dir: Directory containing the Vagrantfile.
        socket_dir: Directory to place control sockets in.
        control_persist: Seconds an idle master stays open.

    Example:
        >>> master = SSHMasterSocket("/home/me/project", "/tmp", 600)
        >>> socket_path = master.ensure("web")
        >>> SSHCommandExecutor("web", socket_path).execute("uptime")
    """

    def __init__(
        self,
        vagrantfile_dir: str,
        socket_dir: str | Path,
        control_persist: int = 600,
    ) -> None:
        self.vagrantfile_dir = vagrantfile_dir
        self.socket_dir = Path(socket_dir).expanduser()
        self.control_persist = control_persist

    def socket_path(self, machine: str) -> str:
        """Path of the control socket for a machine."""
        return control_socket_path(self.socket_dir, self.vagrantfile_dir, machine)

    def active(self, machine: str) -> bool:
        """Check whether a master connection is running for a machine."""
        socket_path = self.socket_path(machine)
        if not Path(socket_path).exists():
            return False
        result = subprocess.run(
            [SSH_EXECUTABLE, "-O", "check", "-o", f"ControlPath={socket_path}", machine],
            capture_output=True,
            text=True,
            check=False,
        )
        logger.debug(f"Master check for {machine} exited with {result.returncode}")
        return result.returncode == 0

    def close(self, machine: str) -> None:
        """Ask a running master connection to exit."""
        socket_path = self.socket_path(machine)
        if not Path(socket_path).exists():
            return
        logger.info(f"Closing master connection for {machine}")
        subprocess.run(
            [SSH_EXECUTABLE, "-O", "exit", "-o", f"ControlPath={socket_path}", machine],
            capture_output=True,
            text=True,
            check=False,
        )

    def fetch_ssh_config(self, machine: str) -> str:
        """Get the ssh client configuration Vagrant generates for a machine.

        Args:
            machine: Machine name.

        Returns:
            The ssh_config text.

        Raises:
            SSHMasterError: If vagrant fails or returns no entry for the machine.
        """
        logger.info(f"Reading ssh config for {machine} from vagrant")
        try:
            result = subprocess.run(
                ["vagrant", "ssh-config", machine],
                cwd=self.vagrantfile_dir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise SSHMasterError(machine, f"could not run vagrant: {e}") from e

        if result.returncode != 0:
            message = result.stderr.strip() or f"vagrant exited with {result.returncode}"
            raise SSHMasterError(machine, message)

        ssh_config = paramiko.SSHConfig.from_text(result.stdout)
        if machine not in ssh_config.get_hostnames():
            raise SSHMasterError(machine, "vagrant ssh-config returned no entry")

        host = ssh_config.lookup(machine)
        logger.debug(
            f"{machine} is {host.get('user')}@{host.get('hostname')}:{host.get('port')}"
        )
        return result.stdout

    def initialize(self, machine: str) -> None:
        """Start a master connection for a machine.

        Raises:
            SSHMasterError: If the master connection could not be started.
        """
        ssh_config = self.fetch_ssh_config(machine)
        socket_path = self.socket_path(machine)
        self.socket_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile("w", prefix="avsh_ssh_config_", suffix=".conf") as f:
            f.write(ssh_config)
            f.flush()

            args = [
                SSH_EXECUTABLE,
                "-M",
                "-o",
                f"ControlPath={socket_path}",
                "-o",
                f"ControlPersist={self.control_persist}",
                "-F",
                f.name,
                "-fnNT",
                machine,
            ]
            logger.debug(f"Starting master connection: {args}")
            try:
                result = subprocess.run(args, capture_output=True, text=True, check=False)
            except OSError as e:
                raise SSHMasterError(machine, str(e)) from e

        if result.returncode != 0:
            message = result.stderr.strip() or f"ssh exited with {result.returncode}"
            raise SSHMasterError(machine, message)
        logger.info(f"Master connection for {machine} started at {socket_path}")

    def ensure(self, machine: str, reconnect: bool = False) -> str:
        """Make sure a master connection is running for a machine.

        Args:
            machine: Machine name.
            reconnect: Close any existing master connection first.

        Returns:
            Path of the control socket.
        """
        if reconnect:
            self.close(machine)
        if reconnect or not self.active(machine):
            self.initialize(machine)
        else:
            logger.debug(f"Reusing master connection for {machine}")
        return self.socket_path(machine)
