"""
Docker CLI wrapper for n8n-backup.

Every interaction with the container runtime goes through DockerRuntime:
listing running containers, checking a container's state, running commands
inside a container and copying files out of it.
"""

import subprocess
from dataclasses import dataclass
from typing import List, Optional

from ..errors import RuntimeUnavailableError
from ..types import ContainerState
from .logging import get_logger
from .system_utils import SystemUtils


logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Outcome of one docker invocation (stderr merged into output)."""

    args: List[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DockerRuntime:
    """
    Thin wrapper around the docker CLI.

    Commands never raise on a non-zero exit; callers inspect the returned
    CommandResult. Only a missing docker binary raises.
    """

    def __init__(self, docker_binary: str = 'docker', timeout: Optional[int] = None):
        """
        Args:
            docker_binary: Name or path of the docker executable
            timeout: Seconds per call, None for no timeout
        """
        self.docker_binary = docker_binary
        self.timeout = timeout

    def _run(self, args: List[str]) -> CommandResult:
        """
        Run a docker command and return its combined output.

        Args:
            args: Docker command arguments

        Returns:
            CommandResult with stdout and stderr merged
        """
        cmd = [self.docker_binary] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise RuntimeUnavailableError(f"{self.docker_binary} command not found") from e
        except subprocess.TimeoutExpired as e:
            output = e.output if isinstance(e.output, str) else ''
            logger.error(f"Docker command timed out after {self.timeout}s: {' '.join(cmd)}")
            return CommandResult(args=cmd, returncode=124, output=output or '')
        return CommandResult(args=cmd, returncode=result.returncode, output=result.stdout or '')

    def is_available(self) -> bool:
        """True if the docker CLI answers and the daemon is reachable."""
        if not SystemUtils.check_docker(self.docker_binary):
            logger.error(f"{self.docker_binary} command not found")
            return False
        try:
            return self._run(['version']).ok
        except RuntimeUnavailableError:
            return False

    def list_running(self) -> List[str]:
        """
        Names of all running containers in the order docker reports them.

        Returns:
            List of container names, empty if the query fails
        """
        result = self._run(['ps', '--format', '{{.Names}}'])
        if not result.ok:
            logger.error(f"Failed to list running containers: {result.output.strip()}")
            return []
        return [line.strip() for line in result.output.splitlines() if line.strip()]

    def container_state(self, name: str) -> ContainerState:
        """
        Check whether a container exists and is running.

        Args:
            name: Exact container name

        Returns:
            RUNNING, STOPPED (exists but not running) or MISSING
        """
        name_filter = f'name=^{name}$'
        running = self._run(['ps', '-q', '-f', name_filter])
        if running.ok and running.output.strip():
            return ContainerState.RUNNING

        existing = self._run(['ps', '-a', '-q', '-f', name_filter])
        if existing.ok and existing.output.strip():
            return ContainerState.STOPPED
        return ContainerState.MISSING

    def exec(self, container: str, command: List[str], user: Optional[str] = None) -> CommandResult:
        """Run a command inside a container, optionally as another user."""
        args = ['exec']
        if user:
            args += ['-u', user]
        args += [container] + list(command)
        return self._run(args)

    def copy_from(self, container: str, source: str, destination: str) -> CommandResult:
        """Recursively copy a path out of a container (docker cp)."""
        return self._run(['cp', f'{container}:{source}', destination])
