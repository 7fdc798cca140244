from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass

from tfp.domain.errors import SandboxCommandError


@dataclass(frozen=True, slots=True)
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class SandboxCommandExecutor:
    """Runs commands inside the shared sandbox container (or locally when none is set)."""

    def __init__(
        self,
        container: str | None = None,
        *,
        docker_bin: str = "docker",
        timeout_seconds: float = 15.0,
    ) -> None:
        self.container = container
        self.docker_bin = docker_bin
        self.timeout_seconds = timeout_seconds
        self._logger = logging.getLogger(__name__)

    def _build(self, argv: list[str]) -> list[str]:
        """Wrap the command in `docker exec` when a container is configured."""
        if self.container:
            return [self.docker_bin, "exec", self.container, *argv]
        return list(argv)

    def run(self, argv: list[str], *, timeout_seconds: float | None = None) -> CommandResult:
        """Execute a command and capture its output; non-zero exit is not an error here."""
        cmd = self._build(argv)
        timeout = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        self._logger.debug("sandbox_exec cmd=%s", cmd)
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise SandboxCommandError(shlex.join(cmd), f"Timed out after {timeout}s") from e
        except OSError as e:
            raise SandboxCommandError(shlex.join(cmd), f"Could not start command ({e})") from e

        # Decode output, replacing invalid characters if necessary
        stdout = completed.stdout.decode(errors="replace")
        stderr = completed.stderr.decode(errors="replace")
        self._logger.debug("sandbox_exit code=%s", completed.returncode)
        return CommandResult(stdout=stdout, stderr=stderr, exit_code=completed.returncode)

    def run_shell(self, script: str, *, timeout_seconds: float | None = None) -> CommandResult:
        """Execute a POSIX shell snippet with `sh -c`."""
        return self.run(["sh", "-c", script], timeout_seconds=timeout_seconds)
