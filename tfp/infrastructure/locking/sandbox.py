"""
Sandbox Lock Manager.

Markers live in a directory inside the shared sandbox container, reached
through SandboxCommandExecutor. Exclusive creation uses the shell's
noclobber mode (`set -C`), under which `>` opens the file with O_EXCL, so
create-if-absent happens in one step inside the container.
"""

import shlex
import time
from typing import Callable, Optional

from tfp.domain.models import LockMarker
from tfp.infrastructure.sandbox import SandboxCommandExecutor
from .base import MarkerLockManager


class SandboxLockManager(MarkerLockManager):
    """
    Marker lock over a directory inside the sandbox.

    Usage:
        executor = SandboxCommandExecutor("app-backend-e2e")
        locks = SandboxLockManager(executor, "/tmp/test-locks")
        marker = locks.acquire("owner-admin-run1")
    """

    def __init__(
        self,
        executor: SandboxCommandExecutor,
        lock_dir: str = "/tmp/test-locks",
        max_wait: float = 10.0,
        poll_interval: float = 0.1,
        worker_id: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(
            max_wait=max_wait,
            poll_interval=poll_interval,
            worker_id=worker_id,
            clock=clock,
            sleep=sleep,
        )
        self._executor = executor
        self._lock_dir = lock_dir.rstrip("/") or "/"

    def marker_path(self, name: str) -> str:
        return f"{self._lock_dir}/{name}"

    def _try_create(self, name: str, marker: LockMarker) -> bool:
        path = shlex.quote(self.marker_path(name))
        script = (
            f"mkdir -p {shlex.quote(self._lock_dir)} && "
            f"(set -C; printf '%s' {shlex.quote(marker.to_json())} > {path}) 2>/dev/null"
        )
        return self._executor.run_shell(script).ok

    def _delete(self, name: str) -> bool:
        path = shlex.quote(self.marker_path(name))
        return self._executor.run_shell(f"[ -e {path} ] && rm -f {path}").ok

    def _exists(self, name: str) -> bool:
        return self._executor.run(["test", "-e", self.marker_path(name)]).ok

    def _read(self, name: str) -> Optional[str]:
        result = self._executor.run(["cat", self.marker_path(name)])
        return result.stdout if result.ok else None
