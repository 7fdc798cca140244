"""
Filesystem Lock Manager.

Markers are files in a directory every worker can see (a local tmp dir for
workers on one host, or a shared mount). Exclusive creation relies on
O_CREAT | O_EXCL, which is atomic on POSIX filesystems.
"""

import os
from pathlib import Path
from typing import Callable, Optional, Union
import time

from tfp.domain.models import LockMarker
from .base import MarkerLockManager


class FileLockManager(MarkerLockManager):
    """
    Marker lock over a directory.

    Usage:
        locks = FileLockManager("/tmp/test-locks")
        with locks.hold("owner-admin-run1"):
            ...
    """

    def __init__(
        self,
        lock_dir: Union[str, Path] = "/tmp/test-locks",
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
        self._lock_dir = Path(lock_dir)
        self._lock_dir.mkdir(parents=True, exist_ok=True)

    @property
    def lock_dir(self) -> Path:
        return self._lock_dir

    def marker_path(self, name: str) -> Path:
        return self._lock_dir / name

    def _try_create(self, name: str, marker: LockMarker) -> bool:
        path = self.marker_path(name)
        self._lock_dir.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(marker.to_json())
        return True

    def _delete(self, name: str) -> bool:
        try:
            self.marker_path(name).unlink()
            return True
        except FileNotFoundError:
            return False

    def _exists(self, name: str) -> bool:
        return self.marker_path(name).exists()

    def _read(self, name: str) -> Optional[str]:
        try:
            return self.marker_path(name).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
