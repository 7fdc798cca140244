"""
Marker Lock Manager Base.

Shared bounded-wait acquisition loop for marker-based locks. Subclasses
only provide the four marker primitives (exclusive create, delete, exists,
read) for their medium.

Acquisition:
- At least one create attempt is always made
- Conflicts sleep poll_interval (never past the deadline) and retry
- The deadline is measured on a monotonic clock
- On timeout the current holder is read (best effort) for the error
"""

import logging
import os
import re
import socket
import time
import uuid
from abc import abstractmethod
from datetime import datetime
from typing import Callable, Optional

from tfp.config import current_worker_id
from tfp.domain.errors import LockTimeoutError, SandboxCommandError
from tfp.domain.interfaces.lock_manager import ILockManager
from tfp.domain.models import LockMarker

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def marker_file_name(resource_name: str) -> str:
    """Derive a safe, flat file name for a resource's marker."""
    safe = _UNSAFE_CHARS.sub("-", resource_name).strip("-.")
    return safe or "lock"


class MarkerLockManager(ILockManager):
    """Polling acquisition over an exclusive-create primitive."""

    def __init__(
        self,
        max_wait: float = 10.0,
        poll_interval: float = 0.1,
        worker_id: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            max_wait: Default acquisition ceiling in seconds
            poll_interval: Default sleep between attempts in seconds
            worker_id: Worker label embedded in holder tokens
            clock: Monotonic clock (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self._max_wait = max_wait
        self._poll_interval = poll_interval
        self._worker_id = worker_id or current_worker_id()
        self._clock = clock
        self._sleep = sleep

    # ═══════════════════════════════════════════════════════════════════════════
    # Medium Primitives
    # ═══════════════════════════════════════════════════════════════════════════

    @abstractmethod
    def _try_create(self, name: str, marker: LockMarker) -> bool:
        """Atomically create the marker if absent. True if this call created it."""
        pass

    @abstractmethod
    def _delete(self, name: str) -> bool:
        """Delete the marker. True if it existed."""
        pass

    @abstractmethod
    def _exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def _read(self, name: str) -> Optional[str]:
        """Raw marker content, None if absent."""
        pass

    # ═══════════════════════════════════════════════════════════════════════════
    # ILockManager
    # ═══════════════════════════════════════════════════════════════════════════

    def _holder_token(self) -> str:
        return f"{socket.gethostname()}:{os.getpid()}:{self._worker_id}:{uuid.uuid4().hex[:8]}"

    def acquire(
        self,
        resource_name: str,
        max_wait: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> LockMarker:
        max_wait = self._max_wait if max_wait is None else max_wait
        poll_interval = self._poll_interval if poll_interval is None else poll_interval
        name = marker_file_name(resource_name)
        deadline = self._clock() + max_wait
        attempts = 0

        logger.info(f"Worker {self._worker_id} acquiring lock: {resource_name}")
        while True:
            attempts += 1
            marker = LockMarker(
                resource_name=resource_name,
                holder_token=self._holder_token(),
                created_at=datetime.now(),
            )
            try:
                if self._try_create(name, marker):
                    logger.info(
                        f"Worker {self._worker_id} acquired lock: {resource_name} "
                        f"(attempts={attempts})"
                    )
                    return marker
            except SandboxCommandError as e:
                logger.warning(f"Lock attempt for {resource_name} could not run: {e}")

            remaining = deadline - self._clock()
            if remaining <= 0:
                holder = self.read_marker(resource_name)
                logger.error(
                    f"Worker {self._worker_id} timed out on lock {resource_name} "
                    f"after {attempts} attempts"
                )
                raise LockTimeoutError(
                    resource_name,
                    max_wait,
                    holder.holder_token if holder else None,
                )
            logger.debug(f"Lock {resource_name} busy, retrying in {poll_interval}s")
            self._sleep(min(poll_interval, remaining))

    def release(self, resource_name: str) -> bool:
        try:
            removed = self._delete(marker_file_name(resource_name))
        except SandboxCommandError as e:
            logger.error(f"Worker {self._worker_id} could not release lock {resource_name}: {e}")
            return False
        if removed:
            logger.info(f"Worker {self._worker_id} released lock: {resource_name}")
        else:
            logger.info(f"Lock {resource_name} was already released or didn't exist")
        return removed

    def is_locked(self, resource_name: str) -> bool:
        return self._exists(marker_file_name(resource_name))

    def read_marker(self, resource_name: str) -> Optional[LockMarker]:
        try:
            raw = self._read(marker_file_name(resource_name))
        except SandboxCommandError as e:
            logger.debug(f"Could not read marker for {resource_name}: {e}")
            return None
        if raw is None:
            return None
        return LockMarker.from_json(raw, resource_name)
