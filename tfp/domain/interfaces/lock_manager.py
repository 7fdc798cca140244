"""
Lock Manager Interface.

Advisory, marker-based mutual exclusion shared by independent worker
processes. The only correctness-critical primitive is an atomic
create-if-absent of the marker; implementations must never emulate it with
an existence check followed by a create.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from tfp.domain.models import LockMarker


class ILockManager(ABC):
    """
    Bounded-wait exclusive lock over named resources.

    Contract:
    - acquire() returns as soon as the marker is created exclusively
    - acquire() raises LockTimeoutError once max_wait has elapsed
    - release() is idempotent: releasing a free resource is not an error
    """

    @abstractmethod
    def acquire(
        self,
        resource_name: str,
        max_wait: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> LockMarker:
        """
        Acquire the lock for a resource.

        Args:
            resource_name: Logical resource name
            max_wait: Wall-clock ceiling in seconds (implementation default if None)
            poll_interval: Sleep between attempts in seconds

        Returns:
            The marker now held by this worker

        Raises:
            LockTimeoutError: If the marker stayed present for max_wait
        """
        pass

    @abstractmethod
    def release(self, resource_name: str) -> bool:
        """
        Delete the marker.

        Returns:
            True if a marker was removed, False if it was already absent or could
            not be removed (the failure is logged, never raised)
        """
        pass

    @abstractmethod
    def is_locked(self, resource_name: str) -> bool:
        """Whether the marker exists."""
        pass

    @abstractmethod
    def read_marker(self, resource_name: str) -> Optional[LockMarker]:
        """Read the current marker, None if the resource is free."""
        pass

    @contextmanager
    def hold(
        self,
        resource_name: str,
        max_wait: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> Iterator[LockMarker]:
        """
        Hold the lock for the duration of a with-block.

        Release runs unconditionally once the lock was acquired.
        """
        marker = self.acquire(resource_name, max_wait=max_wait, poll_interval=poll_interval)
        try:
            yield marker
        finally:
            self.release(resource_name)
