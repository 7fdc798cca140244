"""Marker-based lock managers."""

from .base import MarkerLockManager, marker_file_name
from .filesystem import FileLockManager
from .sandbox import SandboxLockManager

__all__ = [
    "MarkerLockManager",
    "marker_file_name",
    "FileLockManager",
    "SandboxLockManager",
]
