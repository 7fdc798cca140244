"""Sandbox command execution (docker exec into the shared container)."""

from .executor import CommandResult, SandboxCommandExecutor

__all__ = [
    "CommandResult",
    "SandboxCommandExecutor",
]
