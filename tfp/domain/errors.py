"""
Provisioning Exceptions.

Single hierarchy for every failure the provisioning layer can surface.

Policy:
- StoreError subclasses are retried locally (bounded) by the engine
- LockTimeoutError and VerificationFailedError are terminal for a fixture
- UndefinedReferenceError is a programmer error raised at definition time
"""

from typing import Dict, Optional


class ProvisioningError(Exception):
    """Base exception for the provisioning layer."""
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Registry Errors
# ═══════════════════════════════════════════════════════════════════════════════


class UndefinedReferenceError(ProvisioningError):
    """Raised when a group references an identity key that was never defined."""

    def __init__(self, key: str, role: str = "identity"):
        self.key = key
        self.role = role
        super().__init__(
            f"{role.capitalize()} '{key}' must be defined with define_identity() "
            f"before it is referenced by a group"
        )


class NotFoundError(ProvisioningError, KeyError):
    """Raised when a registry lookup misses."""

    def __init__(self, key: str, kind: str = "fixture"):
        self.key = key
        self.kind = kind
        self.message = f"{kind.capitalize()} '{key}' not found. Define it first."
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Store Errors
# ═══════════════════════════════════════════════════════════════════════════════


class StoreError(ProvisioningError):
    """Raised when a store operation fails."""
    pass


class TransientStoreError(StoreError):
    """Retryable store failure (connection dropped, lock wait, pool timeout)."""
    pass


class MissingRecordError(StoreError):
    """A referenced row is not (yet) visible in the store."""

    def __init__(self, entity: str, record_id: str):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found in store")


# ═══════════════════════════════════════════════════════════════════════════════
# Lock Errors
# ═══════════════════════════════════════════════════════════════════════════════


class LockError(ProvisioningError):
    """Base exception for lock manager failures."""
    pass


class LockTimeoutError(LockError):
    """Raised when a lock cannot be acquired within its wall-clock ceiling."""

    def __init__(self, resource_name: str, max_wait: float, holder: Optional[str] = None):
        self.resource_name = resource_name
        self.max_wait = max_wait
        self.holder = holder
        message = (
            f"Failed to acquire lock '{resource_name}' within {max_wait:.1f}s "
            f"(contention or crashed holder)"
        )
        if holder:
            message += f"; held by {holder}"
        super().__init__(message)


# ═══════════════════════════════════════════════════════════════════════════════
# Provisioning Errors
# ═══════════════════════════════════════════════════════════════════════════════


class GroupCreationError(ProvisioningError):
    """Raised when group creation exhausts its retry budget."""

    def __init__(self, group_name: str, owner_id: str, attempts: int, reason: str = ""):
        self.group_name = group_name
        self.owner_id = owner_id
        self.attempts = attempts
        message = (
            f"Failed to create group '{group_name}' for owner '{owner_id}' "
            f"after {attempts} attempts"
        )
        if reason:
            message += f": {reason}"
        super().__init__(message)


class VerificationFailedError(ProvisioningError):
    """Raised when a written group never becomes visible through a read path."""

    def __init__(self, path: str, group_name: str, owner_id: str, attempts: int):
        self.path = path
        self.group_name = group_name
        self.owner_id = owner_id
        self.attempts = attempts
        super().__init__(
            f"Group verification failed on {path} path for '{group_name}' "
            f"(owner '{owner_id}') after {attempts} attempts"
        )


class GroupBatchError(ProvisioningError):
    """Raised after a batch when one or more groups failed to provision."""

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = dict(failures)
        summary = "; ".join(f"{key}: {err}" for key, err in self.failures.items())
        super().__init__(f"{len(self.failures)} group(s) failed to provision: {summary}")


# ═══════════════════════════════════════════════════════════════════════════════
# Sandbox Errors
# ═══════════════════════════════════════════════════════════════════════════════


class SandboxCommandError(ProvisioningError):
    """Raised when a sandbox command cannot be run or times out."""

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(f"{message}: {command}")
