"""
Test Fixture Provisioning (tfp).

Creates isolated, collision-free accounts and groups in a shared store
while many parallel test workers run concurrently.

Usage:
    from tfp import ProvisioningConfig, ProvisioningSessionFactory

    session = ProvisioningSessionFactory.create("billing", ProvisioningConfig.from_env())
    session.define_identity("owner", "owner", "Owner")
    session.define_group("team", "Team", "owner")
    session.provision_all()
"""

__version__ = "0.1.0"

from tfp.config import (
    BackoffPolicy,
    LockConfig,
    ProvisioningConfig,
    RetryConfig,
    configure_logging,
)
from tfp.domain.errors import (
    ProvisioningError,
    UndefinedReferenceError,
    NotFoundError,
    StoreError,
    TransientStoreError,
    MissingRecordError,
    LockError,
    LockTimeoutError,
    GroupCreationError,
    VerificationFailedError,
    GroupBatchError,
    SandboxCommandError,
)
from tfp.domain.models import (
    MemberRole,
    TestIdentity,
    TestGroup,
    GroupMember,
    LockMarker,
    GroupSnapshot,
    MembershipRecord,
    IdentityBatchResult,
    GroupProvisioningResult,
)
from tfp.application import (
    IdentityGenerator,
    FixtureRegistry,
    ProvisioningEngine,
    ProvisioningSession,
    ProvisioningSessionFactory,
)

__all__ = [
    "__version__",
    # Config
    "BackoffPolicy",
    "LockConfig",
    "ProvisioningConfig",
    "RetryConfig",
    "configure_logging",
    # Errors
    "ProvisioningError",
    "UndefinedReferenceError",
    "NotFoundError",
    "StoreError",
    "TransientStoreError",
    "MissingRecordError",
    "LockError",
    "LockTimeoutError",
    "GroupCreationError",
    "VerificationFailedError",
    "GroupBatchError",
    "SandboxCommandError",
    # Models
    "MemberRole",
    "TestIdentity",
    "TestGroup",
    "GroupMember",
    "LockMarker",
    "GroupSnapshot",
    "MembershipRecord",
    "IdentityBatchResult",
    "GroupProvisioningResult",
    # Application
    "IdentityGenerator",
    "FixtureRegistry",
    "ProvisioningEngine",
    "ProvisioningSession",
    "ProvisioningSessionFactory",
]
