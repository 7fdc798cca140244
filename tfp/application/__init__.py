"""Application layer: generator, registry, engine, sessions and factories."""

from .services import (
    IdentityGenerator,
    FixtureRegistry,
    ProvisioningEngine,
)
from .session import ProvisioningSession
from .factories import (
    FixtureStoreFactory,
    LockManagerFactory,
    ProvisioningSessionFactory,
)

__all__ = [
    "IdentityGenerator",
    "FixtureRegistry",
    "ProvisioningEngine",
    "ProvisioningSession",
    "FixtureStoreFactory",
    "LockManagerFactory",
    "ProvisioningSessionFactory",
]
