"""Application services for fixture provisioning."""

from .identity_generator import IdentityGenerator, generate, new_run_id
from .fixture_registry import FixtureRegistry
from .provisioning_engine import ProvisioningEngine

__all__ = [
    "IdentityGenerator",
    "generate",
    "new_run_id",
    "FixtureRegistry",
    "ProvisioningEngine",
]
