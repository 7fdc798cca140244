"""
TFP Testing Utilities

Usage:
    from tfp.testing import create_testing_session, standard_user_key
"""

from tfp.testing.fixtures import (
    DEFAULT_TESTING_LOCK_DIR,
    create_testing_session,
    standard_user_key,
    standard_group_key,
)

__all__ = [
    "DEFAULT_TESTING_LOCK_DIR",
    "create_testing_session",
    "standard_user_key",
    "standard_group_key",
]
