"""Fixture store (storage-client boundary) implementations."""

from .fixture_store import UnitOfWorkFixtureStore, translate_store_errors

__all__ = [
    "UnitOfWorkFixtureStore",
    "translate_store_errors",
]
