"""
Tests for IdentityGenerator.

Tests:
- Run token format and randomness
- Determinism within a run, distinctness across runs
- Id, email and group name formats
- Store name capping
"""

import re

import pytest

from tfp.application.services.identity_generator import (
    IdentityGenerator,
    STORE_NAME_MAX_LENGTH,
    cap_store_name,
    generate,
    new_run_id,
    slug,
)


class TestRunId:
    """Tests for run tokens."""

    def test_format(self):
        assert re.fullmatch(r"[0-9a-z]{8}", new_run_id())

    def test_distinct(self):
        assert len({new_run_id() for _ in range(200)}) == 200


class TestIdentityGenerator:
    """Tests for name formats."""

    def test_generate_format(self):
        gen = IdentityGenerator("billing", run_id="abc12345")
        assert gen.generate("admin") == "admin-billing-abc12345"

    def test_deterministic_within_run(self):
        gen = IdentityGenerator("billing")
        assert gen.generate("admin") == gen.generate("admin")
        assert gen.email("admin") == gen.email("admin")

    def test_distinct_across_runs(self):
        first = IdentityGenerator("billing")
        second = IdentityGenerator("billing")
        assert first.run_id != second.run_id
        assert first.generate("admin") != second.generate("admin")

    def test_distinct_across_namespaces(self):
        assert (
            IdentityGenerator("a", run_id="r1").generate("admin")
            != IdentityGenerator("b", run_id="r1").generate("admin")
        )

    def test_email_format(self):
        gen = IdentityGenerator("billing", run_id="abc12345")
        assert gen.email("admin") == "admin.billing.abc12345@tfp.test"

    def test_custom_email_domain(self):
        gen = IdentityGenerator("billing", run_id="abc12345", email_domain="example.org")
        assert gen.email("admin").endswith("@example.org")

    def test_group_name(self):
        gen = IdentityGenerator("billing", run_id="abc12345")
        assert gen.group_name("Team") == "Team billing abc12345"

    def test_inputs_are_slugged(self):
        gen = IdentityGenerator("my suite/1", run_id="abc12345")
        assert gen.namespace == "my-suite-1"
        assert gen.generate("first admin") == "first-admin-my-suite-1-abc12345"
        assert " " not in gen.email("first admin")

    def test_module_level_generate(self):
        assert generate("billing", "admin", "abc12345") == "admin-billing-abc12345"


class TestSlug:
    """Tests for slugging."""

    def test_keeps_safe_characters(self):
        assert slug("a_b.c-d") == "a_b.c-d"

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            slug("  //  ")


class TestStoreName:
    """Tests for store name capping."""

    def test_short_name_unchanged(self):
        gen = IdentityGenerator("billing", run_id="abc12345")
        assert gen.group_store_name("Team", "owner-1") == "Team-owner-1"

    def test_long_name_capped(self):
        name = cap_store_name("x" * 100)
        assert len(name) == STORE_NAME_MAX_LENGTH

    def test_capping_keeps_long_names_distinct(self):
        prefix = "Team " + "y" * 80
        first = cap_store_name(f"{prefix}-owner-a")
        second = cap_store_name(f"{prefix}-owner-b")
        assert first != second
        assert len(first) == len(second) == STORE_NAME_MAX_LENGTH

    def test_capping_is_stable(self):
        assert cap_store_name("z" * 90) == cap_store_name("z" * 90)
