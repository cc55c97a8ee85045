"""
Tests for the token registry and the authorization gate.

Core principle: a token authorizes at most one operation.
"""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from rhyzome.auth import AuthorizationGate, Permission, TokenRegistry


# =============================================================================
# Issuance
# =============================================================================


class TestIssue:
    def test_new_token_is_unused(self, registry):
        token = registry.issue({"create_microblog"})

        assert token in registry
        assert registry.is_used(token) is False

    def test_ids_are_unique(self, registry):
        tokens = {registry.issue({"p"}) for _ in range(500)}

        assert len(tokens) == 500
        assert len(registry) == 500

    def test_ids_are_url_safe_and_long(self, registry):
        token = registry.issue({"p"})

        assert len(token) >= 32
        assert all(c.isalnum() or c in "-_" for c in token)

    def test_accepts_enum_permissions(self, registry):
        token = registry.issue([Permission.CREATE_MICROBLOG])

        assert registry.validate_and_consume(token, "create_microblog")

    def test_is_used_for_unknown_token(self, registry):
        assert registry.is_used("nope") is None


# =============================================================================
# Validate and Consume
# =============================================================================


class TestValidateAndConsume:
    def test_single_use(self, registry):
        token = registry.issue({"P"})

        assert registry.validate_and_consume(token, "P") is True
        assert registry.validate_and_consume(token, "P") is False
        assert registry.is_used(token) is True

    def test_used_token_rejected_for_any_permission(self, registry):
        token = registry.issue({"A", "B"})
        assert registry.validate_and_consume(token, "A")

        assert not registry.validate_and_consume(token, "A")
        assert not registry.validate_and_consume(token, "B")
        assert not registry.validate_and_consume(token, "C")

    def test_permission_mismatch_leaves_token_unused(self, registry):
        token = registry.issue({"A"})

        assert registry.validate_and_consume(token, "B") is False
        assert registry.is_used(token) is False
        assert registry.validate_and_consume(token, "A") is True

    def test_unknown_token(self, registry):
        assert registry.validate_and_consume("forged", "A") is False
        assert "forged" not in registry

    def test_empty_permission_set_authorizes_nothing(self, registry):
        token = registry.issue(set())

        assert registry.validate_and_consume(token, "") is False
        assert registry.is_used(token) is False

    def test_enum_and_string_permissions_match(self, registry):
        token = registry.issue({"delete_relation"})

        assert registry.validate_and_consume(token, Permission.DELETE_RELATION)

    def test_tokens_are_independent(self, registry):
        first = registry.issue({"P"})
        second = registry.issue({"P"})

        assert registry.validate_and_consume(first, "P")
        assert registry.validate_and_consume(second, "P")


# =============================================================================
# Concurrency
# =============================================================================


class TestConcurrency:
    def test_threads_race_for_one_token(self, registry):
        token = registry.issue({"P"})
        workers = 32
        barrier = threading.Barrier(workers, timeout=10)

        def attempt():
            barrier.wait()
            return registry.validate_and_consume(token, "P")

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: attempt(), range(workers)))

        assert results.count(True) == 1
        assert results.count(False) == workers - 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_race_for_one_token(self, registry):
        token = registry.issue({"P"})

        results = await asyncio.gather(*[
            asyncio.to_thread(registry.validate_and_consume, token, "P")
            for _ in range(50)
        ])

        assert sum(results) == 1

    def test_many_tokens_each_spent_once(self, registry):
        tokens = [registry.issue({"P"}) for _ in range(20)]
        attempts = tokens * 5

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda t: (t, registry.validate_and_consume(t, "P")), attempts))

        for token in tokens:
            assert sum(ok for t, ok in results if t == token) == 1


# =============================================================================
# Authorization Gate
# =============================================================================


class TestAuthorizationGate:
    def test_delegates_and_consumes(self, registry, gate):
        token = registry.issue({Permission.CREATE_MICROBLOG})

        assert gate.authorize(token, Permission.CREATE_MICROBLOG) is True
        assert gate.authorize(token, Permission.CREATE_MICROBLOG) is False

    def test_wrong_permission(self, registry, gate):
        token = registry.issue({Permission.CREATE_MICROBLOG})

        assert gate.authorize(token, Permission.DELETE_MICROBLOG) is False
        assert registry.is_used(token) is False

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, gate, token):
        assert gate.authorize(token, Permission.CREATE_RELATION) is False

    def test_shares_registry_state(self, registry):
        token = registry.issue({"P"})
        one, two = AuthorizationGate(registry), AuthorizationGate(registry)

        assert one.authorize(token, "P")
        assert not two.authorize(token, "P")
