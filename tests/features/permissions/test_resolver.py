"""Tests for permission resolution."""

import pytest
from unittest.mock import AsyncMock

from orbis_access.core.exceptions import StoreError, ValidationError
from orbis_access.features.permissions.entities import SessionPrincipal
from orbis_access.features.permissions.services import PermissionResolver


class TestEditorScenario:
    """User U holds only the Editor role (tickets:create, tickets:edit)."""

    @pytest.mark.asyncio
    async def test_exact_permission(self, resolver):
        assert await resolver.has_permission("U", "tickets:create") is True
        assert await resolver.has_permission("U", "tickets:delete") is False

    @pytest.mark.asyncio
    async def test_any_of(self, resolver):
        assert await resolver.has_any_permission("U", ["tickets:delete", "tickets:edit"]) is True
        assert await resolver.has_any_permission("U", ["tickets:delete", "users:view"]) is False

    @pytest.mark.asyncio
    async def test_all_of(self, resolver):
        assert await resolver.has_all_permissions("U", ["tickets:delete", "tickets:edit"]) is False
        assert await resolver.has_all_permissions("U", ["tickets:create", "tickets:edit"]) is True


class TestWildcards:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("permission", ["tickets:delete", "users:view", "billing:refund", "servers:*"])
    async def test_global_wildcard_grants_everything(self, resolver, permission):
        assert await resolver.has_permission("root", permission) is True

    @pytest.mark.asyncio
    async def test_resource_wildcard(self, resolver):
        assert await resolver.has_permission("ops", "servers:view") is True
        assert await resolver.has_permission("ops", "users:view") is False

    @pytest.mark.asyncio
    async def test_admin_predicates(self, resolver):
        assert await resolver.is_admin("admin") is True
        assert await resolver.is_super_admin("admin") is False
        assert await resolver.is_admin("root") is True
        assert await resolver.is_super_admin("root") is True
        assert await resolver.is_admin("U") is False

    @pytest.mark.asyncio
    async def test_admin_predicates_default_to_session_principal(self, resolver):
        assert await resolver.is_admin() is True


class TestEmptyRequirements:

    @pytest.mark.asyncio
    async def test_empty_lists_are_denied(self, resolver):
        assert await resolver.has_any_permission("root", []) is False
        assert await resolver.has_all_permissions("root", []) is False


class TestFailClosed:

    @pytest.fixture
    def failing_resolver(self, cache):
        store = AsyncMock()
        store.load_user_permission_codes.side_effect = StoreError("database unavailable")
        store.get_user_roles.side_effect = StoreError("database unavailable")
        return PermissionResolver(store, cache)

    @pytest.mark.asyncio
    async def test_store_error_denies(self, failing_resolver, cache):
        assert await failing_resolver.has_permission("root", "tickets:create") is False
        assert await failing_resolver.is_super_admin("root") is False
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_store_error_gives_empty_set(self, failing_resolver):
        grants = await failing_resolver.get_permission_set("root")
        assert grants.codes() == []

    @pytest.mark.asyncio
    async def test_store_error_denies_role_check(self, failing_resolver):
        assert await failing_resolver.has_role("root", "SuperAdmin") is False

    @pytest.mark.asyncio
    async def test_unknown_principal_denied(self, resolver):
        assert await resolver.has_permission("nobody", "tickets:create") is False

    @pytest.mark.asyncio
    async def test_missing_principal_raises(self, store, cache):
        resolver = PermissionResolver(store, cache, SessionPrincipal())
        with pytest.raises(ValidationError):
            await resolver.has_permission(None, "tickets:create")

    @pytest.mark.asyncio
    async def test_blank_principal_raises(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.has_permission("  ", "tickets:create")

    @pytest.mark.asyncio
    async def test_malformed_permission_raises(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.has_permission("U", "tickets")


class TestCaching:

    @pytest.mark.asyncio
    async def test_loaded_once_per_ttl(self, cache, clock):
        store = AsyncMock()
        store.load_user_permission_codes.return_value = ["tickets:edit"]
        resolver = PermissionResolver(store, cache)

        await resolver.has_permission("U", "tickets:edit")
        await resolver.has_permission("U", "tickets:create")
        assert store.load_user_permission_codes.await_count == 1

        clock.advance(301)
        await resolver.has_permission("U", "tickets:edit")
        assert store.load_user_permission_codes.await_count == 2

    @pytest.mark.asyncio
    async def test_out_of_band_change_visible_after_ttl(self, resolver, store, clock):
        assert await resolver.has_permission("U", "tickets:edit") is True

        store.user_roles = [ur for ur in store.user_roles if ur.user_id != "U"]
        assert await resolver.has_permission("U", "tickets:edit") is True

        clock.advance(300)
        assert await resolver.has_permission("U", "tickets:edit") is False

    @pytest.mark.asyncio
    async def test_out_of_band_change_visible_after_invalidation(self, resolver, store, cache):
        assert await resolver.has_permission("U", "tickets:edit") is True

        store.user_roles = [ur for ur in store.user_roles if ur.user_id != "U"]
        cache.invalidate("U")

        assert await resolver.has_permission("U", "tickets:edit") is False


class TestHasRole:

    @pytest.mark.asyncio
    async def test_role_membership(self, resolver):
        assert await resolver.has_role("U", "Editor") is True
        assert await resolver.has_role("U", "Admin") is False
