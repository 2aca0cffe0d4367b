"""Tests for permission entities."""

import pytest

from orbis_access.core.exceptions import RoleNotFoundError, ValidationError
from orbis_access.features.permissions.entities import (
    ExactGrant,
    GlobalWildcardGrant,
    GrantSet,
    OperationResult,
    PermissionCode,
    ResourceWildcardGrant,
    Role,
    RoleDraft,
    ensure_id_list,
    parse_grant,
)


class TestPermissionCode:
    """Test permission code validation."""

    def test_valid_code(self):
        code = PermissionCode("tickets:create")
        assert code.resource == "tickets"
        assert code.action == "create"
        assert not code.is_wildcard
        assert str(code) == "tickets:create"

    def test_wildcards(self):
        assert PermissionCode("servers:*").is_wildcard
        assert PermissionCode("*:*").resource == "*"
        assert PermissionCode.of("users", "view") == PermissionCode("users:view")

    @pytest.mark.parametrize("value", [
        "tickets",
        "tickets:",
        ":create",
        "a:b:c",
        "tick*:create",
        "tickets:cre*",
        "*:create",
        "",
        None,
    ])
    def test_malformed_codes_rejected(self, value):
        with pytest.raises(ValidationError):
            PermissionCode(value)


class TestGrants:
    """Test grant parsing and matching."""

    def test_parse_variants(self):
        assert parse_grant("tickets:edit") == ExactGrant("tickets", "edit")
        assert parse_grant("servers:*") == ResourceWildcardGrant("servers")
        assert parse_grant("*:*") == GlobalWildcardGrant()
        assert parse_grant("not-a-permission") is None

    def test_exact_match(self):
        grants = GrantSet.from_codes(["tickets:create", "tickets:edit"])
        assert grants.allows(PermissionCode("tickets:create"))
        assert not grants.allows(PermissionCode("tickets:delete"))

    @pytest.mark.parametrize("required", ["tickets:create", "users:delete", "servers:*", "*:*"])
    def test_global_wildcard_allows_everything(self, required):
        grants = GrantSet.from_codes(["*:*"])
        assert grants.allows(PermissionCode(required))

    def test_resource_wildcard_is_scoped_to_resource(self):
        grants = GrantSet.from_codes(["servers:*"])
        assert grants.allows(PermissionCode("servers:view"))
        assert grants.allows(PermissionCode("servers:restart"))
        assert not grants.allows(PermissionCode("users:view"))

    def test_resource_wildcard_matches_whole_resource_only(self):
        grants = GrantSet.from_codes(["server:*"])
        assert not grants.allows(PermissionCode("servers:view"))

    def test_malformed_grants_are_ignored(self, caplog):
        grants = GrantSet.from_codes(["bogus", "tickets:edit", "*:create"])
        assert not grants.has_global
        assert grants.resource_wildcards == frozenset()
        assert grants.allows(PermissionCode("tickets:edit"))
        assert not grants.allows(PermissionCode("users:create"))
        assert "Ignoring malformed granted permission" in caplog.text

    def test_empty_set(self):
        grants = GrantSet.empty()
        assert len(grants) == 0
        assert grants.codes() == []
        assert not grants.allows(PermissionCode("tickets:create"))

    def test_codes_are_sorted(self):
        grants = GrantSet.from_codes(["users:view", "tickets:edit", "admin:*"])
        assert grants.codes() == ["admin:*", "tickets:edit", "users:view"]
        assert "tickets:edit" in grants


class TestRoleDraft:
    """Test role draft validation."""

    def test_from_camel_case_payload(self):
        draft = RoleDraft.from_dict({
            "name": "support",
            "displayName": "Support",
            "permissions": ["p1", "p2", "p1"],
        })
        assert draft.display_name == "Support"
        assert draft.permission_ids == ["p1", "p2"]

    def test_permissions_default_to_none(self):
        assert RoleDraft("support").permission_ids is None

    @pytest.mark.parametrize("name", ["", "   ", None, "x" * 101])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            RoleDraft(name)

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            RoleDraft("support", level="high")

    def test_role_deletable(self):
        assert Role("r1", "custom", "Custom").is_deletable()
        assert not Role("r2", "system", "System", is_system=True).is_deletable()


class TestEnsureIdList:

    def test_deduplicates_in_order(self):
        assert ensure_id_list(["b", "a", "b"], "ids") == ["b", "a"]

    def test_rejects_string(self):
        with pytest.raises(ValidationError):
            ensure_id_list("role-editor", "role_ids")

    def test_rejects_empty_member(self):
        with pytest.raises(ValidationError):
            ensure_id_list(["a", ""], "role_ids")


class TestOperationResult:

    def test_ok(self):
        result = OperationResult.ok(role_id="r1")
        assert result
        assert result.data == {"role_id": "r1"}
        assert result.error is None

    def test_fail(self):
        result = OperationResult.fail(RoleNotFoundError("r1"))
        assert not result
        assert result.error_code == "RoleNotFoundError"
        assert "r1" in result.error
        assert isinstance(result.exception, RoleNotFoundError)
