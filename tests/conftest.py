"""Pytest configuration and fixtures for orbis-access tests."""

import pytest

from orbis_access.config import AccessSettings
from orbis_access.features.permissions.entities import SessionPrincipal
from orbis_access.features.permissions.repositories import MemoryPermissionStore
from orbis_access.features.permissions.services import (
    AuditLogger,
    PermissionCache,
    PermissionResolver,
    RoleManager,
    create_permission_service,
)


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return AccessSettings(_env_file=None)


@pytest.fixture
def store():
    """
    Seeded in-memory store.

    Roles:
        Editor (custom): tickets:create, tickets:edit
        Operator (custom): servers:*
        Admin (system): admin:*
        SuperAdmin (system): *:*

    Users: U -> Editor, ops -> Operator, admin -> Admin, root -> SuperAdmin
    """
    store = MemoryPermissionStore()
    store.seed_permission("perm-tickets-create", "tickets:create", "Create tickets")
    store.seed_permission("perm-tickets-edit", "tickets:edit", "Edit tickets")
    store.seed_permission("perm-tickets-delete", "tickets:delete", "Delete tickets")
    store.seed_permission("perm-servers-view", "servers:view", "View servers")
    store.seed_permission("perm-users-view", "users:view", "View users")
    store.seed_permission("perm-servers-all", "servers:*", "Manage servers")
    store.seed_permission("perm-admin-all", "admin:*", "Administration")
    store.seed_permission("perm-all", "*:*", "Everything", category="system")

    store.seed_role("role-editor", "Editor", level=30,
                    permission_ids=["perm-tickets-create", "perm-tickets-edit"])
    store.seed_role("role-operator", "Operator", level=40, permission_ids=["perm-servers-all"])
    store.seed_role("role-admin", "Admin", level=90, is_system=True, permission_ids=["perm-admin-all"])
    store.seed_role("role-super", "SuperAdmin", level=100, is_system=True, permission_ids=["perm-all"])

    store.seed_user_roles("U", ["role-editor"])
    store.seed_user_roles("ops", ["role-operator"])
    store.seed_user_roles("admin", ["role-admin"])
    store.seed_user_roles("root", ["role-super"])
    return store


@pytest.fixture
def principal():
    """Session principal acting as the administrator."""
    return SessionPrincipal("admin")


@pytest.fixture
def cache(clock):
    return PermissionCache(ttl=300, clock=clock)


@pytest.fixture
def resolver(store, cache, principal):
    return PermissionResolver(store, cache, principal)


@pytest.fixture
def audit_logger(store, principal, settings):
    return AuditLogger(store, principal_provider=principal, origin=lambda: "10.0.0.7", settings=settings)


@pytest.fixture
def role_manager(store, cache, audit_logger, principal, settings):
    return RoleManager(store, cache, audit_logger, principal, settings)


@pytest.fixture
def service(store, principal, settings, clock):
    return create_permission_service(
        store,
        principal_provider=principal,
        settings=settings,
        clock=clock,
        origin=lambda: "10.0.0.7",
    )
