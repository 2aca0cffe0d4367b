"""Tests for the FastAPI permission dependency and exception handlers."""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from orbis_access.core.exceptions import ProtectedResourceError, StoreError
from orbis_access.interfaces import CheckPermission, header_principal, register_exception_handlers

SESSION_HEADER = "X-Test-Session"


@pytest.fixture
def app(service):
    app = FastAPI()
    register_exception_handlers(app)

    require_edit = CheckPermission(service, ["tickets:edit"])
    require_any = CheckPermission(service, ["tickets:delete", "servers:view"], any_of=True)
    require_both = CheckPermission(service, ["tickets:create", "tickets:delete"])
    require_gateway_user = CheckPermission(service, "tickets:edit", principal=header_principal())

    @app.middleware("http")
    async def identity(request: Request, call_next):
        # Stands in for the authentication layer resolving a session.
        request.state.user_id = request.headers.get(SESSION_HEADER)
        return await call_next(request)

    @app.get("/tickets")
    async def edit_tickets(user_id: str = Depends(require_edit)):
        return {"user_id": user_id}

    @app.get("/any")
    async def any_route(user_id: str = Depends(require_any)):
        return {"user_id": user_id}

    @app.get("/both")
    async def both_route(user_id: str = Depends(require_both)):
        return {"user_id": user_id}

    @app.get("/gateway")
    async def gateway_route(user_id: str = Depends(require_gateway_user)):
        return {"user_id": user_id}

    @app.delete("/roles/system")
    async def delete_system_role():
        raise ProtectedResourceError("Cannot delete system role: Admin", details={"role_id": "role-admin"})

    @app.get("/unavailable")
    async def unavailable():
        raise StoreError("database unavailable")

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def session(user_id):
    return {SESSION_HEADER: user_id}


class TestCheckPermission:

    def test_missing_principal(self, client):
        response = client.get("/tickets")
        assert response.status_code == 401

    def test_allowed(self, client):
        response = client.get("/tickets", headers=session("U"))
        assert response.status_code == 200
        assert response.json() == {"user_id": "U"}

    def test_denied(self, client):
        response = client.get("/tickets", headers=session("ops"))
        assert response.status_code == 403
        assert "tickets:edit" in response.json()["detail"]

    def test_any_of(self, client):
        assert client.get("/any", headers=session("ops")).status_code == 200
        assert client.get("/any", headers=session("U")).status_code == 403

    def test_all_of(self, client):
        assert client.get("/both", headers=session("U")).status_code == 403
        assert client.get("/both", headers=session("root")).status_code == 200

    def test_principal_header_is_not_trusted_by_default(self, client):
        response = client.get("/both", headers={"X-User-Id": "root"})
        assert response.status_code == 401

    def test_session_identity_wins_over_principal_header(self, client):
        response = client.get("/tickets", headers={**session("U"), "X-User-Id": "root"})
        assert response.json() == {"user_id": "U"}

    def test_header_extractor_is_opt_in(self, client):
        assert client.get("/gateway", headers={"X-User-Id": "U"}).status_code == 200
        assert client.get("/gateway", headers=session("U")).status_code == 401


class TestExceptionHandlers:

    def test_protected_resource(self, client):
        response = client.delete("/roles/system")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ProtectedResourceError"
        assert response.json()["error"]["details"] == {"role_id": "role-admin"}

    def test_store_error(self, client):
        response = client.get("/unavailable")

        assert response.status_code == 503
        assert response.json()["error"]["message"] == "database unavailable"
