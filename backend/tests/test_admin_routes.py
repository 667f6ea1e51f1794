"""
Admin authentication and refresh controller tests.
"""

from datetime import timedelta

import pytest

from catalog_app import create_app
from catalog_app.services import refresh_service
from catalog_app.services.auth_service import (
    AdminSessionStore,
    PasswordValidationError,
    resolve_admin_password_hash,
    validate_password_strength,
    verify_password,
)
from catalog_app.validation import RefreshInProgressError, ValidationError

from .conftest import ADMIN_PASSWORD, admin_headers, bearer_headers


class TestAdminLogin:
    def test_login_issues_token(self, client):
        response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 200
        body = response.get_json()
        assert len(body["token"]) == 64
        assert body["expiresAt"].endswith("Z")

    def test_wrong_password(self, client):
        response = client.post("/api/admin/login", json={"password": "nope"})
        assert response.status_code == 401
        assert "token" not in response.get_json()

    def test_token_authorizes_admin_routes(self, client):
        token = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD}).get_json()["token"]
        assert client.post("/api/admin/refresh", headers=bearer_headers(token)).status_code == 200
        assert client.post("/api/admin/refresh", headers=bearer_headers("forged")).status_code == 401

    def test_logout_revokes_token(self, client):
        token = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD}).get_json()["token"]
        response = client.post("/api/admin/logout", headers=bearer_headers(token))
        assert response.get_json() == {"ok": True, "revoked": True}
        assert client.post("/api/admin/refresh", headers=bearer_headers(token)).status_code == 401

    def test_admin_routes_closed_without_configured_password(self, test_config, gateway):
        test_config["ADMIN_PASSWORD_HASH"] = ""
        app = create_app(test_config, gateway=gateway)
        client = app.test_client()
        assert client.post("/api/admin/refresh", headers=admin_headers("")).status_code == 401
        assert client.post("/api/admin/login", json={"password": ""}).status_code == 401


class TestAuthService:
    def test_verify_password(self, admin_password_hash):
        assert verify_password(ADMIN_PASSWORD, admin_password_hash)
        assert not verify_password("warehouse2024", admin_password_hash)
        assert not verify_password(ADMIN_PASSWORD, "not-a-bcrypt-hash")
        assert not verify_password("", admin_password_hash)

    def test_plaintext_password_is_hashed(self):
        hashed = resolve_admin_password_hash({"ADMIN_PASSWORD_HASH": "", "ADMIN_PASSWORD": "Shelf4321"})
        assert hashed.startswith("$2")
        assert verify_password("Shelf4321", hashed)

    def test_configured_hash_preferred(self, admin_password_hash):
        config = {"ADMIN_PASSWORD_HASH": admin_password_hash, "ADMIN_PASSWORD": "ignored1"}
        assert resolve_admin_password_hash(config) == admin_password_hash

    def test_expired_session(self, app):
        store = AdminSessionStore(hours=1)
        token, session = store.create()
        assert store.validate(token)
        session.expires_at -= timedelta(hours=2)
        assert not store.validate(token)
        assert len(store) == 0

    @pytest.mark.parametrize("password", ["short1", "onlyletters", "12345678"])
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordValidationError):
            validate_password_strength(password)


class TestRefresh:
    def test_requires_admin(self, client):
        assert client.post("/api/admin/refresh").status_code == 401

    def test_refresh_all(self, client, state, gateway):
        gateway.sheet("item_master").append(["NEW-1", "Nova", "Nova Parka", "Outer", "Parkas", "", ""])
        response = client.post("/api/admin/refresh", headers=admin_headers())
        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["type"] == "all"
        assert body["productsCount"] == 4
        assert body["imagesCount"] == 2
        assert body["inventoryCount"] == 2
        assert body["pendingCount"] == 1
        assert body["lastRefreshTime"].endswith("Z")
        assert state.find_product("NEW-1") is not None

    def test_images_only_refresh_updates_image_urls(self, client, state, gateway):
        gateway.images.append({"id": "file-abc-2", "name": "ABC-2.webp"})
        gateway.sheet("item_master").append(["NEW-1", "Nova", "Nova Parka", "", "", "", ""])
        before = state.last_refresh_time

        client.post("/api/admin/refresh?type=images", headers=admin_headers())

        assert state.find_product("ABC-2").image_url == "/api/images/ABC-2"
        # catalog sheet not reloaded, full-refresh time untouched
        assert state.find_product("NEW-1") is None
        assert state.last_refresh_time == before

    def test_inventory_only_refresh(self, client, state, gateway):
        gateway.sheet("Inventory", "inventory-spreadsheet").append(["ABC-2", "Main", "7", "1", "6"])
        client.post("/api/admin/refresh?type=inventory", headers=admin_headers())
        assert [r.available for r in state.find_product("ABC-2").inventory] == [6]

    def test_pending_only_refresh(self, client, state, gateway):
        gateway.sheet("item_pending").append(["PEN-2", "Zeta", "Zeta Beanie", "", "", "", "", "", "", ""])
        body = client.post("/api/admin/refresh?type=pending", headers=admin_headers()).get_json()
        assert body["pendingCount"] == 2

    def test_unknown_type(self, client):
        response = client.post("/api/admin/refresh?type=everything", headers=admin_headers())
        assert response.status_code == 400

    def test_concurrent_refresh_rejected(self, client, state):
        assert state.try_begin_refresh()
        try:
            response = client.post("/api/admin/refresh", headers=admin_headers())
            assert response.status_code == 409
            assert "in progress" in response.get_json()["error"]
            assert client.get("/api/admin/refresh-status").get_json()["isRefreshing"] is True
        finally:
            state.end_refresh()
        assert client.post("/api/admin/refresh", headers=admin_headers()).status_code == 200

    def test_flag_released_after_failure(self, client, state, gateway):
        gateway.fail("read_values")
        response = client.post("/api/admin/refresh?type=products", headers=admin_headers())
        assert response.status_code == 502
        assert not state.is_refreshing
        assert len(state.products) == 3

    def test_refresh_status(self, client):
        body = client.get("/api/admin/refresh-status").get_json()
        assert body["isRefreshing"] is False
        assert body["productsCount"] == 3
        assert body["lastRefreshTime"].endswith("Z")

    def test_service_errors(self, app, state):
        with pytest.raises(ValidationError):
            refresh_service.refresh("bogus")
        state.try_begin_refresh()
        try:
            with pytest.raises(RefreshInProgressError):
                refresh_service.refresh("all")
        finally:
            state.end_refresh()
