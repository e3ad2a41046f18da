"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Cashiers are denied management operations (403)
- Managers manage inventory and see reports but not users or promotions
- Admins can do everything
"""

import pytest

from conftest import auth_headers


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/items"),
            ("POST", "/api/items"),
            ("GET", "/api/customers"),
            ("GET", "/api/promotions"),
            ("POST", "/api/register/checkout"),
            ("GET", "/api/transactions"),
            ("GET", "/api/dashboard/metrics"),
            ("GET", "/api/users"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token_rejected(self, client):
        resp = client.get("/api/items", headers=auth_headers("not-a-token"))
        assert resp.status_code == 401


# =============================================================================
# CASHIER DENIED MANAGEMENT OPERATIONS (403)
# =============================================================================


class TestCashierDenied:
    def test_cannot_create_item(self, client, cashier_headers):
        resp = client.post("/api/items", json={"name": "x"}, headers=cashier_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "MANAGE_INVENTORY"

    def test_cannot_adjust_stock(self, client, cashier_headers, seed):
        resp = client.post(f"/api/items/{seed['wine']}/adjust", json={"quantity": 50}, headers=cashier_headers)
        assert resp.status_code == 403

    def test_cannot_view_dashboard(self, client, cashier_headers):
        assert client.get("/api/dashboard/metrics", headers=cashier_headers).status_code == 403

    def test_cannot_manage_users(self, client, cashier_headers):
        assert client.get("/api/users", headers=cashier_headers).status_code == 403

    def test_cannot_create_promotion(self, client, cashier_headers):
        resp = client.post("/api/promotions", json={"name": "x"}, headers=cashier_headers)
        assert resp.status_code == 403

    def test_can_use_register_and_customers(self, client, cashier_headers, seed):
        assert client.get("/api/customers", headers=cashier_headers).status_code == 200
        assert client.get("/api/items", headers=cashier_headers).status_code == 200
        assert client.get("/api/transactions", headers=cashier_headers).status_code == 200
        assert client.get("/api/promotions", headers=cashier_headers).status_code == 200


class TestManagerAccess:
    def test_can_manage_inventory_and_reports(self, client, manager_headers, seed):
        resp = client.post(f"/api/items/{seed['wine']}/adjust", json={"quantity": 50}, headers=manager_headers)
        assert resp.status_code == 200
        assert client.get("/api/dashboard/metrics", headers=manager_headers).status_code == 200

    def test_cannot_manage_users_or_promotions(self, client, manager_headers, seed):
        assert client.get("/api/users", headers=manager_headers).status_code == 403
        resp = client.delete(f"/api/promotions/{seed['promotion']}", headers=manager_headers)
        assert resp.status_code == 403


class TestAdminAccess:
    def test_admin_reaches_everything(self, client, admin_headers, seed):
        for path in ("/api/users", "/api/dashboard/metrics", "/api/items", "/api/promotions"):
            assert client.get(path, headers=admin_headers).status_code == 200, path
