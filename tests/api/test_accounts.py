"""
Tests for account API endpoints.

These test the HTTP layer: status codes, response format
and error handling. Business logic is tested in
tests/services.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def seeded(client):
    client.post("/accounts/seed")
    return client


class TestSeed:

    def test_seed_once(self, client):
        assert client.post("/accounts/seed").json() == {"seeded": True}
        assert client.post("/accounts/seed").json() == {"seeded": False}

    def test_seeded_chart(self, seeded):
        accounts = {a["id"]: a for a in seeded.get("/accounts").json()}
        assert len(accounts) == 14
        assert Decimal(accounts["till_float"]["balance"]) == Decimal("150")
        assert accounts["pending_bills"]["type"] == "LIABILITY"


class TestCreateAccount:

    def test_create_account_returns_201(self, seeded):
        response = seeded.post("/accounts", json={
            "id": "petty_cash", "name": "Petty Cash", "type": "ASSET",
        })
        assert response.status_code == 201
        assert Decimal(response.json()["balance"]) == Decimal("0")

    def test_duplicate_id_returns_409(self, seeded):
        response = seeded.post("/accounts", json={
            "id": "till_float", "name": "Another Till", "type": "ASSET",
        })
        assert response.status_code == 409

    def test_invalid_type_returns_422(self, seeded):
        response = seeded.post("/accounts", json={
            "id": "x", "name": "X", "type": "SAVINGS",
        })
        assert response.status_code == 422


class TestGetAccount:

    def test_get_account(self, seeded):
        response = seeded.get("/accounts/business_bank")
        assert response.status_code == 200
        assert response.json()["name"] == "Business Bank"

    def test_unknown_account_returns_404(self, seeded):
        assert seeded.get("/accounts/nope").status_code == 404


class TestAdjust:

    def test_adjust_records_actor(self, seeded):
        response = seeded.post(
            "/accounts/till_float/adjust",
            json={"new_balance": "180", "reason": "Recount"},
            headers={"X-Actor-Id": "u_bob", "X-Actor-Name": "Bob"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["from_account_id"] == "equity_adjustments"
        assert Decimal(data["amount"]) == Decimal("30")
        assert data["created_by"] == "u_bob"

    def test_adjust_without_change_returns_null(self, seeded):
        response = seeded.post(
            "/accounts/till_float/adjust",
            json={"new_balance": "150", "reason": "Recount"},
        )
        assert response.status_code == 200
        assert response.json() is None

    def test_adjust_equity_returns_400(self, seeded):
        response = seeded.post(
            "/accounts/equity_adjustments/adjust",
            json={"new_balance": "10", "reason": "x"},
        )
        assert response.status_code == 400


class TestSandboxReset:

    def test_reset_not_available_live(self, client):
        assert client.post("/sandbox/reset").status_code == 400

    def test_reset_restores_initial_chart(self, sandbox_client):
        sandbox_client.post("/accounts/till_float/adjust", json={
            "new_balance": "999", "reason": "Play money",
        })

        assert sandbox_client.post("/sandbox/reset").status_code == 204

        till = sandbox_client.get("/accounts/till_float").json()
        assert Decimal(till["balance"]) == Decimal("150")
        assert sandbox_client.get("/transactions").json() == []
