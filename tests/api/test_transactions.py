"""
Tests for transaction API endpoints.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def seeded(client):
    client.post("/accounts/seed")
    return client


def move(client, amount="100", source="business_bank", target="till_float"):
    return client.post("/transactions/transfer", json={
        "from_account_id": source,
        "to_account_id": target,
        "amount": amount,
    })


class TestTransfer:

    def test_transfer_returns_201(self, seeded):
        response = move(seeded)
        assert response.status_code == 201
        data = response.json()
        assert data["category"] == "Internal Transfer"
        assert data["created_by"] == "system"

    def test_transfer_updates_balances(self, seeded):
        move(seeded)
        till = seeded.get("/accounts/till_float").json()
        bank = seeded.get("/accounts/business_bank").json()
        assert Decimal(till["balance"]) == Decimal("250")
        assert Decimal(bank["balance"]) == Decimal("4900")

    def test_unknown_account_returns_404(self, seeded):
        assert move(seeded, target="nope").status_code == 404

    def test_same_account_returns_422(self, seeded):
        assert move(seeded, target="business_bank").status_code == 422

    def test_zero_amount_returns_422(self, seeded):
        assert move(seeded, amount="0").status_code == 422


class TestQuery:

    def test_filter_and_get(self, seeded):
        first = move(seeded).json()
        move(seeded, source="till_float", target="business_bank", amount="20")

        response = seeded.get("/transactions", params={"from_id": "business_bank"})
        assert [t["id"] for t in response.json()] == [first["id"]]

        assert seeded.get(f"/transactions/{first['id']}").status_code == 200

    def test_limit(self, seeded):
        move(seeded)
        move(seeded)
        assert len(seeded.get("/transactions", params={"limit": 1}).json()) == 1

    def test_unknown_transaction_returns_404(self, seeded):
        assert seeded.get("/transactions/tx_missing").status_code == 404
