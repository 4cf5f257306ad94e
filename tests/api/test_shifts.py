"""
Tests for shift API endpoints.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def seeded(client):
    client.post("/accounts/seed")
    return client


class TestOpen:

    def test_open_returns_201(self, seeded):
        response = seeded.post("/shifts/open", headers={
            "X-Actor-Id": "u_alice", "X-Actor-Name": "Alice",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "OPEN"
        assert data["opened_by"] == "Alice"
        assert Decimal(data["opening_float"]) == Decimal("150")

    def test_second_open_returns_409(self, seeded):
        seeded.post("/shifts/open")
        assert seeded.post("/shifts/open").status_code == 409

    def test_no_current_shift_returns_404(self, seeded):
        assert seeded.get("/shifts/current").status_code == 404


class TestClose:

    def test_preview_then_close(self, seeded):
        seeded.post("/shifts/open")
        seeded.post("/shifts/expense", json={"amount": "30", "description": "Milk"})
        customer = seeded.post("/customers", json={"name": "C1"}).json()
        body = {
            "total_sales": "1000",
            "card_payments": "200",
            "credit_bills": "100",
            "credit_bill_customer_id": customer["id"],
            "hiking_bar_sales": "50",
            "actual_cash": "760",
        }

        preview = seeded.post("/shifts/close/preview", json=body).json()
        assert Decimal(preview["expected_cash"]) == Decimal("770")
        assert Decimal(preview["variance"]) == Decimal("-10")

        response = seeded.post("/shifts/close", json=body)
        assert response.status_code == 200
        assert response.json()["status"] == "CLOSED"
        assert seeded.get("/shifts/current").status_code == 404
        assert len(seeded.get("/shifts").json()) == 1

    def test_credit_bills_without_customer_returns_400(self, seeded):
        seeded.post("/shifts/open")
        response = seeded.post("/shifts/close", json={
            "total_sales": "100", "credit_bills": "20", "actual_cash": "230",
        })
        assert response.status_code == 400
        assert seeded.get("/transactions").json() == []

    def test_close_without_open_shift_returns_404(self, seeded):
        assert seeded.post("/shifts/close", json={}).status_code == 404

    def test_completed_idempotency_key_returns_409(self, seeded):
        seeded.post("/shifts/open")
        body = {"total_sales": "10", "actual_cash": "160", "idempotency_key": "close-a"}
        assert seeded.post("/shifts/close", json=body).status_code == 200

        seeded.post("/shifts/open")
        assert seeded.post("/shifts/close", json=body).status_code == 409

    def test_over_precise_amount_returns_422(self, seeded):
        seeded.post("/shifts/open")
        response = seeded.post("/shifts/close", json={"card_payments": "0.00001"})
        assert response.status_code == 422
        assert seeded.get("/shifts/current").status_code == 200

    def test_close_from_till_count(self, seeded):
        seeded.post("/shifts/open")
        values = seeded.get("/shifts/denominations").json()
        assert Decimal(values[0]) == Decimal("5000")
        assert Decimal(values[-1]) == Decimal("1")

        response = seeded.post("/shifts/close", json={
            "total_sales": "100",
            "denominations": [
                {"value": "200", "count": 1},
                {"value": "50", "count": 1},
            ],
        })

        assert response.status_code == 200
        assert Decimal(response.json()["actual_cash"]) == Decimal("250")
        assert Decimal(response.json()["variance"]) == Decimal("0")


class TestDeskMovements:

    def test_top_up_and_bank_drop(self, seeded):
        seeded.post("/shifts/open")

        top_up = seeded.post("/shifts/top-up", json={"amount": "100"})
        drop = seeded.post("/shifts/bank-drop", json={"amount": "40"})

        assert top_up.status_code == 201
        assert top_up.json()["category"] == "Capital"
        assert drop.json()["category"] == "Transfer"
        assert drop.json()["shift_id"] is not None
        till = seeded.get("/accounts/till_float").json()
        assert Decimal(till["balance"]) == Decimal("210")
