"""
Tests for settlement API endpoints.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def seeded(client):
    client.post("/accounts/seed")
    return client


def close_shift(client, **figures):
    client.post("/shifts/open")
    body = {"total_sales": "0", "actual_cash": "150"}
    body.update(figures)
    response = client.post("/shifts/close", json=body)
    assert response.status_code == 200
    return response.json()


class TestCards:

    def test_pending_preview_and_finalize(self, seeded):
        close_shift(seeded, total_sales="500", card_payments="500")
        pending = seeded.get("/settlements/cards/pending").json()
        ids = [t["id"] for t in pending]
        assert len(ids) == 1

        preview = seeded.post("/settlements/cards/preview", json={
            "transaction_ids": ids, "net_received": "480",
        }).json()
        assert Decimal(preview["fees"]) == Decimal("20")
        assert Decimal(preview["fee_percentage"]) == Decimal("4")

        response = seeded.post("/settlements/cards", json={
            "transaction_ids": ids, "net_received": "480",
        })
        assert response.status_code == 201
        assert response.json()["status"] == "COMPLETED"
        assert seeded.get("/settlements/cards/pending").json() == []

    def test_empty_selection_returns_400(self, seeded):
        response = seeded.post("/settlements/cards", json={
            "transaction_ids": [], "net_received": "10",
        })
        assert response.status_code == 400


class TestClientDebt:

    def test_collect_debt(self, seeded):
        customer = seeded.post("/customers", json={"name": "Acme"}).json()
        close_shift(
            seeded, total_sales="100", credit_bills="100",
            credit_bill_customer_id=customer["id"],
        )

        [summary] = seeded.get("/settlements/debts").json()
        assert Decimal(summary["total"]) == Decimal("100")
        statement = seeded.get(
            f"/settlements/debts/{customer['id']}/statement"
        ).json()
        ids = [line["transaction_id"] for line in statement["lines"]]

        response = seeded.post("/settlements/debts", json={
            "customer_id": customer["id"], "transaction_ids": ids,
        })
        assert response.status_code == 201
        assert seeded.get("/settlements/debts").json() == []

    def test_unknown_customer_statement_returns_404(self, seeded):
        assert seeded.get("/settlements/debts/nobody/statement").status_code == 404


class TestPartner:

    def test_record_and_settle(self, seeded):
        entry = seeded.post("/settlements/partner", json={"amount": "300"})
        assert entry.status_code == 201
        entry_id = entry.json()["id"]

        short = seeded.post("/settlements/partner/settle", json={
            "entry_id": entry_id,
            "allocation": {"cash": "100", "card": "150", "service_charge": "40", "contra": "5"},
        })
        assert short.status_code == 400

        response = seeded.post("/settlements/partner/settle", json={
            "entry_id": entry_id,
            "allocation": {"cash": "100", "card": "150", "service_charge": "40", "contra": "10"},
        })
        assert response.status_code == 200
        assert response.json()["status"] == "RECONCILED"
        assert seeded.get("/settlements/partner").json() == []
