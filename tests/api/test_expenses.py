"""
Tests for expense API endpoints.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def seeded(client):
    client.post("/accounts/seed")
    return client


def test_log_expense_with_template(seeded):
    response = seeded.post("/expenses", json={
        "amount": "25", "description": "Gas refill", "save_as_template": True,
    })
    assert response.status_code == 201

    [template] = seeded.get("/expenses/templates").json()
    assert seeded.delete(f"/expenses/templates/{template['id']}").status_code == 204
    assert seeded.delete(f"/expenses/templates/{template['id']}").status_code == 404


def test_bill_lifecycle(seeded):
    contact = seeded.post("/contacts", json={"name": "Fresh Farms"}).json()
    bill = seeded.post("/expenses/bills", json={
        "amount": "120", "description": "Vegetables", "contact_id": contact["id"],
    })
    assert bill.status_code == 201
    bill_id = bill.json()["id"]
    assert [b["id"] for b in seeded.get("/expenses/bills").json()] == [bill_id]

    response = seeded.post(f"/expenses/bills/{bill_id}/settle", json={})

    assert response.status_code == 200
    assert seeded.get("/expenses/bills").json() == []
    bank = seeded.get("/accounts/business_bank").json()
    assert Decimal(bank["balance"]) == Decimal("4880")


def test_recurring_generation(seeded):
    seeded.post("/expenses", json={
        "amount": "40", "description": "Internet",
        "from_account_id": "business_bank", "recurring_frequency": "MONTHLY",
    })
    assert len(seeded.get("/expenses/recurring").json()) == 1

    # Nothing is due again until a month after the first payment
    response = seeded.post("/expenses/recurring/generate")
    assert response.status_code == 200
    assert response.json() == []
