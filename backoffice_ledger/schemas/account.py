"""
Pydantic schemas for accounts.

These are the store-agnostic records the services work with.
The live store builds them from ORM rows (from_attributes),
the sandbox store keeps them as they are.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice_ledger.models.enums import AccountType


class Account(BaseModel):
    id: str
    name: str
    type: AccountType
    balance: Decimal = Decimal("0")
    icon: str = ""

    model_config = {"from_attributes": True}


class AccountCreate(BaseModel):
    """Request to add an account to the chart. Balances start at zero."""
    id: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9_]+$")
    name: str = Field(min_length=1, max_length=100)
    type: AccountType
    icon: str = Field(default="", max_length=50)


class BalanceAdjustRequest(BaseModel):
    """Set an account to a counted balance through an equity transfer."""
    new_balance: Decimal = Field(decimal_places=4)
    reason: str = Field(min_length=1, max_length=200)
