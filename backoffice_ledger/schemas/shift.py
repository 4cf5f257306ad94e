"""
Pydantic schemas for shifts and the shift close workflow.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from backoffice_ledger.models.enums import ShiftStatus

ZERO = Decimal("0")

# Note and coin values offered by the till count
TILL_DENOMINATIONS = [
    Decimal(v) for v in
    ("5000", "2000", "1000", "500", "200", "100", "50", "20", "10", "5", "1")
]


class Shift(BaseModel):
    id: str
    status: ShiftStatus = ShiftStatus.OPEN
    opened_at: int
    opened_by: str
    opening_float: Decimal
    closed_at: int | None = None
    closed_by: str | None = None

    total_sales: Decimal | None = None
    card_payments: Decimal | None = None
    credit_bills: Decimal | None = None
    credit_bill_customer_id: str | None = None
    hiking_bar_sales: Decimal | None = None
    foreign_currency_amount: Decimal | None = None
    foreign_currency_notes: str | None = None
    local_cash_sales: Decimal | None = None
    till_debits: Decimal | None = None
    expected_cash: Decimal | None = None
    actual_cash: Decimal | None = None
    variance: Decimal | None = None
    notes: str | None = None

    model_config = {"from_attributes": True}


class DenominationCount(BaseModel):
    """One row of the till count: a note or coin value and how many were counted."""
    value: Decimal = Field(gt=0, decimal_places=4)
    count: int = Field(default=0, ge=0)


def count_cash(denominations: list[DenominationCount]) -> Decimal:
    return sum((d.value * d.count for d in denominations), ZERO)


class ShiftCloseRequest(BaseModel):
    """The seven raw inputs of a shift close."""
    total_sales: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    card_payments: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    credit_bills: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    credit_bill_customer_id: str | None = None
    hiking_bar_sales: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    foreign_currency_amount: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    foreign_currency_notes: str = Field(default="", max_length=255)
    actual_cash: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    denominations: list[DenominationCount] | None = None
    notes: str = Field(default="", max_length=1000)
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=40)

    @model_validator(mode="after")
    def _actual_cash_from_count(self):
        # A till count, when given, replaces the typed actual cash figure
        if self.denominations is not None:
            self.actual_cash = count_cash(self.denominations)
        return self


class ShiftClosePreview(BaseModel):
    """Derived figures shown before the close is confirmed."""
    shift_id: str
    opening_float: Decimal
    local_cash_sales: Decimal
    till_debits: Decimal
    expected_cash: Decimal
    actual_cash: Decimal
    variance: Decimal


class ShiftClosePlan(ShiftClosePreview):
    """Everything a close needs, fixed before the first leg runs."""
    request: ShiftCloseRequest
    customer_name: str | None = None
    closed_at: int
    closed_by: str


class TillMovementRequest(BaseModel):
    """Quick expense, float top-up or bank drop at the shift desk."""
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(default="", max_length=255)
    account_id: str | None = None
