"""
Pydantic schemas for staff and payroll.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice_ledger.models.enums import PayoutType

ZERO = Decimal("0")


class StaffMember(BaseModel):
    id: str
    name: str
    role: str
    salary: Decimal = ZERO
    loan_balance: Decimal = ZERO
    loan_installment: Decimal = ZERO
    is_active: bool = True
    joined_at: int

    model_config = {"from_attributes": True}


class HolidayRecord(BaseModel):
    """A day off booked for one staff member."""
    id: str
    staff_id: str
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")

    model_config = {"from_attributes": True}


class StaffCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    role: str = Field(min_length=1, max_length=50)
    salary: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    loan_balance: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    loan_installment: Decimal = Field(default=ZERO, ge=0, decimal_places=4)


class AdvanceRequest(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=4)
    source_account_id: str = "till_float"


class PayrollPreparation(BaseModel):
    """Defaults offered to the operator before a payout is confirmed."""
    staff_id: str
    payout_type: PayoutType
    base_amount: Decimal
    outstanding_advances: Decimal
    loan_repayment: Decimal
    net_pay: Decimal


class PayrollRequest(BaseModel):
    staff_id: str
    payout_type: PayoutType
    # Ignored for SALARY: the configured salary is always used
    base_amount: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    loan_repayment: Decimal | None = Field(default=None, ge=0, decimal_places=4)
    source_account_id: str = "business_bank"
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=40)


class PayrollPlan(BaseModel):
    staff_id: str
    staff_name: str
    payout_type: PayoutType
    base_amount: Decimal
    outstanding_advances: Decimal
    loan_repayment: Decimal
    net_pay: Decimal
    source_account_id: str
    new_loan_balance: Decimal
