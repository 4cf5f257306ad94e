"""
Pydantic schemas for expenses, payable bills, templates and
recurring expenses.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice_ledger.models.enums import Frequency


class ExpenseTemplate(BaseModel):
    id: str
    name: str
    amount: Decimal
    category: str
    from_account_id: str
    description: str

    model_config = {"from_attributes": True}


class RecurringExpense(BaseModel):
    id: str
    name: str
    amount: Decimal
    frequency: Frequency
    from_account_id: str
    category: str
    description: str
    last_generated: int | None = None
    is_active: bool = True

    model_config = {"from_attributes": True}


class ExpenseLogRequest(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(min_length=1, max_length=255)
    category: str = Field(default="Operations", min_length=1, max_length=64)
    from_account_id: str = "till_float"
    save_as_template: bool = False
    recurring_frequency: Frequency | None = None


class BillRecordRequest(BaseModel):
    """A vendor bill received but not paid yet."""
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(min_length=1, max_length=255)
    contact_id: str | None = None
    due_date: int | None = None


class BillSettleRequest(BaseModel):
    source_account_id: str = "business_bank"
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=40)
