"""
Pydantic schemas for ledger transactions.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class Transaction(BaseModel):
    """
    An immutable ledger movement from one account to another.

    Frozen: a settled copy is produced with model_copy(), the
    stored record is only ever changed by the store's
    UpdateTransaction op.
    """
    id: str
    date: int
    amount: Decimal
    from_account_id: str
    to_account_id: str
    description: str
    category: str
    created_by: str
    is_settled: bool = True
    is_posted: bool = True
    due_date: int | None = None
    contact_id: str | None = None
    customer_id: str | None = None
    staff_id: str | None = None
    shift_id: str | None = None
    notes: str | None = None

    model_config = {"from_attributes": True, "frozen": True}


class TransferMetadata(BaseModel):
    """Optional tags carried onto the transaction record."""
    is_settled: bool | None = None
    is_posted: bool | None = None
    due_date: int | None = None
    contact_id: str | None = None
    customer_id: str | None = None
    staff_id: str | None = None
    shift_id: str | None = None
    notes: str | None = None


class TransferRequest(BaseModel):
    from_account_id: str
    to_account_id: str
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str = Field(default="Internal transfer", max_length=255)

    @model_validator(mode="after")
    def accounts_must_differ(self):
        if self.from_account_id == self.to_account_id:
            raise ValueError("source and destination accounts must be different")
        return self


class TransactionFilter(BaseModel):
    """Query contract for store.query_transactions; unset fields match all."""
    from_id: str | None = None
    to_id: str | None = None
    category: str | None = None
    categories: list[str] | None = None
    date_from: int | None = None
    staff_id: str | None = None
    customer_id: str | None = None
    contact_id: str | None = None
    shift_id: str | None = None
    is_settled: bool | None = None
    is_posted: bool | None = None

    def matches(self, tx: Transaction) -> bool:
        """In-process evaluation, used by the sandbox store."""
        if self.from_id is not None and tx.from_account_id != self.from_id:
            return False
        if self.to_id is not None and tx.to_account_id != self.to_id:
            return False
        if self.category is not None and tx.category != self.category:
            return False
        if self.categories is not None and tx.category not in self.categories:
            return False
        if self.date_from is not None and tx.date < self.date_from:
            return False
        for field in ("staff_id", "customer_id", "contact_id", "shift_id",
                      "is_settled", "is_posted"):
            wanted = getattr(self, field)
            if wanted is not None and getattr(tx, field) != wanted:
                return False
        return True
