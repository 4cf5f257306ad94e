"""
Pydantic schemas for settlement workflows: card batches,
client debt collection and the hiking-bar partner ledger.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice_ledger.models.enums import PartnerEntryStatus

ZERO = Decimal("0")


# --- Reference entities ---

class Customer(BaseModel):
    id: str
    name: str
    phone: str | None = None
    email: str | None = None
    created_at: int

    model_config = {"from_attributes": True}


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)


class Contact(BaseModel):
    id: str
    name: str
    phone: str | None = None
    created_at: int

    model_config = {"from_attributes": True}


class ContactCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=50)


# --- Card reconciliation ---

class CardReconciliationRequest(BaseModel):
    clearing_account_id: str = "mozzarella_card_payment"
    transaction_ids: list[str]
    net_received: Decimal = Field(decimal_places=4)
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=40)


class CardReconciliationPreview(BaseModel):
    gross_selected: Decimal
    net_received: Decimal
    fees: Decimal
    fee_percentage: Decimal


class CardReconciliationPlan(CardReconciliationPreview):
    clearing_account_id: str
    transaction_ids: list[str]


# --- Client debt ---

class CustomerDebtSummary(BaseModel):
    customer_id: str
    count: int
    total: Decimal


class DebtStatementLine(BaseModel):
    transaction_id: str
    date: int
    amount: Decimal
    description: str


class DebtStatement(BaseModel):
    """Structured outstanding balance; rendering it as text is up to the caller."""
    customer_id: str
    customer_name: str
    lines: list[DebtStatementLine]
    total_outstanding: Decimal


class ClientDebtRequest(BaseModel):
    customer_id: str
    transaction_ids: list[str]
    destination_account_id: str = "business_bank"
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=40)


class ClientDebtPlan(BaseModel):
    customer_id: str
    customer_name: str
    transaction_ids: list[str]
    destination_account_id: str
    selected_total: Decimal


# --- Hiking-bar partner ---

class SettlementAllocation(BaseModel):
    cash: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    card: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    service_charge: Decimal = Field(default=ZERO, ge=0, decimal_places=4)
    contra: Decimal = Field(default=ZERO, ge=0, decimal_places=4)

    @property
    def total(self) -> Decimal:
        return self.cash + self.card + self.service_charge + self.contra


class PartnerEntry(BaseModel):
    id: str
    date: int
    amount: Decimal
    description: str
    status: PartnerEntryStatus = PartnerEntryStatus.PENDING
    reconciled_at: int | None = None
    reconciled_by: str | None = None
    settlement_data: dict | None = None

    model_config = {"from_attributes": True}


class PartnerSalesRequest(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=4)
    description: str | None = Field(default=None, max_length=255)


class PartnerSettlementRequest(BaseModel):
    entry_id: str
    allocation: SettlementAllocation
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=40)


class PartnerSettlementPlan(BaseModel):
    entry_id: str
    description: str
    allocation: SettlementAllocation
    reconciled_at: int
    reconciled_by: str
