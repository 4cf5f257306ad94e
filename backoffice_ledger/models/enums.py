"""
Shared enumerations for database models and schemas.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """The six account categories of the back-office chart."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    RECEIVABLE = "RECEIVABLE"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    EQUITY = "EQUITY"


class ShiftStatus(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class PartnerEntryStatus(str, enum.Enum):
    """Lifecycle of a hiking-bar partner ledger entry."""
    PENDING = "PENDING"
    RECONCILED = "RECONCILED"


class PayoutType(str, enum.Enum):
    SALARY = "SALARY"
    SERVICE_CHARGE = "SERVICE_CHARGE"


class Frequency(str, enum.Enum):
    """How often a recurring expense is posted."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class WorkflowStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class WorkflowKind(str, enum.Enum):
    SHIFT_CLOSE = "SHIFT_CLOSE"
    CARD_RECONCILIATION = "CARD_RECONCILIATION"
    CLIENT_DEBT = "CLIENT_DEBT"
    PARTNER_SETTLEMENT = "PARTNER_SETTLEMENT"
    PAYROLL = "PAYROLL"
    BILL_SETTLEMENT = "BILL_SETTLEMENT"
