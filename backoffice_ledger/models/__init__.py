"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from backoffice_ledger.models.base import Base
from backoffice_ledger.models.enums import (
    AccountType,
    ShiftStatus,
    PartnerEntryStatus,
    PayoutType,
    Frequency,
    WorkflowStatus,
    WorkflowKind,
)
from backoffice_ledger.models.account import Account
from backoffice_ledger.models.transaction import Transaction
from backoffice_ledger.models.shift import Shift
from backoffice_ledger.models.partner_entry import PartnerEntry
from backoffice_ledger.models.customer import Customer, Contact
from backoffice_ledger.models.staff import StaffMember
from backoffice_ledger.models.holiday import HolidayRecord
from backoffice_ledger.models.workflow_attempt import WorkflowAttempt
from backoffice_ledger.models.expense import ExpenseTemplate, RecurringExpense

__all__ = [
    "Base",
    "AccountType",
    "ShiftStatus",
    "PartnerEntryStatus",
    "PayoutType",
    "Frequency",
    "WorkflowStatus",
    "WorkflowKind",
    "Account",
    "Transaction",
    "Shift",
    "PartnerEntry",
    "Customer",
    "Contact",
    "StaffMember",
    "HolidayRecord",
    "WorkflowAttempt",
    "ExpenseTemplate",
    "RecurringExpense",
]
