"""
Abstract ledger store.

The transfer engine and every workflow are written against
LedgerStore only. Two implementations exist: SQLLedgerStore for
the live database and SandboxLedgerStore for the in-process
sandbox. Which one a request gets is decided in store.factory.
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Union

from backoffice_ledger.errors import ValidationFailed
from backoffice_ledger.models.enums import PartnerEntryStatus
from backoffice_ledger.schemas.account import Account
from backoffice_ledger.schemas.expense import ExpenseTemplate, RecurringExpense
from backoffice_ledger.schemas.payroll import HolidayRecord, StaffMember
from backoffice_ledger.schemas.settlement import Contact, Customer, PartnerEntry
from backoffice_ledger.schemas.shift import Shift
from backoffice_ledger.schemas.transaction import Transaction, TransactionFilter
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.store.feed import ChangeFeed


class Collection(str, enum.Enum):
    """Subscribable collections."""
    ACCOUNTS = "accounts"
    TRANSACTIONS = "transactions"
    SHIFTS = "shifts"
    PARTNER_ENTRIES = "partner_entries"
    CUSTOMERS = "customers"
    CONTACTS = "contacts"
    STAFF = "staff"
    HOLIDAYS = "holidays"
    EXPENSE_TEMPLATES = "expense_templates"
    RECURRING_EXPENSES = "recurring_expenses"


# --- Batch operations ---
# A batch_write applies a list of these all-or-nothing.

@dataclass(frozen=True)
class InsertAccount:
    account: Account


@dataclass(frozen=True)
class SetBalance:
    account_id: str
    balance: Decimal


@dataclass(frozen=True)
class IncrementBalance:
    """Atomic delta apply, never a read-modify-write of a cached balance."""
    account_id: str
    delta: Decimal


@dataclass(frozen=True)
class InsertTransaction:
    transaction: Transaction


@dataclass(frozen=True)
class UpdateTransaction:
    transaction_id: str
    changes: dict[str, Any] = field(default_factory=lambda: {"is_settled": True})


BatchOp = Union[
    InsertAccount, SetBalance, IncrementBalance, InsertTransaction, UpdateTransaction
]

# Transactions are immutable apart from closing an IOU
MUTABLE_TRANSACTION_CHANGES = {"is_settled": True}


def check_transaction_update(op: UpdateTransaction) -> None:
    if op.changes != MUTABLE_TRANSACTION_CHANGES:
        raise ValidationFailed(
            f"Transaction '{op.transaction_id}' is immutable; "
            f"only is_settled may be set to true (got {op.changes})"
        )


class LedgerStore(ABC):
    """Persistence contract consumed by the ledger core."""

    def __init__(self, feed: Optional[ChangeFeed] = None):
        self.feed = feed or ChangeFeed()

    # Accounts
    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        pass

    # Atomic writes
    @abstractmethod
    def batch_write(self, ops: list[BatchOp]) -> None:
        """Apply every op or none. Raises StoreUnavailable on store failure."""
        pass

    # Transactions
    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    def query_transactions(self, criteria: TransactionFilter) -> list[Transaction]:
        """Matching transactions, newest first."""
        pass

    # Shifts
    @abstractmethod
    def save_shift(self, shift: Shift) -> Shift:
        """Insert or replace. Raises ConflictError for a second OPEN shift."""
        pass

    @abstractmethod
    def get_shift(self, shift_id: str) -> Optional[Shift]:
        pass

    @abstractmethod
    def list_shifts(self) -> list[Shift]:
        """All shifts, most recently opened first."""
        pass

    @abstractmethod
    def find_open_shift(self) -> Optional[Shift]:
        pass

    def latest_shift(self) -> Optional[Shift]:
        shifts = self.list_shifts()
        return shifts[0] if shifts else None

    # Partner ledger
    @abstractmethod
    def save_partner_entry(self, entry: PartnerEntry) -> PartnerEntry:
        pass

    @abstractmethod
    def get_partner_entry(self, entry_id: str) -> Optional[PartnerEntry]:
        pass

    @abstractmethod
    def list_partner_entries(
        self, status: Optional[PartnerEntryStatus] = None
    ) -> list[PartnerEntry]:
        pass

    # Reference entities
    @abstractmethod
    def save_customer(self, customer: Customer) -> Customer:
        pass

    @abstractmethod
    def get_customer(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    def list_customers(self) -> list[Customer]:
        pass

    @abstractmethod
    def save_contact(self, contact: Contact) -> Contact:
        pass

    @abstractmethod
    def get_contact(self, contact_id: str) -> Optional[Contact]:
        pass

    @abstractmethod
    def list_contacts(self) -> list[Contact]:
        pass

    @abstractmethod
    def save_staff(self, staff: StaffMember) -> StaffMember:
        pass

    @abstractmethod
    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        pass

    @abstractmethod
    def list_staff(self) -> list[StaffMember]:
        pass

    @abstractmethod
    def save_holiday(self, holiday: HolidayRecord) -> HolidayRecord:
        """Raises ConflictError if the staff member already has that day booked."""
        pass

    @abstractmethod
    def delete_holiday(self, holiday_id: str) -> bool:
        pass

    @abstractmethod
    def list_holidays(self, staff_id: Optional[str] = None) -> list[HolidayRecord]:
        """Holidays ordered by date, optionally for one staff member."""
        pass

    # Expense helpers
    @abstractmethod
    def save_expense_template(self, template: ExpenseTemplate) -> ExpenseTemplate:
        pass

    @abstractmethod
    def list_expense_templates(self) -> list[ExpenseTemplate]:
        pass

    @abstractmethod
    def delete_expense_template(self, template_id: str) -> bool:
        pass

    @abstractmethod
    def save_recurring_expense(self, expense: RecurringExpense) -> RecurringExpense:
        pass

    @abstractmethod
    def list_recurring_expenses(self) -> list[RecurringExpense]:
        pass

    # Workflow attempts
    @abstractmethod
    def save_workflow_attempt(self, attempt: WorkflowAttempt) -> WorkflowAttempt:
        pass

    @abstractmethod
    def get_workflow_attempt(self, attempt_id: str) -> Optional[WorkflowAttempt]:
        pass

    # Change notification
    def snapshot(self, collection: Collection) -> list[Any]:
        loaders: dict[Collection, Callable[[], list[Any]]] = {
            Collection.ACCOUNTS: self.list_accounts,
            Collection.TRANSACTIONS: lambda: self.query_transactions(TransactionFilter()),
            Collection.SHIFTS: self.list_shifts,
            Collection.PARTNER_ENTRIES: self.list_partner_entries,
            Collection.CUSTOMERS: self.list_customers,
            Collection.CONTACTS: self.list_contacts,
            Collection.STAFF: self.list_staff,
            Collection.HOLIDAYS: self.list_holidays,
            Collection.EXPENSE_TEMPLATES: self.list_expense_templates,
            Collection.RECURRING_EXPENSES: self.list_recurring_expenses,
        }
        return loaders[Collection(collection)]()

    def subscribe(
        self, collection: Collection, on_change: Callable[[list[Any]], None]
    ) -> Callable[[], None]:
        """
        Deliver the current snapshot now and a fresh one after every
        write to the collection. Returns the unsubscribe function.
        """
        collection = Collection(collection)
        on_change(self.snapshot(collection))
        return self.feed.subscribe(collection.value, on_change)

    def _publish(self, collections: Iterable[Collection]) -> None:
        for collection in set(collections):
            if self.feed.has_listeners(collection.value):
                self.feed.publish(collection.value, self.snapshot(collection))


def collections_touched(ops: Iterable[BatchOp]) -> set[Collection]:
    touched = set()
    for op in ops:
        if isinstance(op, (InsertTransaction, UpdateTransaction)):
            touched.add(Collection.TRANSACTIONS)
        else:
            touched.add(Collection.ACCOUNTS)
    return touched
