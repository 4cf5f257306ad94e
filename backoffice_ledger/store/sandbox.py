"""
Sandbox ledger store.

Runs the same ledger logic without touching the live database:
state lives in process memory and, when a path is given, is
mirrored to a JSON file after every write. The initial chart of
accounts is seeded on first read.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel

from backoffice_ledger.chart import INITIAL_ACCOUNTS
from backoffice_ledger.errors import (
    AccountNotFound,
    ConflictError,
    NotFoundError,
    account_not_found,
    transaction_not_found,
)
from backoffice_ledger.models.enums import PartnerEntryStatus, ShiftStatus
from backoffice_ledger.schemas.account import Account
from backoffice_ledger.schemas.expense import ExpenseTemplate, RecurringExpense
from backoffice_ledger.schemas.payroll import HolidayRecord, StaffMember
from backoffice_ledger.schemas.settlement import Contact, Customer, PartnerEntry
from backoffice_ledger.schemas.shift import Shift
from backoffice_ledger.schemas.transaction import Transaction, TransactionFilter
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.store.base import (
    BatchOp,
    Collection,
    IncrementBalance,
    InsertAccount,
    InsertTransaction,
    LedgerStore,
    SetBalance,
    UpdateTransaction,
    check_transaction_update,
    collections_touched,
)
from backoffice_ledger.store.feed import ChangeFeed

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

WORKFLOW_ATTEMPTS = "workflow_attempts"

# Storage key -> record type, used when loading the JSON mirror
RECORD_TYPES: dict[str, type[BaseModel]] = {
    Collection.ACCOUNTS.value: Account,
    Collection.TRANSACTIONS.value: Transaction,
    Collection.SHIFTS.value: Shift,
    Collection.PARTNER_ENTRIES.value: PartnerEntry,
    Collection.CUSTOMERS.value: Customer,
    Collection.CONTACTS.value: Contact,
    Collection.STAFF.value: StaffMember,
    Collection.HOLIDAYS.value: HolidayRecord,
    Collection.EXPENSE_TEMPLATES.value: ExpenseTemplate,
    Collection.RECURRING_EXPENSES.value: RecurringExpense,
    WORKFLOW_ATTEMPTS: WorkflowAttempt,
}


class SandboxLedgerStore(LedgerStore):
    """
    In-process LedgerStore.

    All reads hand out deep copies, so callers can never change
    stored records except through the store's own methods.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        feed: Optional[ChangeFeed] = None,
    ):
        super().__init__(feed)
        self.path = Path(path) if path else None
        self._lock = threading.RLock()
        self._data: dict[str, dict[str, BaseModel]] = {k: {} for k in RECORD_TYPES}
        self._load()

    # --- Persistence of the mirror ---

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        for key, record_type in RECORD_TYPES.items():
            for item in raw.get(key, []):
                record = record_type.model_validate(item)
                self._data[key][record.id] = record
        logger.info("Loaded sandbox state from %s", self.path)

    def _flush(self) -> None:
        if self.path is None:
            return
        payload = {
            key: [r.model_dump(mode="json") for r in records.values()]
            for key, records in self._data.items()
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def reset(self) -> None:
        """Wipe every sandbox record, including the JSON mirror."""
        with self._lock:
            self._data = {k: {} for k in RECORD_TYPES}
            if self.path is not None and self.path.exists():
                self.path.unlink()
        logger.info("Sandbox state reset")
        self._publish(Collection)

    # --- Generic helpers ---

    def _get(self, key: str, record_id: str) -> Optional[M]:
        with self._lock:
            record = self._data[key].get(record_id)
            return record.model_copy(deep=True) if record else None

    def _all(self, key: str) -> list:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._data[key].values()]

    def _put(self, key: str, record: M) -> M:
        with self._lock:
            self._data[key][record.id] = record.model_copy(deep=True)
            self._flush()
        if key != WORKFLOW_ATTEMPTS:
            self._publish([Collection(key)])
        return record

    def _ensure_seeded(self) -> None:
        with self._lock:
            accounts = self._data[Collection.ACCOUNTS.value]
            if accounts:
                return
            for account in INITIAL_ACCOUNTS:
                accounts[account.id] = account.model_copy(deep=True)
            self._flush()
        logger.info("Seeded sandbox chart of accounts")

    # --- Accounts ---

    def get_account(self, account_id: str) -> Optional[Account]:
        self._ensure_seeded()
        return self._get(Collection.ACCOUNTS.value, account_id)

    def list_accounts(self) -> list[Account]:
        self._ensure_seeded()
        return sorted(self._all(Collection.ACCOUNTS.value), key=lambda a: a.id)

    # --- Atomic batch ---

    def batch_write(self, ops: list[BatchOp]) -> None:
        with self._lock:
            # Work on copies of both tables and swap them in only
            # once every op has applied.
            accounts = dict(self._data[Collection.ACCOUNTS.value])
            transactions = dict(self._data[Collection.TRANSACTIONS.value])
            for op in ops:
                self._apply(op, accounts, transactions)
            self._data[Collection.ACCOUNTS.value] = accounts
            self._data[Collection.TRANSACTIONS.value] = transactions
            self._flush()
        self._publish(collections_touched(ops))

    @staticmethod
    def _apply(op: BatchOp, accounts: dict, transactions: dict) -> None:
        if isinstance(op, InsertAccount):
            if op.account.id in accounts:
                raise ConflictError(f"Account '{op.account.id}' already exists")
            accounts[op.account.id] = op.account.model_copy(deep=True)
        elif isinstance(op, (IncrementBalance, SetBalance)):
            account = accounts.get(op.account_id)
            if account is None:
                raise AccountNotFound(account_not_found(op.account_id))
            if isinstance(op, IncrementBalance):
                balance = account.balance + op.delta
            else:
                balance = op.balance
            accounts[op.account_id] = account.model_copy(update={"balance": balance})
        elif isinstance(op, InsertTransaction):
            if op.transaction.id in transactions:
                raise ConflictError(
                    f"Transaction '{op.transaction.id}' already exists"
                )
            transactions[op.transaction.id] = op.transaction
        elif isinstance(op, UpdateTransaction):
            check_transaction_update(op)
            tx = transactions.get(op.transaction_id)
            if tx is None:
                raise NotFoundError(transaction_not_found(op.transaction_id))
            transactions[op.transaction_id] = tx.model_copy(update={"is_settled": True})
        else:
            raise TypeError(f"Unknown batch op: {op!r}")

    # --- Transactions ---

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._get(Collection.TRANSACTIONS.value, transaction_id)

    def query_transactions(self, criteria: TransactionFilter) -> list[Transaction]:
        with self._lock:
            # Newest insert first among equal dates
            matching = [
                tx for tx in reversed(list(self._data[Collection.TRANSACTIONS.value].values()))
                if criteria.matches(tx)
            ]
        return sorted(matching, key=lambda tx: tx.date, reverse=True)

    # --- Shifts ---

    def save_shift(self, shift: Shift) -> Shift:
        with self._lock:
            if shift.status == ShiftStatus.OPEN:
                open_shift = self.find_open_shift()
                if open_shift is not None and open_shift.id != shift.id:
                    raise ConflictError(
                        f"Shift '{open_shift.id}' is already open"
                    )
            return self._put(Collection.SHIFTS.value, shift)

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        return self._get(Collection.SHIFTS.value, shift_id)

    def list_shifts(self) -> list[Shift]:
        return sorted(
            self._all(Collection.SHIFTS.value),
            key=lambda s: s.opened_at,
            reverse=True,
        )

    def find_open_shift(self) -> Optional[Shift]:
        for shift in self.list_shifts():
            if shift.status == ShiftStatus.OPEN:
                return shift
        return None

    # --- Partner ledger ---

    def save_partner_entry(self, entry: PartnerEntry) -> PartnerEntry:
        return self._put(Collection.PARTNER_ENTRIES.value, entry)

    def get_partner_entry(self, entry_id: str) -> Optional[PartnerEntry]:
        return self._get(Collection.PARTNER_ENTRIES.value, entry_id)

    def list_partner_entries(
        self, status: Optional[PartnerEntryStatus] = None
    ) -> list[PartnerEntry]:
        entries = [
            e for e in self._all(Collection.PARTNER_ENTRIES.value)
            if status is None or e.status == status
        ]
        return sorted(entries, key=lambda e: e.date, reverse=True)

    # --- Reference entities ---

    def save_customer(self, customer: Customer) -> Customer:
        return self._put(Collection.CUSTOMERS.value, customer)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self._get(Collection.CUSTOMERS.value, customer_id)

    def list_customers(self) -> list[Customer]:
        return sorted(self._all(Collection.CUSTOMERS.value), key=lambda c: c.name)

    def save_contact(self, contact: Contact) -> Contact:
        return self._put(Collection.CONTACTS.value, contact)

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        return self._get(Collection.CONTACTS.value, contact_id)

    def list_contacts(self) -> list[Contact]:
        return sorted(self._all(Collection.CONTACTS.value), key=lambda c: c.name)

    def save_staff(self, staff: StaffMember) -> StaffMember:
        return self._put(Collection.STAFF.value, staff)

    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        return self._get(Collection.STAFF.value, staff_id)

    def list_staff(self) -> list[StaffMember]:
        return sorted(self._all(Collection.STAFF.value), key=lambda s: s.name)

    def save_holiday(self, holiday: HolidayRecord) -> HolidayRecord:
        with self._lock:
            for existing in self._data[Collection.HOLIDAYS.value].values():
                if (existing.staff_id, existing.date) == (holiday.staff_id, holiday.date) \
                        and existing.id != holiday.id:
                    raise ConflictError(
                        f"Staff member '{holiday.staff_id}' already has "
                        f"a holiday on {holiday.date}"
                    )
            return self._put(Collection.HOLIDAYS.value, holiday)

    def delete_holiday(self, holiday_id: str) -> bool:
        with self._lock:
            removed = self._data[Collection.HOLIDAYS.value].pop(holiday_id, None)
            if removed is not None:
                self._flush()
        if removed is not None:
            self._publish([Collection.HOLIDAYS])
        return removed is not None

    def list_holidays(self, staff_id: Optional[str] = None) -> list[HolidayRecord]:
        holidays = self._all(Collection.HOLIDAYS.value)
        if staff_id is not None:
            holidays = [h for h in holidays if h.staff_id == staff_id]
        return sorted(holidays, key=lambda h: (h.date, h.staff_id))

    # --- Expense helpers ---

    def save_expense_template(self, template: ExpenseTemplate) -> ExpenseTemplate:
        return self._put(Collection.EXPENSE_TEMPLATES.value, template)

    def list_expense_templates(self) -> list[ExpenseTemplate]:
        return sorted(self._all(Collection.EXPENSE_TEMPLATES.value), key=lambda t: t.name)

    def delete_expense_template(self, template_id: str) -> bool:
        with self._lock:
            removed = self._data[Collection.EXPENSE_TEMPLATES.value].pop(template_id, None)
            if removed is not None:
                self._flush()
        if removed is not None:
            self._publish([Collection.EXPENSE_TEMPLATES])
        return removed is not None

    def save_recurring_expense(self, expense: RecurringExpense) -> RecurringExpense:
        return self._put(Collection.RECURRING_EXPENSES.value, expense)

    def list_recurring_expenses(self) -> list[RecurringExpense]:
        return sorted(self._all(Collection.RECURRING_EXPENSES.value), key=lambda r: r.name)

    # --- Workflow attempts ---

    def save_workflow_attempt(self, attempt: WorkflowAttempt) -> WorkflowAttempt:
        return self._put(WORKFLOW_ATTEMPTS, attempt)

    def get_workflow_attempt(self, attempt_id: str) -> Optional[WorkflowAttempt]:
        return self._get(WORKFLOW_ATTEMPTS, attempt_id)
