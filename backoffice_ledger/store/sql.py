"""
Live ledger store backed by SQLAlchemy.

Balance changes are issued as UPDATE accounts SET balance =
balance + :delta, so concurrent transfers touching the same
account are applied by the database, not from a cached balance.
Each batch_write is a single commit.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice_ledger import models
from backoffice_ledger.errors import (
    AccountNotFound,
    ConflictError,
    NotFoundError,
    StoreUnavailable,
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

OPEN_SLOT = "OPEN"


class SQLLedgerStore(LedgerStore):
    """
    LedgerStore over one SQLAlchemy session.

    The store owns the commit: every write method either commits
    everything it was given or rolls back and raises.
    """

    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None):
        super().__init__(feed)
        self.db = db

    @contextmanager
    def _writing(self, *collections: Collection):
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"Write rejected by a uniqueness constraint: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Ledger store write failed: %s", e)
            raise StoreUnavailable(str(e)) from e
        except Exception:
            self.db.rollback()
            raise
        self._publish(collections)

    @contextmanager
    def _reading(self):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(str(e)) from e

    # --- Accounts ---

    def get_account(self, account_id: str) -> Optional[Account]:
        with self._reading():
            row = self.db.get(models.Account, account_id)
            return Account.model_validate(row) if row else None

    def list_accounts(self) -> list[Account]:
        with self._reading():
            rows = self.db.execute(
                select(models.Account).order_by(models.Account.id)
            ).scalars().all()
            return [Account.model_validate(r) for r in rows]

    # --- Atomic batch ---

    def batch_write(self, ops: list[BatchOp]) -> None:
        with self._writing(*collections_touched(ops)):
            for op in ops:
                self._apply(op)

    def _apply(self, op: BatchOp) -> None:
        if isinstance(op, InsertAccount):
            if self.db.get(models.Account, op.account.id) is not None:
                raise ConflictError(f"Account '{op.account.id}' already exists")
            self.db.add(models.Account(**op.account.model_dump()))
            self.db.flush()
        elif isinstance(op, IncrementBalance):
            result = self.db.execute(
                update(models.Account)
                .where(models.Account.id == op.account_id)
                .values(balance=models.Account.balance + op.delta)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise AccountNotFound(account_not_found(op.account_id))
        elif isinstance(op, SetBalance):
            result = self.db.execute(
                update(models.Account)
                .where(models.Account.id == op.account_id)
                .values(balance=op.balance)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise AccountNotFound(account_not_found(op.account_id))
        elif isinstance(op, InsertTransaction):
            self.db.add(models.Transaction(**op.transaction.model_dump()))
            self.db.flush()
        elif isinstance(op, UpdateTransaction):
            check_transaction_update(op)
            row = self.db.get(models.Transaction, op.transaction_id)
            if row is None:
                raise NotFoundError(transaction_not_found(op.transaction_id))
            row.is_settled = True
            self.db.flush()
        else:
            raise TypeError(f"Unknown batch op: {op!r}")

    # --- Transactions ---

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self._reading():
            row = self.db.get(models.Transaction, transaction_id)
            return Transaction.model_validate(row) if row else None

    def query_transactions(self, criteria: TransactionFilter) -> list[Transaction]:
        t = models.Transaction
        stmt = select(t)
        if criteria.from_id is not None:
            stmt = stmt.where(t.from_account_id == criteria.from_id)
        if criteria.to_id is not None:
            stmt = stmt.where(t.to_account_id == criteria.to_id)
        if criteria.category is not None:
            stmt = stmt.where(t.category == criteria.category)
        if criteria.categories is not None:
            stmt = stmt.where(t.category.in_(criteria.categories))
        if criteria.date_from is not None:
            stmt = stmt.where(t.date >= criteria.date_from)
        if criteria.staff_id is not None:
            stmt = stmt.where(t.staff_id == criteria.staff_id)
        if criteria.customer_id is not None:
            stmt = stmt.where(t.customer_id == criteria.customer_id)
        if criteria.contact_id is not None:
            stmt = stmt.where(t.contact_id == criteria.contact_id)
        if criteria.shift_id is not None:
            stmt = stmt.where(t.shift_id == criteria.shift_id)
        if criteria.is_settled is not None:
            stmt = stmt.where(t.is_settled == criteria.is_settled)
        if criteria.is_posted is not None:
            stmt = stmt.where(t.is_posted == criteria.is_posted)
        stmt = stmt.order_by(t.date.desc())

        with self._reading():
            rows = self.db.execute(stmt).scalars().all()
            return [Transaction.model_validate(r) for r in rows]

    # --- Shifts ---

    def save_shift(self, shift: Shift) -> Shift:
        with self._writing(Collection.SHIFTS):
            row = models.Shift(**shift.model_dump())
            row.open_slot = OPEN_SLOT if shift.status == ShiftStatus.OPEN else None
            self.db.merge(row)
        return shift

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        with self._reading():
            row = self.db.get(models.Shift, shift_id)
            return Shift.model_validate(row) if row else None

    def list_shifts(self) -> list[Shift]:
        with self._reading():
            rows = self.db.execute(
                select(models.Shift).order_by(models.Shift.opened_at.desc())
            ).scalars().all()
            return [Shift.model_validate(r) for r in rows]

    def find_open_shift(self) -> Optional[Shift]:
        with self._reading():
            row = self.db.execute(
                select(models.Shift).where(models.Shift.status == ShiftStatus.OPEN)
            ).scalars().first()
            return Shift.model_validate(row) if row else None

    # --- Partner ledger ---

    def save_partner_entry(self, entry: PartnerEntry) -> PartnerEntry:
        with self._writing(Collection.PARTNER_ENTRIES):
            self.db.merge(models.PartnerEntry(**entry.model_dump()))
        return entry

    def get_partner_entry(self, entry_id: str) -> Optional[PartnerEntry]:
        with self._reading():
            row = self.db.get(models.PartnerEntry, entry_id)
            return PartnerEntry.model_validate(row) if row else None

    def list_partner_entries(
        self, status: Optional[PartnerEntryStatus] = None
    ) -> list[PartnerEntry]:
        stmt = select(models.PartnerEntry).order_by(models.PartnerEntry.date.desc())
        if status is not None:
            stmt = stmt.where(models.PartnerEntry.status == status)
        with self._reading():
            rows = self.db.execute(stmt).scalars().all()
            return [PartnerEntry.model_validate(r) for r in rows]

    # --- Reference entities ---

    def save_customer(self, customer: Customer) -> Customer:
        with self._writing(Collection.CUSTOMERS):
            self.db.merge(models.Customer(**customer.model_dump()))
        return customer

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        with self._reading():
            row = self.db.get(models.Customer, customer_id)
            return Customer.model_validate(row) if row else None

    def list_customers(self) -> list[Customer]:
        with self._reading():
            rows = self.db.execute(
                select(models.Customer).order_by(models.Customer.name)
            ).scalars().all()
            return [Customer.model_validate(r) for r in rows]

    def save_contact(self, contact: Contact) -> Contact:
        with self._writing(Collection.CONTACTS):
            self.db.merge(models.Contact(**contact.model_dump()))
        return contact

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        with self._reading():
            row = self.db.get(models.Contact, contact_id)
            return Contact.model_validate(row) if row else None

    def list_contacts(self) -> list[Contact]:
        with self._reading():
            rows = self.db.execute(
                select(models.Contact).order_by(models.Contact.name)
            ).scalars().all()
            return [Contact.model_validate(r) for r in rows]

    def save_staff(self, staff: StaffMember) -> StaffMember:
        with self._writing(Collection.STAFF):
            self.db.merge(models.StaffMember(**staff.model_dump()))
        return staff

    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        with self._reading():
            row = self.db.get(models.StaffMember, staff_id)
            return StaffMember.model_validate(row) if row else None

    def list_staff(self) -> list[StaffMember]:
        with self._reading():
            rows = self.db.execute(
                select(models.StaffMember).order_by(models.StaffMember.name)
            ).scalars().all()
            return [StaffMember.model_validate(r) for r in rows]

    def save_holiday(self, holiday: HolidayRecord) -> HolidayRecord:
        with self._writing(Collection.HOLIDAYS):
            self.db.merge(models.HolidayRecord(**holiday.model_dump()))
        return holiday

    def delete_holiday(self, holiday_id: str) -> bool:
        with self._writing(Collection.HOLIDAYS):
            result = self.db.execute(
                delete(models.HolidayRecord)
                .where(models.HolidayRecord.id == holiday_id)
            )
        return result.rowcount > 0

    def list_holidays(self, staff_id: Optional[str] = None) -> list[HolidayRecord]:
        stmt = select(models.HolidayRecord).order_by(
            models.HolidayRecord.date, models.HolidayRecord.staff_id
        )
        if staff_id is not None:
            stmt = stmt.where(models.HolidayRecord.staff_id == staff_id)
        with self._reading():
            rows = self.db.execute(stmt).scalars().all()
            return [HolidayRecord.model_validate(r) for r in rows]

    # --- Expense helpers ---

    def save_expense_template(self, template: ExpenseTemplate) -> ExpenseTemplate:
        with self._writing(Collection.EXPENSE_TEMPLATES):
            self.db.merge(models.ExpenseTemplate(**template.model_dump()))
        return template

    def list_expense_templates(self) -> list[ExpenseTemplate]:
        with self._reading():
            rows = self.db.execute(
                select(models.ExpenseTemplate).order_by(models.ExpenseTemplate.name)
            ).scalars().all()
            return [ExpenseTemplate.model_validate(r) for r in rows]

    def delete_expense_template(self, template_id: str) -> bool:
        with self._writing(Collection.EXPENSE_TEMPLATES):
            result = self.db.execute(
                delete(models.ExpenseTemplate)
                .where(models.ExpenseTemplate.id == template_id)
            )
        return result.rowcount > 0

    def save_recurring_expense(self, expense: RecurringExpense) -> RecurringExpense:
        with self._writing(Collection.RECURRING_EXPENSES):
            self.db.merge(models.RecurringExpense(**expense.model_dump()))
        return expense

    def list_recurring_expenses(self) -> list[RecurringExpense]:
        with self._reading():
            rows = self.db.execute(
                select(models.RecurringExpense).order_by(models.RecurringExpense.name)
            ).scalars().all()
            return [RecurringExpense.model_validate(r) for r in rows]

    # --- Workflow attempts ---

    def save_workflow_attempt(self, attempt: WorkflowAttempt) -> WorkflowAttempt:
        with self._writing():
            self.db.merge(models.WorkflowAttempt(**attempt.model_dump()))
        return attempt

    def get_workflow_attempt(self, attempt_id: str) -> Optional[WorkflowAttempt]:
        with self._reading():
            row = self.db.get(models.WorkflowAttempt, attempt_id)
            return WorkflowAttempt.model_validate(row) if row else None
