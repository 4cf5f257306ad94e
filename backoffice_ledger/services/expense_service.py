"""
Expense service — expenses, vendor bills and recurring costs.

An expense paid from a cash account is a plain transfer into
operational expenses. A bill that is not paid yet is recorded
against pending bills as an unsettled leg, and settled later
with a real payment.
"""

import logging
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta

from backoffice_ledger.chart import OPERATIONAL_EXPENSES, PENDING_BILLS
from backoffice_ledger.errors import (
    NotFoundError,
    ValidationFailed,
    entity_not_found,
    transaction_not_found,
)
from backoffice_ledger.models.enums import Frequency, WorkflowKind
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.expense import (
    BillRecordRequest,
    BillSettleRequest,
    ExpenseLogRequest,
    ExpenseTemplate,
    RecurringExpense,
)
from backoffice_ledger.schemas.settlement import Contact, ContactCreate
from backoffice_ledger.schemas.transaction import (
    Transaction,
    TransactionFilter,
    TransferMetadata,
)
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.transfer_service import CATEGORY_OPERATIONS, TransferService
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)

CATEGORY_DEBT_SETTLEMENT = "Debt Settlement"

FREQUENCY_STEPS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
}


def _to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def _to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _payment_metadata(source_id: str) -> TransferMetadata | None:
    # Paying "from" pending bills means the expense is still owed
    if source_id == PENDING_BILLS:
        return TransferMetadata(is_settled=False)
    return None


def due_dates(expense: RecurringExpense, now: int) -> list[int]:
    """Instants at which the expense fell due since it was last generated."""
    if expense.last_generated is None:
        return [now]
    step = FREQUENCY_STEPS[expense.frequency]
    dates = []
    due = _to_datetime(expense.last_generated) + step
    while _to_ms(due) <= now:
        dates.append(_to_ms(due))
        due += step
    return dates


class ExpenseService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.transfers = TransferService(store, actor)
        self.runner = WorkflowRunner(store)

    # --- Expenses ---

    def log_expense(self, request: ExpenseLogRequest) -> Transaction | None:
        """
        Book an expense, optionally keeping it as a template or a
        recurring expense. Paying from pending bills records an
        unsettled IOU instead of a cash payment.
        """
        txn = self.transfers.transfer(
            request.from_account_id,
            OPERATIONAL_EXPENSES,
            request.amount,
            request.description,
            request.category,
            _payment_metadata(request.from_account_id),
        )

        if request.save_as_template:
            self.store.save_expense_template(ExpenseTemplate(
                id=new_id("tpl_"),
                name=request.description,
                amount=request.amount,
                category=request.category,
                from_account_id=request.from_account_id,
                description=request.description,
            ))
        if request.recurring_frequency is not None:
            self.store.save_recurring_expense(RecurringExpense(
                id=new_id("rec_"),
                name=request.description,
                amount=request.amount,
                frequency=request.recurring_frequency,
                from_account_id=request.from_account_id,
                category=request.category,
                description=request.description,
                last_generated=txn.date if txn else now_ms(),
            ))
        return txn

    # --- Vendor bills ---

    def add_contact(self, request: ContactCreate) -> Contact:
        return self.store.save_contact(Contact(
            id=new_id("contact_"),
            name=request.name,
            phone=request.phone,
            created_at=now_ms(),
        ))

    def list_contacts(self) -> list[Contact]:
        return self.store.list_contacts()

    def record_bill(self, request: BillRecordRequest) -> Transaction | None:
        if request.contact_id is not None and self.store.get_contact(request.contact_id) is None:
            raise NotFoundError(entity_not_found("Contact", request.contact_id))
        return self.transfers.transfer(
            PENDING_BILLS,
            OPERATIONAL_EXPENSES,
            request.amount,
            request.description,
            CATEGORY_OPERATIONS,
            TransferMetadata(
                is_settled=False,
                due_date=request.due_date,
                contact_id=request.contact_id,
            ),
        )

    def pending_bills(self) -> list[Transaction]:
        return self.store.query_transactions(
            TransactionFilter(from_id=PENDING_BILLS, is_settled=False)
        )

    def settle_bill(
        self, transaction_id: str, request: BillSettleRequest
    ) -> WorkflowAttempt:
        """Pay an open bill from a cash account and close it."""
        kind = WorkflowKind.BILL_SETTLEMENT
        attempt = self.runner.resume(kind, request.idempotency_key)
        if attempt is None:
            bill = self.store.get_transaction(transaction_id)
            if bill is None or bill.from_account_id != PENDING_BILLS:
                raise NotFoundError(transaction_not_found(transaction_id))
            if bill.is_settled:
                raise ValidationFailed(f"Bill '{transaction_id}' is already settled")
            attempt = self.runner.start(kind, bill, request.idempotency_key)
        bill = Transaction.model_validate(attempt.plan)
        source = request.source_account_id

        steps = [
            WorkflowStep("payment", lambda tx_id: self.transfers.transfer(
                source, PENDING_BILLS, bill.amount,
                f"Settled: {bill.description}", CATEGORY_DEBT_SETTLEMENT,
                TransferMetadata(contact_id=bill.contact_id),
                transaction_id=tx_id,
            )),
            WorkflowStep("mark_settled", lambda _: self.transfers.mark_settled([bill.id])),
        ]
        attempt = self.runner.run(attempt, steps)
        logger.info("Settled bill %s from %s", bill.id, source)
        return attempt

    # --- Templates and recurring expenses ---

    def list_templates(self) -> list[ExpenseTemplate]:
        return self.store.list_expense_templates()

    def delete_template(self, template_id: str) -> None:
        if not self.store.delete_expense_template(template_id):
            raise NotFoundError(entity_not_found("Expense template", template_id))

    def list_recurring(self) -> list[RecurringExpense]:
        return self.store.list_recurring_expenses()

    def generate_recurring(self, now: int | None = None) -> list[Transaction]:
        """
        Post every active recurring expense that has fallen due.

        Each due date gets its own transaction, with an id derived
        from the expense and the date, so running this twice for
        the same instant posts nothing new.
        """
        now = now if now is not None else now_ms()
        posted = []
        for expense in self.store.list_recurring_expenses():
            if not expense.is_active:
                continue
            dates = due_dates(expense, now)
            for due in dates:
                txn = self.transfers.transfer(
                    expense.from_account_id,
                    OPERATIONAL_EXPENSES,
                    expense.amount,
                    expense.description,
                    expense.category,
                    _payment_metadata(expense.from_account_id),
                    transaction_id=f"{expense.id}:{due}",
                )
                if txn is not None:
                    posted.append(txn)
            if dates:
                self.store.save_recurring_expense(
                    expense.model_copy(update={"last_generated": dates[-1]})
                )
        if posted:
            logger.info("Posted %d recurring expenses", len(posted))
        return posted
