"""
Shift service — opening and closing the till.

Opening a shift checkpoints the till balance as the opening
float. Closing it splits gross sales into their destinations
and audits the drawer:

    local cash    = sales - card - credit bills - partner sales - FX
    till debits   = Operations, Transfer and Capital movements
                    out of the till during this shift
    expected cash = opening float + local cash - till debits
    variance      = counted cash - expected cash

Each nonzero component becomes its own transfer. A negative
variance is a shortage booked as an operational expense; a
positive one is a surplus paid into the till from revenue.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from backoffice_ledger.chart import (
    CARD_CLEARING,
    CUSTOMER_RECEIVABLES,
    FX_RESERVE,
    OPERATIONAL_EXPENSES,
    PARTNER_RECEIVABLE,
    REVENUE,
    TILL,
)
from backoffice_ledger.errors import (
    ConflictError,
    NotFoundError,
    ValidationFailed,
    entity_not_found,
)
from backoffice_ledger.models.enums import PartnerEntryStatus, ShiftStatus, WorkflowKind
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.settlement import PartnerEntry
from backoffice_ledger.schemas.shift import (
    Shift,
    ShiftClosePlan,
    ShiftClosePreview,
    ShiftCloseRequest,
)
from backoffice_ledger.schemas.transaction import TransactionFilter, TransferMetadata
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.services.transfer_service import (
    CATEGORY_CAPITAL,
    CATEGORY_OPERATIONS,
    CATEGORY_TRANSFER,
    TransferService,
)
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Movements out of the till that count against expected cash
TILL_DEBIT_CATEGORIES = [CATEGORY_OPERATIONS, CATEGORY_TRANSFER, CATEGORY_CAPITAL]


class ShiftService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.actor = actor
        self.registry = AccountRegistry(store)
        self.transfers = TransferService(store, actor)
        self.runner = WorkflowRunner(store)

    def open_shift(self) -> Shift:
        """Open a shift with the current till balance as its float."""
        open_shift = self.store.find_open_shift()
        if open_shift is not None:
            raise ConflictError(f"Shift '{open_shift.id}' is already open")

        till = self.registry.get(TILL)
        shift = Shift(
            id=new_id("shift_"),
            status=ShiftStatus.OPEN,
            opened_at=now_ms(),
            opened_by=self.actor.display_name,
            opening_float=till.balance,
        )
        self.store.save_shift(shift)
        logger.info("Opened shift %s with float %s", shift.id, shift.opening_float)
        return shift

    def current_shift(self) -> Shift | None:
        return self.store.find_open_shift()

    def latest_shift(self) -> Shift | None:
        return self.store.latest_shift()

    def _require_open_shift(self) -> Shift:
        shift = self.store.find_open_shift()
        if shift is None:
            raise NotFoundError("No shift is open")
        return shift

    def till_debits(self, shift: Shift) -> Decimal:
        txns = self.store.query_transactions(TransactionFilter(
            from_id=TILL,
            categories=TILL_DEBIT_CATEGORIES,
            shift_id=shift.id,
            date_from=shift.opened_at,
        ))
        return sum((t.amount for t in txns), ZERO)

    def preview_close(self, request: ShiftCloseRequest) -> ShiftClosePreview:
        """Close figures for the open shift, without writing anything."""
        return self._preview(self._require_open_shift(), request)

    def _preview(self, shift: Shift, request: ShiftCloseRequest) -> ShiftClosePreview:
        local_cash = (
            request.total_sales
            - request.card_payments
            - request.credit_bills
            - request.hiking_bar_sales
            - request.foreign_currency_amount
        )
        debits = self.till_debits(shift)
        expected = shift.opening_float + local_cash - debits
        return ShiftClosePreview(
            shift_id=shift.id,
            opening_float=shift.opening_float,
            local_cash_sales=local_cash,
            till_debits=debits,
            expected_cash=expected,
            actual_cash=request.actual_cash,
            variance=request.actual_cash - expected,
        )

    def close_shift(self, request: ShiftCloseRequest) -> Shift:
        """
        Post every leg of the close and store the closing snapshot.

        The customer check runs before any transfer. Resuming with
        the idempotency_key of a failed close reuses its figures.
        """
        attempt = self.runner.resume(WorkflowKind.SHIFT_CLOSE, request.idempotency_key)
        if attempt is None:
            plan = self._plan(request)
            attempt = self.runner.start(
                WorkflowKind.SHIFT_CLOSE, plan, request.idempotency_key
            )
        plan = ShiftClosePlan.model_validate(attempt.plan)
        req = plan.request
        entry_id = f"pe_{attempt.id}"

        def record_partner_entry(_):
            if self.store.get_partner_entry(entry_id) is not None:
                return
            day = datetime.fromtimestamp(plan.closed_at / 1000, tz=timezone.utc)
            self.store.save_partner_entry(PartnerEntry(
                id=entry_id,
                date=plan.closed_at,
                amount=req.hiking_bar_sales,
                description=f"Partner Sales: {day.date().isoformat()}",
                status=PartnerEntryStatus.PENDING,
            ))

        def post_variance(tx_id):
            if plan.variance < 0:
                self.transfers.transfer(
                    TILL, OPERATIONAL_EXPENSES, -plan.variance,
                    "Cash Shortage", "Variance", transaction_id=tx_id,
                )
            elif plan.variance > 0:
                self.transfers.transfer(
                    REVENUE, TILL, plan.variance,
                    "Cash Surplus", "Variance", transaction_id=tx_id,
                )

        steps = [
            WorkflowStep("local_cash", lambda tx_id: self.transfers.transfer(
                REVENUE, TILL, plan.local_cash_sales,
                "Shift Cash Sales (Local)", "Revenue",
                transaction_id=tx_id,
            )),
            WorkflowStep("card_payments", lambda tx_id: self.transfers.transfer(
                REVENUE, CARD_CLEARING, req.card_payments,
                "Shift Card Settlement", "Revenue",
                TransferMetadata(is_settled=False),
                transaction_id=tx_id,
            )),
        ]
        if req.hiking_bar_sales > 0:
            steps += [
                WorkflowStep("partner_entry", record_partner_entry),
                WorkflowStep("partner_revenue", lambda tx_id: self.transfers.transfer(
                    REVENUE, PARTNER_RECEIVABLE, req.hiking_bar_sales,
                    "Partner Receivable Generation", "Partner Revenue",
                    transaction_id=tx_id,
                )),
            ]
        steps += [
            WorkflowStep("credit_bills", lambda tx_id: self.transfers.transfer(
                REVENUE, CUSTOMER_RECEIVABLES, req.credit_bills,
                f"Client Credit: {plan.customer_name}", "Customer Credit",
                TransferMetadata(
                    customer_id=req.credit_bill_customer_id, is_settled=False
                ),
                transaction_id=tx_id,
            )),
            WorkflowStep("foreign_currency", lambda tx_id: self.transfers.transfer(
                REVENUE, FX_RESERVE, req.foreign_currency_amount,
                f"FX Extraction: {req.foreign_currency_notes}", "Foreign Exchange",
                TransferMetadata(notes=req.foreign_currency_notes or None),
                transaction_id=tx_id,
            )),
            WorkflowStep("variance", post_variance),
            WorkflowStep("close", lambda _: self._store_closed(plan)),
        ]

        self.runner.run(attempt, steps)
        shift = self.store.get_shift(plan.shift_id)
        logger.info(
            "Closed shift %s: expected %s, counted %s, variance %s",
            plan.shift_id, plan.expected_cash, plan.actual_cash, plan.variance,
        )
        return shift

    def _plan(self, request: ShiftCloseRequest) -> ShiftClosePlan:
        shift = self._require_open_shift()

        customer_name = None
        if request.credit_bills > 0:
            if not request.credit_bill_customer_id:
                raise ValidationFailed("Credit bills require a customer")
            customer = self.store.get_customer(request.credit_bill_customer_id)
            if customer is None:
                raise ValidationFailed(
                    entity_not_found("Customer", request.credit_bill_customer_id)
                )
            customer_name = customer.name

        preview = self._preview(shift, request)
        return ShiftClosePlan(
            **preview.model_dump(),
            request=request,
            customer_name=customer_name,
            closed_at=now_ms(),
            closed_by=self.actor.display_name,
        )

    def _store_closed(self, plan: ShiftClosePlan) -> None:
        shift = self.store.get_shift(plan.shift_id)
        if shift is None:
            raise NotFoundError(entity_not_found("Shift", plan.shift_id))
        req = plan.request
        self.store.save_shift(shift.model_copy(update={
            "status": ShiftStatus.CLOSED,
            "closed_at": plan.closed_at,
            "closed_by": plan.closed_by,
            "total_sales": req.total_sales,
            "card_payments": req.card_payments,
            "credit_bills": req.credit_bills,
            "credit_bill_customer_id": req.credit_bill_customer_id,
            "hiking_bar_sales": req.hiking_bar_sales,
            "foreign_currency_amount": req.foreign_currency_amount,
            "foreign_currency_notes": req.foreign_currency_notes or None,
            "local_cash_sales": plan.local_cash_sales,
            "till_debits": plan.till_debits,
            "expected_cash": plan.expected_cash,
            "actual_cash": plan.actual_cash,
            "variance": plan.variance,
            "notes": req.notes or None,
        }))
