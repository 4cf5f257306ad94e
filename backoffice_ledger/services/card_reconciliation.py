"""
Card reconciliation — settling a card processor batch.

Card takings sit on a clearing account as unsettled legs until
the processor pays out. The operator selects the legs covered by
a payout and enters the net amount that reached the bank; the
difference is booked as card fees.
"""

import logging
from decimal import Decimal

from backoffice_ledger.chart import (
    BANK,
    CARD_CLEARING,
    CARD_CLEARING_ACCOUNTS,
    OPERATIONAL_EXPENSES,
)
from backoffice_ledger.errors import ValidationFailed, transaction_not_found
from backoffice_ledger.models.enums import WorkflowKind
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.settlement import (
    CardReconciliationPlan,
    CardReconciliationPreview,
    CardReconciliationRequest,
)
from backoffice_ledger.schemas.transaction import Transaction, TransactionFilter
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import LedgerStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.0001")

PROCESSOR_NAMES = {
    CARD_CLEARING: "Mozzarella",
}


def compute_fees(gross: Decimal, net_received: Decimal) -> CardReconciliationPreview:
    fees = max(ZERO, gross - net_received)
    if gross > 0:
        fee_percentage = (fees / gross * HUNDRED).quantize(PERCENT_PLACES)
    else:
        fee_percentage = ZERO
    return CardReconciliationPreview(
        gross_selected=gross,
        net_received=net_received,
        fees=fees,
        fee_percentage=fee_percentage,
    )


class CardReconciliationService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.transfers = TransferService(store, actor)
        self.runner = WorkflowRunner(store)

    @staticmethod
    def _check_clearing_account(account_id: str) -> None:
        if account_id not in CARD_CLEARING_ACCOUNTS:
            raise ValidationFailed(
                f"'{account_id}' is not a card clearing account"
            )

    def pending(self, clearing_account_id: str | None = None) -> list[Transaction]:
        """Unsettled card legs, for one clearing account or all of them."""
        if clearing_account_id is not None:
            self._check_clearing_account(clearing_account_id)
            account_ids = [clearing_account_id]
        else:
            account_ids = list(CARD_CLEARING_ACCOUNTS)

        pending = []
        for account_id in account_ids:
            pending += self.store.query_transactions(
                TransactionFilter(to_id=account_id, is_settled=False)
            )
        return sorted(pending, key=lambda t: t.date, reverse=True)

    def _selected(
        self, clearing_account_id: str, transaction_ids: list[str]
    ) -> list[Transaction]:
        self._check_clearing_account(clearing_account_id)
        if not transaction_ids:
            raise ValidationFailed("Select at least one card transaction")

        selected = []
        for tx_id in dict.fromkeys(transaction_ids):
            txn = self.store.get_transaction(tx_id)
            if txn is None:
                raise ValidationFailed(transaction_not_found(tx_id))
            if txn.to_account_id != clearing_account_id:
                raise ValidationFailed(
                    f"Transaction '{tx_id}' is not on {clearing_account_id}"
                )
            if txn.is_settled:
                raise ValidationFailed(f"Transaction '{tx_id}' is already settled")
            selected.append(txn)
        return selected

    def preview(
        self,
        transaction_ids: list[str],
        net_received: Decimal,
        clearing_account_id: str = CARD_CLEARING,
    ) -> CardReconciliationPreview:
        selected = self._selected(clearing_account_id, transaction_ids)
        gross = sum((t.amount for t in selected), ZERO)
        return compute_fees(gross, net_received)

    def finalize(self, request: CardReconciliationRequest) -> WorkflowAttempt:
        """
        Move the payout to the bank, book the fees and close the
        selected legs:
            clearing -> bank                  net received   (Settlement)
            clearing -> operational expenses  fees, if any   (Bank Charges)
            selected legs flagged settled in one batch
        """
        kind = WorkflowKind.CARD_RECONCILIATION
        attempt = self.runner.resume(kind, request.idempotency_key)
        if attempt is None:
            if request.net_received <= 0:
                raise ValidationFailed("Net amount received must be positive")
            preview = self.preview(
                request.transaction_ids,
                request.net_received,
                request.clearing_account_id,
            )
            plan = CardReconciliationPlan(
                **preview.model_dump(),
                clearing_account_id=request.clearing_account_id,
                transaction_ids=list(dict.fromkeys(request.transaction_ids)),
            )
            attempt = self.runner.start(kind, plan, request.idempotency_key)
        plan = CardReconciliationPlan.model_validate(attempt.plan)

        clearing = plan.clearing_account_id
        processor = PROCESSOR_NAMES.get(clearing, "Hiking Bar")
        steps = [
            WorkflowStep("settlement", lambda tx_id: self.transfers.transfer(
                clearing, BANK, plan.net_received,
                f"Bank Settlement: {processor} Batch", "Settlement",
                {"is_settled": True},
                transaction_id=tx_id,
            )),
            WorkflowStep("fees", lambda tx_id: self.transfers.transfer(
                clearing, OPERATIONAL_EXPENSES, plan.fees,
                f"Card Fees: {plan.fee_percentage:.2f}%", "Bank Charges",
                {"is_settled": True},
                transaction_id=tx_id,
            )),
            WorkflowStep("mark_settled", lambda _: self.transfers.mark_settled(
                plan.transaction_ids
            )),
        ]
        attempt = self.runner.run(attempt, steps)
        logger.info(
            "Reconciled %d card transactions on %s: gross %s, net %s, fees %s",
            len(plan.transaction_ids), clearing,
            plan.gross_selected, plan.net_received, plan.fees,
        )
        return attempt
