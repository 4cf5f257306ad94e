"""
Hiking-bar partner settlement.

Partner sales are tracked twice: as a PENDING entry in the
partner ledger, and as money owed on the partner receivable.
Settling an entry splits its amount over up to four
destinations, which must add up to the entry amount:

    cash            -> till
    card            -> partner card clearing (unsettled, waits for the processor)
    service charge  -> service fee revenue
    contra / drinks -> operational expenses
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from backoffice_ledger.chart import (
    OPERATIONAL_EXPENSES,
    PARTNER_CARD_CLEARING,
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
from backoffice_ledger.models.enums import PartnerEntryStatus, WorkflowKind
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.settlement import (
    PartnerEntry,
    PartnerSalesRequest,
    PartnerSettlementPlan,
    PartnerSettlementRequest,
)
from backoffice_ledger.schemas.transaction import TransferMetadata
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)

ALLOCATION_TOLERANCE = Decimal("0.01")


class PartnerSettlementService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.actor = actor
        self.transfers = TransferService(store, actor)
        self.runner = WorkflowRunner(store)

    def record_sales(self, request: PartnerSalesRequest) -> PartnerEntry:
        """Open a PENDING partner entry and raise the matching receivable."""
        now = now_ms()
        description = request.description
        if not description:
            day = datetime.fromtimestamp(now / 1000, tz=timezone.utc)
            description = f"Partner Sales: {day.date().isoformat()}"

        entry = self.store.save_partner_entry(PartnerEntry(
            id=new_id("pe_"),
            date=now,
            amount=request.amount,
            description=description,
            status=PartnerEntryStatus.PENDING,
        ))
        self.transfers.transfer(
            REVENUE, PARTNER_RECEIVABLE, request.amount,
            "Partner Receivable Generation", "Partner Revenue",
            transaction_id=f"{entry.id}:revenue",
        )
        logger.info("Recorded partner sales %s for %s", entry.id, entry.amount)
        return entry

    def pending(self) -> list[PartnerEntry]:
        return self.store.list_partner_entries(PartnerEntryStatus.PENDING)

    def list_entries(self) -> list[PartnerEntry]:
        return self.store.list_partner_entries()

    def settle(self, request: PartnerSettlementRequest) -> PartnerEntry:
        kind = WorkflowKind.PARTNER_SETTLEMENT
        attempt = self.runner.resume(kind, request.idempotency_key)
        if attempt is None:
            plan = self._plan(request)
            attempt = self.runner.start(kind, plan, request.idempotency_key)
        plan = PartnerSettlementPlan.model_validate(attempt.plan)
        alloc = plan.allocation
        label = plan.description

        def reconcile(_):
            entry = self.store.get_partner_entry(plan.entry_id)
            if entry is None:
                raise NotFoundError(entity_not_found("Partner entry", plan.entry_id))
            self.store.save_partner_entry(entry.model_copy(update={
                "status": PartnerEntryStatus.RECONCILED,
                "reconciled_at": plan.reconciled_at,
                "reconciled_by": plan.reconciled_by,
                "settlement_data": alloc.model_dump(mode="json"),
            }))

        steps = [
            WorkflowStep("cash", lambda tx_id: self.transfers.transfer(
                PARTNER_RECEIVABLE, TILL, alloc.cash,
                f"Hiking Bar Cash Settlement: {label}", "Partner Settlement",
                transaction_id=tx_id,
            )),
            WorkflowStep("card", lambda tx_id: self.transfers.transfer(
                PARTNER_RECEIVABLE, PARTNER_CARD_CLEARING, alloc.card,
                f"Hiking Bar Card Settlement: {label}", "Partner Settlement",
                TransferMetadata(is_settled=False),
                transaction_id=tx_id,
            )),
            WorkflowStep("service_charge", lambda tx_id: self.transfers.transfer(
                PARTNER_RECEIVABLE, REVENUE, alloc.service_charge,
                f"Hiking Bar Service Fee: {label}", "Partner Fee",
                transaction_id=tx_id,
            )),
            WorkflowStep("contra", lambda tx_id: self.transfers.transfer(
                PARTNER_RECEIVABLE, OPERATIONAL_EXPENSES, alloc.contra,
                f"Hiking Bar Contra/Drinks: {label}", "Contra Settlement",
                transaction_id=tx_id,
            )),
            WorkflowStep("reconcile", reconcile),
        ]
        self.runner.run(attempt, steps)
        logger.info("Settled partner entry %s (%s)", plan.entry_id, alloc.total)
        return self.store.get_partner_entry(plan.entry_id)

    def _plan(self, request: PartnerSettlementRequest) -> PartnerSettlementPlan:
        entry = self.store.get_partner_entry(request.entry_id)
        if entry is None:
            raise NotFoundError(entity_not_found("Partner entry", request.entry_id))
        if entry.status != PartnerEntryStatus.PENDING:
            raise ConflictError(f"Partner entry '{entry.id}' is already reconciled")

        total = request.allocation.total
        if abs(total - entry.amount) > ALLOCATION_TOLERANCE:
            raise ValidationFailed(
                f"Allocations add up to {total}, expected {entry.amount}"
            )
        return PartnerSettlementPlan(
            entry_id=entry.id,
            description=entry.description,
            allocation=request.allocation,
            reconciled_at=now_ms(),
            reconciled_by=self.actor.display_name,
        )
