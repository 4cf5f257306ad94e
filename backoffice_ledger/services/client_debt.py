"""
Client debt — collecting what customers owe on credit bills.
"""

import logging
from collections import defaultdict
from decimal import Decimal

from backoffice_ledger.chart import CUSTOMER_RECEIVABLES, DEBT_DEPOSIT_ACCOUNTS
from backoffice_ledger.errors import (
    NotFoundError,
    ValidationFailed,
    entity_not_found,
    transaction_not_found,
)
from backoffice_ledger.models.enums import WorkflowKind
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.settlement import (
    ClientDebtPlan,
    ClientDebtRequest,
    Customer,
    CustomerCreate,
    CustomerDebtSummary,
    DebtStatement,
    DebtStatementLine,
)
from backoffice_ledger.schemas.transaction import (
    Transaction,
    TransactionFilter,
    TransferMetadata,
)
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ClientDebtService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.transfers = TransferService(store, actor)
        self.runner = WorkflowRunner(store)

    # --- Customers ---

    def add_customer(self, request: CustomerCreate) -> Customer:
        customer = Customer(
            id=new_id("cust_"),
            name=request.name,
            phone=request.phone,
            email=request.email,
            created_at=now_ms(),
        )
        return self.store.save_customer(customer)

    def list_customers(self) -> list[Customer]:
        return self.store.list_customers()

    def _customer(self, customer_id: str) -> Customer:
        customer = self.store.get_customer(customer_id)
        if customer is None:
            raise NotFoundError(entity_not_found("Customer", customer_id))
        return customer

    # --- Outstanding debt ---

    def pending(self, customer_id: str | None = None) -> list[Transaction]:
        return self.store.query_transactions(TransactionFilter(
            to_id=CUSTOMER_RECEIVABLES,
            customer_id=customer_id,
            is_settled=False,
        ))

    def pending_by_customer(self) -> list[CustomerDebtSummary]:
        groups: dict[str, list[Transaction]] = defaultdict(list)
        for txn in self.pending():
            if txn.customer_id:
                groups[txn.customer_id].append(txn)
        return [
            CustomerDebtSummary(
                customer_id=customer_id,
                count=len(txns),
                total=sum((t.amount for t in txns), ZERO),
            )
            for customer_id, txns in sorted(groups.items())
        ]

    def statement(self, customer_id: str) -> DebtStatement:
        customer = self._customer(customer_id)
        lines = [
            DebtStatementLine(
                transaction_id=t.id,
                date=t.date,
                amount=t.amount,
                description=t.description,
            )
            for t in sorted(self.pending(customer_id), key=lambda t: t.date)
        ]
        return DebtStatement(
            customer_id=customer.id,
            customer_name=customer.name,
            lines=lines,
            total_outstanding=sum((line.amount for line in lines), ZERO),
        )

    # --- Collection ---

    def finalize(self, request: ClientDebtRequest) -> WorkflowAttempt:
        """
        Deposit a customer's payment and close the bills it covers.

        One transfer of the selected total from customer receivables
        to the bank or the till, then one batch flagging the
        selected bills settled.
        """
        kind = WorkflowKind.CLIENT_DEBT
        attempt = self.runner.resume(kind, request.idempotency_key)
        if attempt is None:
            plan = self._plan(request)
            attempt = self.runner.start(kind, plan, request.idempotency_key)
        plan = ClientDebtPlan.model_validate(attempt.plan)

        steps = [
            WorkflowStep("collection", lambda tx_id: self.transfers.transfer(
                CUSTOMER_RECEIVABLES, plan.destination_account_id, plan.selected_total,
                f"Client Debt Collection: {plan.customer_name}", "Client Settlement",
                TransferMetadata(customer_id=plan.customer_id, is_settled=True),
                transaction_id=tx_id,
            )),
            WorkflowStep("mark_settled", lambda _: self.transfers.mark_settled(
                plan.transaction_ids
            )),
        ]
        attempt = self.runner.run(attempt, steps)
        logger.info(
            "Collected %s from customer %s into %s",
            plan.selected_total, plan.customer_id, plan.destination_account_id,
        )
        return attempt

    def _plan(self, request: ClientDebtRequest) -> ClientDebtPlan:
        if request.destination_account_id not in DEBT_DEPOSIT_ACCOUNTS:
            raise ValidationFailed(
                f"Debt can only be deposited into {', '.join(DEBT_DEPOSIT_ACCOUNTS)}"
            )
        if not request.transaction_ids:
            raise ValidationFailed("Select at least one bill to settle")
        customer = self._customer(request.customer_id)

        transaction_ids = list(dict.fromkeys(request.transaction_ids))
        total = ZERO
        for tx_id in transaction_ids:
            txn = self.store.get_transaction(tx_id)
            if txn is None:
                raise ValidationFailed(transaction_not_found(tx_id))
            if (txn.to_account_id != CUSTOMER_RECEIVABLES
                    or txn.customer_id != customer.id):
                raise ValidationFailed(
                    f"Transaction '{tx_id}' is not a bill of customer {customer.id}"
                )
            if txn.is_settled:
                raise ValidationFailed(f"Transaction '{tx_id}' is already settled")
            total += txn.amount

        return ClientDebtPlan(
            customer_id=customer.id,
            customer_name=customer.name,
            transaction_ids=transaction_ids,
            destination_account_id=request.destination_account_id,
            selected_total=total,
        )
