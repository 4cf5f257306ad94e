"""
Settlement API endpoints: card batches, client debt and the
hiking-bar partner ledger.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from backoffice_ledger.api.errors import http_error
from backoffice_ledger.errors import LedgerError
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.schemas.settlement import (
    CardReconciliationPreview,
    CardReconciliationRequest,
    ClientDebtRequest,
    Customer,
    CustomerCreate,
    CustomerDebtSummary,
    DebtStatement,
    PartnerEntry,
    PartnerSalesRequest,
    PartnerSettlementRequest,
)
from backoffice_ledger.schemas.transaction import Transaction
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.card_reconciliation import CardReconciliationService
from backoffice_ledger.services.client_debt import ClientDebtService
from backoffice_ledger.services.partner_settlement import PartnerSettlementService
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_actor, get_store

router = APIRouter(tags=["Settlements"])


# --- Card batches ---

@router.get("/settlements/cards/pending", response_model=list[Transaction])
def pending_card_transactions(
    clearing_account_id: Optional[str] = None,
    store: LedgerStore = Depends(get_store),
):
    try:
        return CardReconciliationService(store).pending(clearing_account_id)
    except LedgerError as e:
        raise http_error(e)


@router.post("/settlements/cards/preview", response_model=CardReconciliationPreview)
def preview_card_batch(
    request: CardReconciliationRequest,
    store: LedgerStore = Depends(get_store),
):
    """Gross, fees and fee percentage for a selection. Writes nothing."""
    try:
        return CardReconciliationService(store).preview(
            request.transaction_ids,
            request.net_received,
            request.clearing_account_id,
        )
    except LedgerError as e:
        raise http_error(e)


@router.post("/settlements/cards", response_model=WorkflowAttempt, status_code=201)
def finalize_card_batch(
    request: CardReconciliationRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    service = CardReconciliationService(store, actor)
    try:
        return service.finalize(request)
    except LedgerError as e:
        raise http_error(e)


# --- Customers and client debt ---

@router.post("/customers", response_model=Customer, status_code=201)
def create_customer(
    request: CustomerCreate,
    store: LedgerStore = Depends(get_store),
):
    try:
        return ClientDebtService(store).add_customer(request)
    except LedgerError as e:
        raise http_error(e)


@router.get("/customers", response_model=list[Customer])
def list_customers(store: LedgerStore = Depends(get_store)):
    try:
        return ClientDebtService(store).list_customers()
    except LedgerError as e:
        raise http_error(e)


@router.get("/settlements/debts", response_model=list[CustomerDebtSummary])
def outstanding_debts(store: LedgerStore = Depends(get_store)):
    """Unsettled credit bills grouped by customer."""
    try:
        return ClientDebtService(store).pending_by_customer()
    except LedgerError as e:
        raise http_error(e)


@router.get(
    "/settlements/debts/{customer_id}/statement",
    response_model=DebtStatement,
)
def debt_statement(
    customer_id: str,
    store: LedgerStore = Depends(get_store),
):
    try:
        return ClientDebtService(store).statement(customer_id)
    except LedgerError as e:
        raise http_error(e)


@router.post("/settlements/debts", response_model=WorkflowAttempt, status_code=201)
def collect_debt(
    request: ClientDebtRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    service = ClientDebtService(store, actor)
    try:
        return service.finalize(request)
    except LedgerError as e:
        raise http_error(e)


# --- Hiking-bar partner ---

@router.get("/settlements/partner", response_model=list[PartnerEntry])
def pending_partner_entries(store: LedgerStore = Depends(get_store)):
    try:
        return PartnerSettlementService(store).pending()
    except LedgerError as e:
        raise http_error(e)


@router.post("/settlements/partner", response_model=PartnerEntry, status_code=201)
def record_partner_sales(
    request: PartnerSalesRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    service = PartnerSettlementService(store, actor)
    try:
        return service.record_sales(request)
    except LedgerError as e:
        raise http_error(e)


@router.post("/settlements/partner/settle", response_model=PartnerEntry)
def settle_partner_entry(
    request: PartnerSettlementRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """
    Split a partner entry over cash, card, service charge and
    contra. The four amounts must add up to the entry amount.
    """
    service = PartnerSettlementService(store, actor)
    try:
        return service.settle(request)
    except LedgerError as e:
        raise http_error(e)
