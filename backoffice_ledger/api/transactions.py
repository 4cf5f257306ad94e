"""
Transaction API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backoffice_ledger.api.errors import http_error
from backoffice_ledger.errors import LedgerError, transaction_not_found
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.schemas.transaction import (
    Transaction,
    TransactionFilter,
    TransferRequest,
)
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_actor, get_store

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("/transfer", response_model=Transaction, status_code=201)
def transfer(
    request: TransferRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Move money between two accounts of the chart."""
    service = TransferService(store, actor)
    try:
        return service.internal_transfer(
            request.from_account_id,
            request.to_account_id,
            request.amount,
            request.description,
        )
    except LedgerError as e:
        raise http_error(e)


@router.get("", response_model=list[Transaction])
def list_transactions(
    from_id: Optional[str] = None,
    to_id: Optional[str] = None,
    category: Optional[str] = None,
    date_from: Optional[int] = None,
    staff_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    contact_id: Optional[str] = None,
    shift_id: Optional[str] = None,
    is_settled: Optional[bool] = None,
    limit: int = Query(default=100, ge=1, le=1000),
    store: LedgerStore = Depends(get_store),
):
    """Transactions matching every given filter, newest first."""
    criteria = TransactionFilter(
        from_id=from_id,
        to_id=to_id,
        category=category,
        date_from=date_from,
        staff_id=staff_id,
        customer_id=customer_id,
        contact_id=contact_id,
        shift_id=shift_id,
        is_settled=is_settled,
    )
    try:
        return store.query_transactions(criteria)[:limit]
    except LedgerError as e:
        raise http_error(e)


@router.get("/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: str,
    store: LedgerStore = Depends(get_store),
):
    try:
        txn = store.get_transaction(transaction_id)
    except LedgerError as e:
        raise http_error(e)
    if txn is None:
        raise HTTPException(
            status_code=404, detail=transaction_not_found(transaction_id)
        )
    return txn
