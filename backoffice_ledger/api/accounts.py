"""
Account API endpoints: the chart of accounts and balance
adjustments.
"""

from fastapi import APIRouter, Depends, HTTPException

from backoffice_ledger.api.errors import http_error
from backoffice_ledger.errors import LedgerError
from backoffice_ledger.schemas.account import (
    Account,
    AccountCreate,
    BalanceAdjustRequest,
)
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.schemas.transaction import Transaction
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.services.adjustment_service import AdjustmentService
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_actor, get_store
from backoffice_ledger.store.sandbox import SandboxLedgerStore

router = APIRouter(tags=["Accounts"])


@router.post("/accounts/seed")
def seed_accounts(store: LedgerStore = Depends(get_store)):
    """Create the initial chart of accounts if none exist yet."""
    try:
        seeded = AccountRegistry(store).seed_if_empty()
        return {"seeded": seeded}
    except LedgerError as e:
        raise http_error(e)


@router.get("/accounts", response_model=list[Account])
def list_accounts(store: LedgerStore = Depends(get_store)):
    try:
        return AccountRegistry(store).list_accounts()
    except LedgerError as e:
        raise http_error(e)


@router.post("/accounts", response_model=Account, status_code=201)
def create_account(
    request: AccountCreate,
    store: LedgerStore = Depends(get_store),
):
    """Add an account to the chart. It starts with a zero balance."""
    try:
        return AccountRegistry(store).create_account(request)
    except LedgerError as e:
        raise http_error(e)


@router.get("/accounts/{account_id}", response_model=Account)
def get_account(
    account_id: str,
    store: LedgerStore = Depends(get_store),
):
    try:
        return AccountRegistry(store).get(account_id)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/accounts/{account_id}/adjust",
    response_model=Transaction | None,
)
def adjust_balance(
    account_id: str,
    request: BalanceAdjustRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """
    Bring an account to a counted balance.

    Posts the difference as a transfer against the equity
    account. Returns null when the balance already matches.
    """
    service = AdjustmentService(store, actor)
    try:
        return service.adjust_balance(
            account_id, request.new_balance, request.reason
        )
    except LedgerError as e:
        raise http_error(e)


@router.post("/sandbox/reset", status_code=204)
def reset_sandbox(store: LedgerStore = Depends(get_store)):
    """Wipe all sandbox data. Not available against the live store."""
    if not isinstance(store, SandboxLedgerStore):
        raise HTTPException(
            status_code=400, detail="Reset is only available in sandbox mode"
        )
    store.reset()
