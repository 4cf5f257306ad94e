"""
Shift API endpoints: opening, closing and the desk movements
made during a shift.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException

from backoffice_ledger.api.errors import http_error
from backoffice_ledger.chart import BANK
from backoffice_ledger.errors import LedgerError
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.schemas.shift import (
    TILL_DENOMINATIONS,
    Shift,
    ShiftClosePreview,
    ShiftCloseRequest,
    TillMovementRequest,
)
from backoffice_ledger.schemas.transaction import Transaction
from backoffice_ledger.services.shift_service import ShiftService
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_actor, get_store

router = APIRouter(prefix="/shifts", tags=["Shifts"])


@router.post("/open", response_model=Shift, status_code=201)
def open_shift(
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Open a shift with the current till balance as its float."""
    service = ShiftService(store, actor)
    try:
        return service.open_shift()
    except LedgerError as e:
        raise http_error(e)


@router.get("/current", response_model=Shift)
def current_shift(store: LedgerStore = Depends(get_store)):
    try:
        shift = ShiftService(store).current_shift()
    except LedgerError as e:
        raise http_error(e)
    if shift is None:
        raise HTTPException(status_code=404, detail="No shift is open")
    return shift


@router.get("", response_model=list[Shift])
def list_shifts(store: LedgerStore = Depends(get_store)):
    try:
        return store.list_shifts()
    except LedgerError as e:
        raise http_error(e)


@router.get("/denominations", response_model=list[Decimal])
def till_denominations():
    """Note and coin values for counting the drawer at close."""
    return TILL_DENOMINATIONS


@router.post("/close/preview", response_model=ShiftClosePreview)
def preview_close(
    request: ShiftCloseRequest,
    store: LedgerStore = Depends(get_store),
):
    """Expected cash and variance for the open shift. Writes nothing."""
    try:
        return ShiftService(store).preview_close(request)
    except LedgerError as e:
        raise http_error(e)


@router.post("/close", response_model=Shift)
def close_shift(
    request: ShiftCloseRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """
    Close the open shift.

    Re-send the same idempotency_key to resume a close that
    failed part way.
    """
    service = ShiftService(store, actor)
    try:
        return service.close_shift(request)
    except LedgerError as e:
        raise http_error(e)


# --- Desk movements ---

@router.post("/expense", response_model=Transaction, status_code=201)
def till_expense(
    request: TillMovementRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Pay a small expense out of the drawer."""
    service = TransferService(store, actor)
    try:
        return service.log_till_expense(request.amount, request.description)
    except LedgerError as e:
        raise http_error(e)


@router.post("/top-up", response_model=Transaction, status_code=201)
def top_up_float(
    request: TillMovementRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Add cash to the drawer from another account (bank by default)."""
    service = TransferService(store, actor)
    try:
        return service.top_up_float(request.amount, request.account_id or BANK)
    except LedgerError as e:
        raise http_error(e)


@router.post("/bank-drop", response_model=Transaction, status_code=201)
def bank_drop(
    request: TillMovementRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Take cash out of the drawer into another account (bank by default)."""
    service = TransferService(store, actor)
    try:
        return service.bank_drop(request.amount, request.account_id or BANK)
    except LedgerError as e:
        raise http_error(e)
