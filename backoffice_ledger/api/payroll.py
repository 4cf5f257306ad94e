"""
Staff and payroll API endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends

from backoffice_ledger.api.errors import http_error
from backoffice_ledger.errors import LedgerError
from backoffice_ledger.models.enums import PayoutType
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.schemas.payroll import (
    AdvanceRequest,
    HolidayRecord,
    PayrollPreparation,
    PayrollRequest,
    StaffCreate,
    StaffMember,
)
from backoffice_ledger.schemas.transaction import Transaction
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.payroll_service import PayrollService
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_actor, get_store

router = APIRouter(tags=["Payroll"])


@router.post("/staff", response_model=StaffMember, status_code=201)
def add_staff(
    request: StaffCreate,
    store: LedgerStore = Depends(get_store),
):
    try:
        return PayrollService(store).add_staff(request)
    except LedgerError as e:
        raise http_error(e)


@router.get("/staff", response_model=list[StaffMember])
def list_staff(store: LedgerStore = Depends(get_store)):
    try:
        return PayrollService(store).list_staff()
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/staff/{staff_id}/holidays/{day}",
    response_model=HolidayRecord | None,
)
def toggle_holiday(
    staff_id: str,
    day: date,
    store: LedgerStore = Depends(get_store),
):
    """Book the day off, or cancel it if already booked (returns null)."""
    try:
        return PayrollService(store).toggle_holiday(staff_id, day)
    except LedgerError as e:
        raise http_error(e)


@router.get("/holidays", response_model=list[HolidayRecord])
def list_holidays(
    staff_id: str | None = None,
    store: LedgerStore = Depends(get_store),
):
    try:
        return PayrollService(store).list_holidays(staff_id)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/staff/{staff_id}/advances",
    response_model=Transaction,
    status_code=201,
)
def issue_advance(
    staff_id: str,
    request: AdvanceRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Hand out an advance, deducted at the next payout."""
    service = PayrollService(store, actor)
    try:
        return service.issue_advance(
            staff_id, request.amount, request.source_account_id
        )
    except LedgerError as e:
        raise http_error(e)


@router.get("/staff/{staff_id}/payroll", response_model=PayrollPreparation)
def prepare_payout(
    staff_id: str,
    payout_type: PayoutType = PayoutType.SALARY,
    store: LedgerStore = Depends(get_store),
):
    """Default figures for a payout before it is confirmed."""
    try:
        return PayrollService(store).prepare(staff_id, payout_type)
    except LedgerError as e:
        raise http_error(e)


@router.post("/payroll", response_model=WorkflowAttempt, status_code=201)
def disburse(
    request: PayrollRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    service = PayrollService(store, actor)
    try:
        return service.disburse(request)
    except LedgerError as e:
        raise http_error(e)
