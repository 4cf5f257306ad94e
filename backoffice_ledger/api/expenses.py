"""
Expense API endpoints: expenses, vendor bills, templates and
recurring expenses.
"""

from fastapi import APIRouter, Depends

from backoffice_ledger.api.errors import http_error
from backoffice_ledger.errors import LedgerError
from backoffice_ledger.schemas.actor import Actor
from backoffice_ledger.schemas.expense import (
    BillRecordRequest,
    BillSettleRequest,
    ExpenseLogRequest,
    ExpenseTemplate,
    RecurringExpense,
)
from backoffice_ledger.schemas.settlement import Contact, ContactCreate
from backoffice_ledger.schemas.transaction import Transaction
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.expense_service import ExpenseService
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_actor, get_store

router = APIRouter(tags=["Expenses"])


@router.post("/expenses", response_model=Transaction, status_code=201)
def log_expense(
    request: ExpenseLogRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    service = ExpenseService(store, actor)
    try:
        return service.log_expense(request)
    except LedgerError as e:
        raise http_error(e)


# --- Vendors and bills ---

@router.post("/contacts", response_model=Contact, status_code=201)
def add_contact(
    request: ContactCreate,
    store: LedgerStore = Depends(get_store),
):
    try:
        return ExpenseService(store).add_contact(request)
    except LedgerError as e:
        raise http_error(e)


@router.get("/contacts", response_model=list[Contact])
def list_contacts(store: LedgerStore = Depends(get_store)):
    try:
        return ExpenseService(store).list_contacts()
    except LedgerError as e:
        raise http_error(e)


@router.post("/expenses/bills", response_model=Transaction, status_code=201)
def record_bill(
    request: BillRecordRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Record a bill received but not paid yet."""
    service = ExpenseService(store, actor)
    try:
        return service.record_bill(request)
    except LedgerError as e:
        raise http_error(e)


@router.get("/expenses/bills", response_model=list[Transaction])
def pending_bills(store: LedgerStore = Depends(get_store)):
    try:
        return ExpenseService(store).pending_bills()
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/expenses/bills/{transaction_id}/settle",
    response_model=WorkflowAttempt,
)
def settle_bill(
    transaction_id: str,
    request: BillSettleRequest,
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    service = ExpenseService(store, actor)
    try:
        return service.settle_bill(transaction_id, request)
    except LedgerError as e:
        raise http_error(e)


# --- Templates and recurring ---

@router.get("/expenses/templates", response_model=list[ExpenseTemplate])
def list_templates(store: LedgerStore = Depends(get_store)):
    try:
        return ExpenseService(store).list_templates()
    except LedgerError as e:
        raise http_error(e)


@router.delete("/expenses/templates/{template_id}", status_code=204)
def delete_template(
    template_id: str,
    store: LedgerStore = Depends(get_store),
):
    try:
        ExpenseService(store).delete_template(template_id)
    except LedgerError as e:
        raise http_error(e)


@router.get("/expenses/recurring", response_model=list[RecurringExpense])
def list_recurring(store: LedgerStore = Depends(get_store)):
    try:
        return ExpenseService(store).list_recurring()
    except LedgerError as e:
        raise http_error(e)


@router.post("/expenses/recurring/generate", response_model=list[Transaction])
def generate_recurring(
    store: LedgerStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Post every recurring expense that has fallen due."""
    service = ExpenseService(store, actor)
    try:
        return service.generate_recurring()
    except LedgerError as e:
        raise http_error(e)
