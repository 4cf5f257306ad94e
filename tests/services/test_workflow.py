"""
Tests for resumable workflow attempts.

A failure part way through a workflow leaves the committed legs
in place; re-running with the same idempotency key finishes the
remaining legs without posting the committed ones again.
"""

from decimal import Decimal

import pytest
from pydantic import BaseModel

from backoffice_ledger.chart import TILL
from backoffice_ledger.errors import ConflictError, StoreUnavailable
from backoffice_ledger.models.enums import WorkflowKind, WorkflowStatus
from backoffice_ledger.schemas.settlement import CustomerCreate
from backoffice_ledger.schemas.shift import ShiftCloseRequest
from backoffice_ledger.schemas.transaction import TransactionFilter
from backoffice_ledger.services.client_debt import ClientDebtService
from backoffice_ledger.services.shift_service import ShiftService
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import InsertTransaction
from backoffice_ledger.store.sandbox import SandboxLedgerStore


class NotePlan(BaseModel):
    note: str = "test"


class FlakyStore(SandboxLedgerStore):
    """Fails the first write of a transaction whose id ends with fail_on."""

    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = fail_on

    def batch_write(self, ops):
        for op in ops:
            if (self.fail_on and isinstance(op, InsertTransaction)
                    and op.transaction.id.endswith(self.fail_on)):
                self.fail_on = None
                raise StoreUnavailable("timeout")
        super().batch_write(ops)


class TestRunner:

    def test_steps_run_in_order_with_step_ids(self, sandbox_store):
        seen = []
        runner = WorkflowRunner(sandbox_store)
        attempt = runner.start(WorkflowKind.PAYROLL, NotePlan(), "key-1")

        done = runner.run(attempt, [
            WorkflowStep("a", seen.append),
            WorkflowStep("b", seen.append),
        ])

        assert seen == ["key-1:a", "key-1:b"]
        assert done.status == WorkflowStatus.COMPLETED
        assert done.completed_steps == ["a", "b"]

    def test_failure_is_recorded_and_reraised(self, sandbox_store):
        runner = WorkflowRunner(sandbox_store)
        attempt = runner.start(WorkflowKind.PAYROLL, NotePlan())

        def boom(_):
            raise StoreUnavailable("down")

        with pytest.raises(StoreUnavailable):
            runner.run(attempt, [WorkflowStep("a", lambda _: None), WorkflowStep("b", boom)])

        stored = sandbox_store.get_workflow_attempt(attempt.id)
        assert stored.status == WorkflowStatus.FAILED
        assert stored.completed_steps == ["a"]
        assert stored.error == "down"

    def test_completed_attempt_cannot_be_rerun(self, sandbox_store):
        runner = WorkflowRunner(sandbox_store)
        attempt = runner.start(WorkflowKind.PAYROLL, NotePlan(), "key-2")
        runner.run(attempt, [])

        with pytest.raises(ConflictError, match="already completed"):
            runner.resume(WorkflowKind.PAYROLL, "key-2")

    def test_key_of_another_workflow_kind_rejected(self, sandbox_store):
        runner = WorkflowRunner(sandbox_store)
        runner.start(WorkflowKind.PAYROLL, NotePlan(), "key-3")

        with pytest.raises(ConflictError):
            runner.resume(WorkflowKind.SHIFT_CLOSE, "key-3")


class TestShiftCloseResume:

    def test_resume_finishes_without_double_posting(self):
        store = FlakyStore(fail_on=":credit_bills")
        customer = ClientDebtService(store).add_customer(CustomerCreate(name="C1"))
        service = ShiftService(store)
        service.open_shift()
        request = ShiftCloseRequest(
            total_sales=Decimal("1000"),
            card_payments=Decimal("200"),
            credit_bills=Decimal("100"),
            credit_bill_customer_id=customer.id,
            hiking_bar_sales=Decimal("50"),
            actual_cash=Decimal("800"),
            idempotency_key="close-1",
        )

        with pytest.raises(StoreUnavailable):
            service.close_shift(request)

        # Legs before the failure stay committed, the shift stays open
        assert store.get_account(TILL).balance == Decimal("800")
        assert service.current_shift() is not None
        attempt = store.get_workflow_attempt("close-1")
        assert attempt.status == WorkflowStatus.FAILED
        assert "local_cash" in attempt.completed_steps

        closed = service.close_shift(request)

        assert closed.variance == Decimal("0")
        assert store.get_account(TILL).balance == Decimal("800")
        assert len(store.query_transactions(TransactionFilter(to_id=TILL))) == 1
        assert len(store.list_partner_entries()) == 1
        assert store.get_workflow_attempt("close-1").status == WorkflowStatus.COMPLETED

        with pytest.raises(ConflictError):
            service.close_shift(request)
