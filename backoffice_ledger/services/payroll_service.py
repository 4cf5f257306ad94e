"""
Payroll service — staff, advances and payouts.

A payout deducts the staff member's outstanding advances and an
optional loan repayment from the base amount:

    net pay = base - outstanding advances - loan repayment

Negative net pay is rejected before anything is written. On
confirm, up to three transfers run in order:
    source -> payroll expenses                 net pay
    staff advances -> payroll expenses         outstanding advances
    staff advances -> payroll expenses         loan repayment
and the loan repayment is taken off the staff member's loan
balance, never below zero.
"""

import logging
from datetime import date
from decimal import Decimal

from backoffice_ledger.chart import PAYROLL_EXPENSES, STAFF_ADVANCES
from backoffice_ledger.errors import (
    AccountNotFound,
    NegativeNetPayout,
    NotFoundError,
    account_not_found,
    entity_not_found,
)
from backoffice_ledger.models.enums import PayoutType, WorkflowKind
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.payroll import (
    HolidayRecord,
    PayrollPlan,
    PayrollPreparation,
    PayrollRequest,
    StaffCreate,
    StaffMember,
)
from backoffice_ledger.schemas.transaction import Transaction, TransactionFilter, TransferMetadata
from backoffice_ledger.schemas.workflow import WorkflowAttempt
from backoffice_ledger.services.transfer_service import (
    CATEGORY_STAFF_ADVANCE,
    TransferService,
)
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

CATEGORY_PAYROLL = "Staff Payroll"
CATEGORY_PAYROLL_INTERNAL = "Staff Payroll Internal"
CATEGORY_LOAN_REPAYMENT = "Staff Loan Repayment"


class PayrollService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.transfers = TransferService(store, actor)
        self.runner = WorkflowRunner(store)

    # --- Staff ---

    def add_staff(self, request: StaffCreate) -> StaffMember:
        staff = StaffMember(
            id=new_id("staff_"),
            name=request.name,
            role=request.role,
            salary=request.salary,
            loan_balance=request.loan_balance,
            loan_installment=request.loan_installment,
            joined_at=now_ms(),
        )
        return self.store.save_staff(staff)

    def list_staff(self) -> list[StaffMember]:
        return self.store.list_staff()

    def get_staff(self, staff_id: str) -> StaffMember:
        staff = self.store.get_staff(staff_id)
        if staff is None:
            raise NotFoundError(entity_not_found("Staff member", staff_id))
        return staff

    # --- Holidays ---

    def toggle_holiday(self, staff_id: str, day: date) -> HolidayRecord | None:
        """
        Book the day off for the staff member, or cancel it if it is
        already booked. Returns the new record, or None on cancel.
        """
        staff = self.get_staff(staff_id)
        day_str = day.isoformat()
        for existing in self.store.list_holidays(staff.id):
            if existing.date == day_str:
                self.store.delete_holiday(existing.id)
                logger.info("Holiday cancelled: %s on %s", staff.id, day_str)
                return None
        holiday = HolidayRecord(id=new_id("hol_"), staff_id=staff.id, date=day_str)
        logger.info("Holiday booked: %s on %s", staff.id, day_str)
        return self.store.save_holiday(holiday)

    def list_holidays(self, staff_id: str | None = None) -> list[HolidayRecord]:
        return self.store.list_holidays(staff_id)

    def issue_advance(
        self, staff_id: str, amount: Decimal, source_account_id: str
    ) -> Transaction | None:
        return self.transfers.issue_advance(staff_id, amount, source_account_id)

    # --- Payouts ---

    def _posted_total(self, staff_id: str, category: str) -> Decimal:
        txns = self.store.query_transactions(TransactionFilter(
            staff_id=staff_id, category=category, is_posted=True,
        ))
        return sum((t.amount for t in txns), ZERO)

    def outstanding_advances(self, staff_id: str) -> Decimal:
        """Advances issued to the staff member not yet cleared by payroll."""
        issued = self._posted_total(staff_id, CATEGORY_STAFF_ADVANCE)
        cleared = self._posted_total(staff_id, CATEGORY_PAYROLL_INTERNAL)
        return issued - cleared

    def prepare(self, staff_id: str, payout_type: PayoutType) -> PayrollPreparation:
        """Default figures for a payout, before the operator adjusts them."""
        staff = self.get_staff(staff_id)
        advances = self.outstanding_advances(staff.id)
        if payout_type == PayoutType.SALARY:
            base = staff.salary
            repayment = min(staff.loan_installment, staff.loan_balance)
        else:
            base = ZERO
            repayment = ZERO
        return PayrollPreparation(
            staff_id=staff.id,
            payout_type=payout_type,
            base_amount=base,
            outstanding_advances=advances,
            loan_repayment=repayment,
            net_pay=base - advances - repayment,
        )

    def disburse(self, request: PayrollRequest) -> WorkflowAttempt:
        kind = WorkflowKind.PAYROLL
        attempt = self.runner.resume(kind, request.idempotency_key)
        if attempt is None:
            plan = self._plan(request)
            attempt = self.runner.start(kind, plan, request.idempotency_key)
        plan = PayrollPlan.model_validate(attempt.plan)
        tags = TransferMetadata(staff_id=plan.staff_id)

        def update_loan_balance(_):
            staff = self.get_staff(plan.staff_id)
            self.store.save_staff(
                staff.model_copy(update={"loan_balance": plan.new_loan_balance})
            )

        steps = [
            WorkflowStep("net_pay", lambda tx_id: self.transfers.transfer(
                plan.source_account_id, PAYROLL_EXPENSES, plan.net_pay,
                f"{plan.payout_type.value} Payout (Net): {plan.staff_name}",
                CATEGORY_PAYROLL, tags, transaction_id=tx_id,
            )),
            WorkflowStep("clear_advances", lambda tx_id: self.transfers.transfer(
                STAFF_ADVANCES, PAYROLL_EXPENSES, plan.outstanding_advances,
                f"Clearing Advances for {plan.staff_name} via Payroll",
                CATEGORY_PAYROLL_INTERNAL, tags, transaction_id=tx_id,
            )),
        ]
        if plan.loan_repayment > 0:
            steps += [
                WorkflowStep("loan_repayment", lambda tx_id: self.transfers.transfer(
                    STAFF_ADVANCES, PAYROLL_EXPENSES, plan.loan_repayment,
                    f"Loan Repayment: {plan.staff_name}",
                    CATEGORY_LOAN_REPAYMENT, tags, transaction_id=tx_id,
                )),
                WorkflowStep("loan_balance", update_loan_balance),
            ]

        attempt = self.runner.run(attempt, steps)
        logger.info(
            "Paid %s %s to %s (advances %s, loan %s)",
            plan.payout_type.value, plan.net_pay, plan.staff_id,
            plan.outstanding_advances, plan.loan_repayment,
        )
        return attempt

    def _plan(self, request: PayrollRequest) -> PayrollPlan:
        if self.store.get_account(request.source_account_id) is None:
            raise AccountNotFound(account_not_found(request.source_account_id))
        staff = self.get_staff(request.staff_id)
        defaults = self.prepare(staff.id, request.payout_type)

        if request.payout_type == PayoutType.SALARY:
            base = staff.salary
        else:
            base = request.base_amount
        repayment = (
            defaults.loan_repayment
            if request.loan_repayment is None
            else request.loan_repayment
        )
        advances = defaults.outstanding_advances
        net_pay = base - advances - repayment
        if net_pay < 0:
            raise NegativeNetPayout(
                f"Net payout would be {net_pay}; lower the loan repayment "
                f"or raise the base amount"
            )

        return PayrollPlan(
            staff_id=staff.id,
            staff_name=staff.name,
            payout_type=request.payout_type,
            base_amount=base,
            outstanding_advances=advances,
            loan_repayment=repayment,
            net_pay=net_pay,
            source_account_id=request.source_account_id,
            new_loan_balance=max(ZERO, staff.loan_balance - repayment),
        )
