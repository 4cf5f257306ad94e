"""Business logic services."""

from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.services.adjustment_service import AdjustmentService
from backoffice_ledger.services.card_reconciliation import CardReconciliationService
from backoffice_ledger.services.client_debt import ClientDebtService
from backoffice_ledger.services.expense_service import ExpenseService
from backoffice_ledger.services.partner_settlement import PartnerSettlementService
from backoffice_ledger.services.payroll_service import PayrollService
from backoffice_ledger.services.shift_service import ShiftService
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.services.workflow import WorkflowRunner, WorkflowStep

__all__ = [
    "AccountRegistry",
    "AdjustmentService",
    "CardReconciliationService",
    "ClientDebtService",
    "ExpenseService",
    "PartnerSettlementService",
    "PayrollService",
    "ShiftService",
    "TransferService",
    "WorkflowRunner",
    "WorkflowStep",
]
