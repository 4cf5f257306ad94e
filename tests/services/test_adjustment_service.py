"""
Tests for manual balance adjustments against the equity account.
"""

from decimal import Decimal

import pytest

from backoffice_ledger.chart import EQUITY, PENDING_BILLS, TILL
from backoffice_ledger.errors import AccountNotFound, ValidationFailed
from backoffice_ledger.services.adjustment_service import AdjustmentService


@pytest.fixture
def adjustments(ledger, actor):
    return AdjustmentService(ledger, actor)


class TestAdjustBalance:

    def test_raise_balance_draws_from_equity(self, ledger, adjustments):
        txn = adjustments.adjust_balance(TILL, Decimal("200"), "Miscount")

        assert txn.from_account_id == EQUITY
        assert txn.to_account_id == TILL
        assert txn.amount == Decimal("50")
        assert txn.category == "Adjustment"
        assert txn.description == "Manual Adjustment: Miscount"
        assert txn.created_by == "u_alice"
        assert ledger.get_account(TILL).balance == Decimal("200")
        assert ledger.get_account(EQUITY).balance == Decimal("50")

    def test_lower_balance_pays_into_equity(self, ledger, adjustments):
        txn = adjustments.adjust_balance(TILL, Decimal("100"), "Counted short")

        assert txn.from_account_id == TILL
        assert txn.to_account_id == EQUITY
        assert ledger.get_account(TILL).balance == Decimal("100")
        assert ledger.get_account(EQUITY).balance == Decimal("-50")

    def test_matching_balance_is_noop(self, ledger, adjustments):
        assert adjustments.adjust_balance(TILL, Decimal("150"), "Check") is None
        assert ledger.get_account(EQUITY).balance == Decimal("0")

    def test_credit_normal_target_moves_the_other_way(self, ledger, adjustments):
        # Direction follows the sign of the difference only
        adjustments.adjust_balance(PENDING_BILLS, Decimal("40"), "Opening bills")
        assert ledger.get_account(PENDING_BILLS).balance == Decimal("-40")

    def test_equity_cannot_be_adjusted(self, adjustments):
        with pytest.raises(ValidationFailed):
            adjustments.adjust_balance(EQUITY, Decimal("10"), "Nope")

    def test_unknown_account(self, adjustments):
        with pytest.raises(AccountNotFound):
            adjustments.adjust_balance("petty_cash", Decimal("10"), "Nope")
