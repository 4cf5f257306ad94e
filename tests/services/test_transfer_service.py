"""
Tests for the transfer engine.

Tests cover:
- The sign convention for every account type
- No-op on zero and negative amounts
- Unknown accounts
- One atomic batch per transfer
- Deterministic ids for replayed steps
- Shift tagging of till movements
- Transaction immutability
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import Text

from backoffice_ledger import models
from backoffice_ledger.chart import (
    BANK,
    CUSTOMER_RECEIVABLES,
    EQUITY,
    OPERATIONAL_EXPENSES,
    PENDING_BILLS,
    REVENUE,
    STAFF_CARD,
    TILL,
)
from backoffice_ledger.errors import (
    AccountNotFound,
    StoreUnavailable,
    ValidationFailed,
)
from backoffice_ledger.models.enums import AccountType
from backoffice_ledger.schemas.account import AccountCreate
from backoffice_ledger.schemas.transaction import TransactionFilter
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.services.shift_service import ShiftService
from backoffice_ledger.services.transfer_service import (
    TransferService,
    from_delta,
    to_delta,
)
from backoffice_ledger.store.base import (
    IncrementBalance,
    InsertTransaction,
    UpdateTransaction,
)
from backoffice_ledger.store.sandbox import SandboxLedgerStore


def balance(store, account_id):
    return store.get_account(account_id).balance


def all_transactions(store):
    return store.query_transactions(TransactionFilter())


# --- Sign convention ---

class TestSignConvention:

    @pytest.mark.parametrize("account_type, expected", [
        (AccountType.ASSET, Decimal("-10")),
        (AccountType.RECEIVABLE, Decimal("-10")),
        (AccountType.EXPENSE, Decimal("-10")),
        (AccountType.REVENUE, Decimal("-10")),
        (AccountType.LIABILITY, Decimal("10")),
        (AccountType.EQUITY, Decimal("10")),
    ])
    def test_from_delta(self, account_type, expected):
        assert from_delta(account_type, Decimal("10")) == expected

    @pytest.mark.parametrize("account_type, expected", [
        (AccountType.ASSET, Decimal("10")),
        (AccountType.RECEIVABLE, Decimal("10")),
        (AccountType.EXPENSE, Decimal("10")),
        (AccountType.REVENUE, Decimal("10")),
        (AccountType.LIABILITY, Decimal("-10")),
        (AccountType.EQUITY, Decimal("-10")),
    ])
    def test_to_delta(self, account_type, expected):
        assert to_delta(account_type, Decimal("10")) == expected

    def test_asset_to_expense(self, ledger):
        TransferService(ledger).transfer(
            TILL, OPERATIONAL_EXPENSES, Decimal("30"), "Milk", "Operations"
        )
        assert balance(ledger, TILL) == Decimal("120")
        assert balance(ledger, OPERATIONAL_EXPENSES) == Decimal("30")

    def test_revenue_is_debit_normal_as_source(self, ledger):
        TransferService(ledger).transfer(
            REVENUE, TILL, Decimal("100"), "Sales", "Revenue"
        )
        assert balance(ledger, REVENUE) == Decimal("-100")
        assert balance(ledger, TILL) == Decimal("250")

    def test_liability_grows_when_money_leaves_it(self, ledger):
        TransferService(ledger).transfer(
            PENDING_BILLS, OPERATIONAL_EXPENSES, Decimal("80"), "Fish", "Operations"
        )
        assert balance(ledger, PENDING_BILLS) == Decimal("80")
        assert balance(ledger, OPERATIONAL_EXPENSES) == Decimal("80")

    def test_liability_shrinks_when_money_arrives(self, ledger):
        service = TransferService(ledger)
        service.transfer(PENDING_BILLS, OPERATIONAL_EXPENSES, Decimal("80"), "Fish", "Operations")
        service.transfer(BANK, PENDING_BILLS, Decimal("80"), "Settled: Fish", "Debt Settlement")
        assert balance(ledger, PENDING_BILLS) == Decimal("0")
        assert balance(ledger, BANK) == Decimal("4920")

    def test_equity_source_and_liability_target(self, ledger):
        TransferService(ledger).transfer(
            EQUITY, STAFF_CARD, Decimal("25"), "Plug", "Adjustment"
        )
        assert balance(ledger, EQUITY) == Decimal("25")
        assert balance(ledger, STAFF_CARD) == Decimal("-25")


# --- No-op amounts ---

class TestNonPositiveAmounts:

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_no_balance_change_and_no_transaction(self, ledger, amount):
        before = {a.id: a.balance for a in ledger.list_accounts()}

        result = TransferService(ledger).transfer(
            TILL, BANK, amount, "Nothing", "Transfer"
        )

        assert result is None
        assert {a.id: a.balance for a in ledger.list_accounts()} == before
        assert all_transactions(ledger) == []


# --- Failures ---

class TestUnknownAccounts:

    def test_unknown_source_rejected(self, ledger):
        with pytest.raises(AccountNotFound, match="ghost"):
            TransferService(ledger).transfer("ghost", TILL, Decimal("5"), "x", "y")
        assert balance(ledger, TILL) == Decimal("150")
        assert all_transactions(ledger) == []

    def test_unknown_destination_rejected(self, ledger):
        with pytest.raises(AccountNotFound):
            TransferService(ledger).transfer(TILL, "ghost", Decimal("5"), "x", "y")
        assert balance(ledger, TILL) == Decimal("150")

    def test_account_not_found_is_a_value_error(self, ledger):
        with pytest.raises(ValueError):
            TransferService(ledger).transfer("ghost", TILL, Decimal("5"), "x", "y")


class RecordingStore(SandboxLedgerStore):
    """Sandbox store that records every batch it is given."""

    def __init__(self):
        super().__init__()
        self.batches = []

    def batch_write(self, ops):
        self.batches.append(list(ops))
        super().batch_write(ops)


class FailingStore(SandboxLedgerStore):
    """Sandbox store whose atomic writes always fail."""

    def batch_write(self, ops):
        if any(isinstance(op, InsertTransaction) for op in ops):
            raise StoreUnavailable("network down")
        super().batch_write(ops)


class TestAtomicity:

    def test_transfer_is_one_batch_of_three_ops(self):
        store = RecordingStore()
        AccountRegistry(store).seed_if_empty()
        store.batches.clear()

        txn = TransferService(store).transfer(
            TILL, OPERATIONAL_EXPENSES, Decimal("12.50"), "Ice", "Operations"
        )

        assert len(store.batches) == 1
        ops = store.batches[0]
        assert len(ops) == 3
        assert ops[0] == IncrementBalance(TILL, Decimal("-12.50"))
        assert ops[1] == IncrementBalance(OPERATIONAL_EXPENSES, Decimal("12.50"))
        assert ops[2] == InsertTransaction(txn)

    def test_store_failure_leaves_no_partial_state(self):
        store = FailingStore()

        with pytest.raises(StoreUnavailable):
            TransferService(store).transfer(
                TILL, OPERATIONAL_EXPENSES, Decimal("10"), "Ice", "Operations"
            )

        assert balance(store, TILL) == Decimal("150")
        assert balance(store, OPERATIONAL_EXPENSES) == Decimal("0")
        assert all_transactions(store) == []

    def test_failed_op_inside_batch_rolls_back_earlier_ops(self, ledger):
        with pytest.raises(AccountNotFound):
            ledger.batch_write([
                IncrementBalance(TILL, Decimal("-10")),
                IncrementBalance("ghost", Decimal("10")),
            ])
        assert balance(ledger, TILL) == Decimal("150")


# --- Transaction record ---

class TestTransactionRecord:

    def test_fields_and_defaults(self, ledger, actor):
        txn = TransferService(ledger, actor).transfer(
            TILL, BANK, Decimal("40"), "Drop", "Transfer"
        )
        stored = ledger.get_transaction(txn.id)

        assert stored.amount == Decimal("40")
        assert stored.from_account_id == TILL
        assert stored.to_account_id == BANK
        assert stored.created_by == "u_alice"
        assert stored.is_settled is True
        assert stored.is_posted is True

    def test_metadata_is_carried(self, ledger):
        txn = TransferService(ledger).transfer(
            REVENUE, CUSTOMER_RECEIVABLES, Decimal("100"), "Credit", "Customer Credit",
            {"is_settled": False, "customer_id": "C1", "notes": "table 4"},
        )
        stored = ledger.get_transaction(txn.id)

        assert stored.is_settled is False
        assert stored.customer_id == "C1"
        assert stored.notes == "table 4"

    def test_deterministic_id_posts_once(self, ledger):
        service = TransferService(ledger)
        first = service.transfer(TILL, BANK, Decimal("40"), "Drop", "Transfer",
                                 transaction_id="wf_1:drop")
        second = service.transfer(TILL, BANK, Decimal("40"), "Drop", "Transfer",
                                  transaction_id="wf_1:drop")

        assert first.id == second.id == "wf_1:drop"
        assert balance(ledger, TILL) == Decimal("110")
        assert len(all_transactions(ledger)) == 1

    def test_till_movements_tagged_with_open_shift(self, ledger):
        shift = ShiftService(ledger).open_shift()
        service = TransferService(ledger)

        till_txn = service.log_till_expense(Decimal("5"), "Bread")
        other_txn = service.transfer(BANK, OPERATIONAL_EXPENSES, Decimal("5"), "Gas", "Operations")

        assert ledger.get_transaction(till_txn.id).shift_id == shift.id
        assert ledger.get_transaction(other_txn.id).shift_id is None


class TestImmutability:

    def test_only_is_settled_may_change(self, ledger):
        txn = TransferService(ledger).transfer(
            REVENUE, CUSTOMER_RECEIVABLES, Decimal("100"), "Credit", "Customer Credit",
            {"is_settled": False},
        )
        with pytest.raises(ValidationFailed):
            ledger.batch_write([UpdateTransaction(txn.id, {"amount": Decimal("1")})])
        with pytest.raises(ValidationFailed):
            ledger.batch_write([UpdateTransaction(txn.id, {"is_settled": False})])

        stored = ledger.get_transaction(txn.id)
        assert stored.amount == Decimal("100")
        assert stored.is_settled is False

    def test_mark_settled_flips_flag_without_touching_balances(self, ledger):
        service = TransferService(ledger)
        txn = service.transfer(
            REVENUE, CUSTOMER_RECEIVABLES, Decimal("100"), "Credit", "Customer Credit",
            {"is_settled": False},
        )
        before = balance(ledger, CUSTOMER_RECEIVABLES)

        service.mark_settled([txn.id])

        assert ledger.get_transaction(txn.id).is_settled is True
        assert balance(ledger, CUSTOMER_RECEIVABLES) == before

    def test_transaction_record_is_frozen(self, ledger):
        txn = TransferService(ledger).transfer(TILL, BANK, Decimal("1"), "x", "Transfer")
        with pytest.raises(ValidationError):
            txn.amount = Decimal("999")


# --- Everyday movements ---

class TestDeskMovements:

    def test_internal_transfer_requires_distinct_accounts(self, ledger):
        with pytest.raises(ValidationFailed):
            TransferService(ledger).internal_transfer(TILL, TILL, Decimal("5"))

    def test_top_up_and_bank_drop(self, ledger):
        service = TransferService(ledger)
        top_up = service.top_up_float(Decimal("50"))
        drop = service.bank_drop(Decimal("20"))

        assert top_up.category == "Capital"
        assert drop.category == "Transfer"
        assert balance(ledger, TILL) == Decimal("180")
        assert balance(ledger, BANK) == Decimal("4970")

    def test_new_account_starts_at_zero_and_can_receive(self, ledger):
        AccountRegistry(ledger).create_account(AccountCreate(
            id="tips_jar", name="Tips Jar", type=AccountType.ASSET,
        ))
        TransferService(ledger).transfer(TILL, "tips_jar", Decimal("7"), "Tips", "Internal Transfer")
        assert balance(ledger, "tips_jar") == Decimal("7")


# --- Stored precision and text ---

class TestAmountPrecision:

    def test_below_four_places_is_a_no_op(self, ledger):
        result = TransferService(ledger).transfer(
            TILL, BANK, Decimal("0.00001"), "Dust", "Transfer"
        )

        assert result is None
        assert balance(ledger, TILL) == Decimal("150")
        assert all_transactions(ledger) == []

    def test_amount_rounded_to_four_places(self, ledger):
        txn = TransferService(ledger).transfer(
            TILL, BANK, Decimal("1.23456"), "Odd", "Transfer"
        )

        assert txn.amount == Decimal("1.2346")
        assert ledger.get_transaction(txn.id).amount == txn.amount
        assert balance(ledger, TILL) == Decimal("148.7654")
        assert balance(ledger, BANK) == Decimal("5001.2346")


class TestLongDescriptions:

    def test_description_columns_are_unbounded(self):
        assert isinstance(models.Transaction.__table__.c.description.type, Text)
        assert isinstance(models.PartnerEntry.__table__.c.description.type, Text)

    def test_prefixed_description_kept_whole(self, ledger):
        txn = TransferService(ledger).log_till_expense(Decimal("5"), "x" * 255)

        stored = ledger.get_transaction(txn.id)
        assert len(stored.description) == len("Shift Expense: ") + 255
        assert stored.description.endswith("x" * 255)
