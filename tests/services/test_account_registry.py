"""
Tests for the AccountRegistry.
"""

from decimal import Decimal

import pytest

from backoffice_ledger.chart import BANK, INITIAL_ACCOUNTS, TILL
from backoffice_ledger.errors import AccountNotFound, ConflictError
from backoffice_ledger.models.enums import AccountType
from backoffice_ledger.schemas.account import AccountCreate
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.store.feed import ChangeFeed
from backoffice_ledger.store.sql import SQLLedgerStore


class TestSeeding:

    def test_seed_creates_initial_chart(self, db_session):
        registry = AccountRegistry(SQLLedgerStore(db_session, ChangeFeed()))

        assert registry.seed_if_empty() is True

        accounts = {a.id: a for a in registry.list_accounts()}
        assert len(accounts) == 14
        assert accounts[TILL].balance == Decimal("150")
        assert accounts[BANK].balance == Decimal("5000")
        assert accounts["equity_adjustments"].type == AccountType.EQUITY

    def test_seed_twice_changes_nothing(self, ledger):
        TransferService(ledger).transfer(TILL, BANK, Decimal("50"), "Drop", "Transfer")
        before = {a.id: a.balance for a in ledger.list_accounts()}

        assert AccountRegistry(ledger).seed_if_empty() is False

        after = {a.id: a.balance for a in ledger.list_accounts()}
        assert after == before
        assert len(after) == len(INITIAL_ACCOUNTS)

    def test_sandbox_seeds_on_first_read(self, sandbox_store):
        assert sandbox_store.get_account(TILL).balance == Decimal("150")


class TestLookup:

    def test_get_unknown_raises(self, ledger):
        with pytest.raises(AccountNotFound):
            AccountRegistry(ledger).get("nope")

    def test_find_unknown_returns_none(self, ledger):
        assert AccountRegistry(ledger).find("nope") is None


class TestCreateAccount:

    def test_create_account(self, ledger):
        account = AccountRegistry(ledger).create_account(AccountCreate(
            id="petty_cash", name="Petty Cash", type=AccountType.ASSET, icon="Coins",
        ))
        assert account.balance == Decimal("0")
        assert ledger.get_account("petty_cash").name == "Petty Cash"

    def test_duplicate_id_rejected(self, ledger):
        with pytest.raises(ConflictError, match="already exists"):
            AccountRegistry(ledger).create_account(AccountCreate(
                id=TILL, name="Another till", type=AccountType.ASSET,
            ))
        assert ledger.get_account(TILL).name == "Register Cash (Till)"
