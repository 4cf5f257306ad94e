"""
Account registry — the chart of accounts.

Seeds the initial chart once and answers lookups. Balances are
never changed here: every balance change goes through the
transfer engine.
"""

import logging

from backoffice_ledger.chart import INITIAL_ACCOUNTS
from backoffice_ledger.errors import AccountNotFound, ConflictError, account_not_found
from backoffice_ledger.schemas.account import Account, AccountCreate
from backoffice_ledger.store.base import InsertAccount, LedgerStore

logger = logging.getLogger(__name__)


class AccountRegistry:

    def __init__(self, store: LedgerStore):
        self.store = store

    def seed_if_empty(self) -> bool:
        """
        Create the initial chart in one atomic batch.

        Does nothing when any account already exists. Returns True
        if the chart was seeded by this call.
        """
        if self.store.list_accounts():
            return False
        self.store.batch_write([InsertAccount(a) for a in INITIAL_ACCOUNTS])
        logger.info("Seeded %d accounts", len(INITIAL_ACCOUNTS))
        return True

    def find(self, account_id: str) -> Account | None:
        return self.store.get_account(account_id)

    def get(self, account_id: str) -> Account:
        account = self.store.get_account(account_id)
        if account is None:
            raise AccountNotFound(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[Account]:
        return self.store.list_accounts()

    def create_account(self, request: AccountCreate) -> Account:
        """Add an account to the chart with a zero balance."""
        if self.store.get_account(request.id) is not None:
            raise ConflictError(f"Account '{request.id}' already exists")
        account = Account(
            id=request.id,
            name=request.name,
            type=request.type,
            icon=request.icon,
        )
        self.store.batch_write([InsertAccount(account)])
        logger.info("Created account %s (%s)", account.id, account.type.value)
        return account
