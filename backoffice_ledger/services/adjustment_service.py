"""
Balance adjustment — correcting a balance with an equity plug.

Balances are never set directly. A correction is a transfer
between the target and the equity account for the difference:
    new > current    equity -> target
    new < current    target -> equity
"""

import logging
from decimal import Decimal

from backoffice_ledger.chart import EQUITY
from backoffice_ledger.errors import ValidationFailed
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.transaction import Transaction
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.services.transfer_service import TransferService
from backoffice_ledger.store.base import LedgerStore

logger = logging.getLogger(__name__)

CATEGORY_ADJUSTMENT = "Adjustment"


class AdjustmentService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.registry = AccountRegistry(store)
        self.transfers = TransferService(store, actor)

    def adjust_balance(
        self, account_id: str, new_balance: Decimal, reason: str
    ) -> Transaction | None:
        """
        Post the equity transfer for new_balance - current balance.

        Returns None when the balance already matches. The
        transfer direction depends only on the sign of the
        difference, so on LIABILITY and EQUITY targets the
        resulting balance moves the other way.
        """
        if account_id == EQUITY:
            raise ValidationFailed("The equity account cannot adjust itself")
        account = self.registry.get(account_id)
        diff = Decimal(str(new_balance)) - account.balance
        description = f"Manual Adjustment: {reason}"

        if diff > 0:
            txn = self.transfers.transfer(
                EQUITY, account_id, diff, description, CATEGORY_ADJUSTMENT
            )
        elif diff < 0:
            txn = self.transfers.transfer(
                account_id, EQUITY, -diff, description, CATEGORY_ADJUSTMENT
            )
        else:
            logger.debug("Account %s already at %s", account_id, new_balance)
            return None

        logger.info(
            "Adjusted %s from %s by %s: %s", account_id, account.balance, diff, reason
        )
        return txn
