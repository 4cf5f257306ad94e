"""
Transfer engine — the one writer of account balances.

A transfer moves an amount from one account to another:
1. Amounts are rounded to the four places the ledger stores;
   an amount of zero or less after rounding is a silent no-op
2. Both accounts must exist
3. Each side's delta follows the sign convention of its type
4. The two balance increments and the transaction insert are
   submitted as one atomic batch

Sign convention:
    LIABILITY, EQUITY     from: +amount   to: -amount   (credit-normal)
    everything else       from: -amount   to: +amount   (debit-normal)

REVENUE sits in the debit-normal branch on purpose: it is only
ever used as a transfer source.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from backoffice_ledger.chart import (
    BANK,
    CREDIT_NORMAL_TYPES,
    OPERATIONAL_EXPENSES,
    STAFF_ADVANCES,
    TILL,
)
from backoffice_ledger.errors import (
    AccountNotFound,
    NotFoundError,
    ValidationFailed,
    account_not_found,
    entity_not_found,
)
from backoffice_ledger.models.enums import AccountType
from backoffice_ledger.schemas.actor import SYSTEM_ACTOR, Actor
from backoffice_ledger.schemas.transaction import Transaction, TransferMetadata
from backoffice_ledger.store.base import (
    IncrementBalance,
    InsertTransaction,
    LedgerStore,
    UpdateTransaction,
)
from backoffice_ledger.utils import new_id, now_ms

logger = logging.getLogger(__name__)

# Categories of the shift desk movements
CATEGORY_OPERATIONS = "Operations"
CATEGORY_CAPITAL = "Capital"
CATEGORY_TRANSFER = "Transfer"
CATEGORY_INTERNAL = "Internal Transfer"
CATEGORY_STAFF_ADVANCE = "Staff Advance"

AMOUNT_PLACES = Decimal("0.0001")


def from_delta(account_type: AccountType, amount: Decimal) -> Decimal:
    """Balance change of the account money leaves."""
    return amount if account_type in CREDIT_NORMAL_TYPES else -amount


def to_delta(account_type: AccountType, amount: Decimal) -> Decimal:
    """Balance change of the account money arrives in."""
    return -amount if account_type in CREDIT_NORMAL_TYPES else amount


class TransferService:

    def __init__(self, store: LedgerStore, actor: Actor = SYSTEM_ACTOR):
        self.store = store
        self.actor = actor

    def _account(self, account_id: str):
        account = self.store.get_account(account_id)
        if account is None:
            raise AccountNotFound(account_not_found(account_id))
        return account

    def transfer(
        self,
        from_id: str,
        to_id: str,
        amount: Decimal,
        description: str,
        category: str,
        metadata: TransferMetadata | dict | None = None,
        transaction_id: str | None = None,
    ) -> Transaction | None:
        """
        Move amount from one account to another.

        Returns the new transaction, or None when amount <= 0.
        With a transaction_id, a transaction already stored under
        that id is returned as is and nothing is written, so a
        replayed workflow step never posts twice.
        """
        amount = Decimal(str(amount)).quantize(AMOUNT_PLACES, rounding=ROUND_HALF_UP)
        if amount <= 0:
            logger.debug(
                "Skipping transfer %s -> %s: amount %s", from_id, to_id, amount
            )
            return None

        if transaction_id is not None:
            existing = self.store.get_transaction(transaction_id)
            if existing is not None:
                logger.debug("Transfer %s already posted", transaction_id)
                return existing

        from_account = self._account(from_id)
        to_account = self._account(to_id)

        if isinstance(metadata, dict):
            metadata = TransferMetadata(**metadata)
        metadata = metadata or TransferMetadata()

        shift_id = metadata.shift_id
        if shift_id is None and TILL in (from_id, to_id):
            open_shift = self.store.find_open_shift()
            if open_shift is not None:
                shift_id = open_shift.id

        txn = Transaction(
            id=transaction_id or new_id("tx_"),
            date=now_ms(),
            amount=amount,
            from_account_id=from_id,
            to_account_id=to_id,
            description=description,
            category=category,
            created_by=self.actor.id,
            is_settled=True if metadata.is_settled is None else metadata.is_settled,
            is_posted=True if metadata.is_posted is None else metadata.is_posted,
            due_date=metadata.due_date,
            contact_id=metadata.contact_id,
            customer_id=metadata.customer_id,
            staff_id=metadata.staff_id,
            shift_id=shift_id,
            notes=metadata.notes,
        )

        self.store.batch_write([
            IncrementBalance(from_id, from_delta(from_account.type, amount)),
            IncrementBalance(to_id, to_delta(to_account.type, amount)),
            InsertTransaction(txn),
        ])

        logger.info(
            "Transfer %s: %s -> %s %s (%s)",
            txn.id, from_id, to_id, amount, category,
        )
        return txn

    def mark_settled(self, transaction_ids: list[str]) -> None:
        """Close the given IOU legs in one atomic batch."""
        if not transaction_ids:
            return
        self.store.batch_write(
            [UpdateTransaction(tx_id) for tx_id in transaction_ids]
        )
        logger.info("Marked %d transactions settled", len(transaction_ids))

    # --- Everyday movements ---

    def internal_transfer(
        self,
        from_id: str,
        to_id: str,
        amount: Decimal,
        description: str = "Internal transfer",
    ) -> Transaction | None:
        if from_id == to_id:
            raise ValidationFailed(
                "Source and destination accounts must be different"
            )
        return self.transfer(from_id, to_id, amount, description, CATEGORY_INTERNAL)

    def log_till_expense(
        self, amount: Decimal, description: str
    ) -> Transaction | None:
        """Quick expense paid out of the drawer during a shift."""
        return self.transfer(
            TILL,
            OPERATIONAL_EXPENSES,
            amount,
            f"Shift Expense: {description}",
            CATEGORY_OPERATIONS,
        )

    def top_up_float(
        self, amount: Decimal, source_id: str = BANK
    ) -> Transaction | None:
        return self.transfer(
            source_id,
            TILL,
            amount,
            "Register Cash Injection (Float Top-up)",
            CATEGORY_CAPITAL,
        )

    def bank_drop(
        self, amount: Decimal, target_id: str = BANK
    ) -> Transaction | None:
        return self.transfer(
            TILL,
            target_id,
            amount,
            "Register Cash Deposit (Bank Drop)",
            CATEGORY_TRANSFER,
        )

    def issue_advance(
        self, staff_id: str, amount: Decimal, source_id: str = TILL
    ) -> Transaction | None:
        """Cash advance against the next payroll run."""
        staff = self.store.get_staff(staff_id)
        if staff is None:
            raise NotFoundError(entity_not_found("Staff member", staff_id))
        return self.transfer(
            source_id,
            STAFF_ADVANCES,
            amount,
            f"Advance issued to {staff.name}",
            CATEGORY_STAFF_ADVANCE,
            TransferMetadata(staff_id=staff.id),
        )
