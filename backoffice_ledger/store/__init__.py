"""Ledger persistence: the LedgerStore contract and its backends."""

from backoffice_ledger.store.base import (
    Collection,
    IncrementBalance,
    InsertAccount,
    InsertTransaction,
    LedgerStore,
    SetBalance,
    UpdateTransaction,
)
from backoffice_ledger.store.feed import ChangeFeed
from backoffice_ledger.store.sandbox import SandboxLedgerStore
from backoffice_ledger.store.sql import SQLLedgerStore

__all__ = [
    "ChangeFeed",
    "Collection",
    "IncrementBalance",
    "InsertAccount",
    "InsertTransaction",
    "LedgerStore",
    "SandboxLedgerStore",
    "SQLLedgerStore",
    "SetBalance",
    "UpdateTransaction",
]
