"""
Backend selection.

LEDGER_MODE decides, once per process, which LedgerStore every
request gets. Services only ever see the LedgerStore interface.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from backoffice_ledger.config import Settings, get_settings
from backoffice_ledger.models.base import get_db
from backoffice_ledger.schemas.actor import SANDBOX_ACTOR, Actor
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.feed import ChangeFeed
from backoffice_ledger.store.sandbox import SandboxLedgerStore
from backoffice_ledger.store.sql import SQLLedgerStore

logger = logging.getLogger(__name__)

# One feed per process so that subscribers see writes from every
# request, whichever session issued them.
change_feed = ChangeFeed()

_sandbox_store: Optional[SandboxLedgerStore] = None


def get_sandbox_store(settings: Settings) -> SandboxLedgerStore:
    global _sandbox_store
    if _sandbox_store is None:
        _sandbox_store = SandboxLedgerStore(settings.SANDBOX_PATH, change_feed)
        logger.info(
            "Sandbox ledger store ready (mirror: %s)",
            settings.SANDBOX_PATH or "memory only",
        )
    return _sandbox_store


def create_store(settings: Settings, db: Optional[Session] = None) -> LedgerStore:
    if settings.is_sandbox:
        return get_sandbox_store(settings)
    if db is None:
        raise ValueError("Live ledger mode needs a database session")
    return SQLLedgerStore(db, change_feed)


# --- Dependencies for FastAPI ---

def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    return create_store(get_settings(), db)


def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_name: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None),
) -> Actor:
    """
    Identity of the caller, as passed by the fronting application.

    Authentication happens upstream; the ledger only records who
    wrote what.
    """
    settings = get_settings()
    if x_actor_id:
        return Actor(
            id=x_actor_id,
            display_name=x_actor_name or x_actor_id,
            role=x_actor_role or "STAFF",
        )
    if settings.is_sandbox:
        return SANDBOX_ACTOR
    return Actor(
        id=settings.DEFAULT_ACTOR_ID,
        display_name=settings.DEFAULT_ACTOR_ID,
        role="SYSTEM",
    )
