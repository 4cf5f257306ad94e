"""
Back-office Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backoffice_ledger.config import get_settings
from backoffice_ledger.errors import StoreUnavailable
from backoffice_ledger.logging_config import configure_logging
from backoffice_ledger.models.base import SessionLocal
from backoffice_ledger.services.account_registry import AccountRegistry
from backoffice_ledger.store.factory import create_store
from backoffice_ledger.api.health import router as health_router
from backoffice_ledger.api.accounts import router as accounts_router
from backoffice_ledger.api.transactions import router as transactions_router
from backoffice_ledger.api.shifts import router as shifts_router
from backoffice_ledger.api.settlements import router as settlements_router
from backoffice_ledger.api.payroll import router as payroll_router
from backoffice_ledger.api.expenses import router as expenses_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The sandbox seeds itself on first read
    if not settings.is_sandbox:
        db = SessionLocal()
        try:
            AccountRegistry(create_store(settings, db)).seed_if_empty()
        except StoreUnavailable as e:
            logger.warning("Could not seed the chart of accounts: %s", e)
        finally:
            db.close()
    logger.info("%s started in %s mode", settings.APP_NAME, settings.LEDGER_MODE)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Account ledger engine for restaurant back-office operations",
    lifespan=lifespan,
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(shifts_router)
app.include_router(settlements_router)
app.include_router(payroll_router)
app.include_router(expenses_router)
