"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends

from backoffice_ledger.config import get_settings
from backoffice_ledger.errors import StoreUnavailable
from backoffice_ledger.store.base import LedgerStore
from backoffice_ledger.store.factory import get_store

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(store: LedgerStore = Depends(get_store)):
    """
    Return application health status including store connectivity.

    The store check reads the chart of accounts. If it fails,
    the endpoint reports the instance as degraded.
    """
    try:
        store.list_accounts()
        store_status = "healthy"
    except StoreUnavailable:
        store_status = "unhealthy"

    return {
        "status": "healthy" if store_status == "healthy" else "degraded",
        "service": "backoffice-ledger",
        "mode": get_settings().LEDGER_MODE,
        "store": store_status,
    }
