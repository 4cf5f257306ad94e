"""
Translation of ledger errors into HTTP errors.
"""

from fastapi import HTTPException

from backoffice_ledger.errors import (
    ConflictError,
    LedgerError,
    NotFoundError,
    StoreUnavailable,
)


def http_error(e: LedgerError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, StoreUnavailable):
        return HTTPException(status_code=503, detail="Ledger store unavailable")
    return HTTPException(status_code=400, detail=str(e))
