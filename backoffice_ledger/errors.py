"""
Ledger error types and shared error messages.

Domain errors subclass ValueError so the HTTP layer can keep
treating them as bad requests. StoreUnavailable does not: it is
an infrastructure failure, not a problem with the request.
"""


class LedgerError(Exception):
    """Root of every error raised by the ledger."""


class DomainError(LedgerError, ValueError):
    """A business rule rejected the operation."""


class ValidationFailed(DomainError):
    """Workflow input is invalid. Raised before any transfer executes."""


class NegativeNetPayout(ValidationFailed):
    """Payroll deductions exceed the base amount."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class AccountNotFound(NotFoundError):
    """A transfer or lookup referenced an unknown account id."""


class ConflictError(DomainError):
    """Uniqueness or state conflict (duplicate id, second open shift, ...)."""


class StoreUnavailable(LedgerError):
    """The ledger store failed to apply a write or answer a read."""


def account_not_found(account_id: str) -> str:
    return f"Account '{account_id}' not found"


def transaction_not_found(transaction_id: str) -> str:
    return f"Transaction '{transaction_id}' not found"


def entity_not_found(kind: str, entity_id: str) -> str:
    return f"{kind} '{entity_id}' not found"
