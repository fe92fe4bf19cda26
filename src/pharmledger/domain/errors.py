"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidRateError(ValidationError):
    """Exchange rate missing or not positive for a foreign-currency amount."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ReferentialIntegrityError(DomainError):
    """Operation blocked because posted history references the entity."""


class UnbalancedEntryError(DomainError):
    """Journal lines do not balance."""

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal entry is unbalanced: debits {total_debit} != credits {total_credit}"
        )


class LockedCostError(DomainError):
    """Landed cost of a batch is locked and cannot change."""

    def __init__(self, batch_id: int, message: str | None = None):
        self.batch_id = batch_id
        super().__init__(message or f"Landed cost of batch {batch_id} is locked")


class InsufficientStockError(DomainError):
    """Requested quantity conflicts with stock already consumed."""

    def __init__(self, batch_id: int, requested: Decimal, available: Decimal, message: str):
        self.batch_id = batch_id
        self.requested = requested
        self.available = available
        super().__init__(message)


class IntegrityMismatchError(DomainError):
    """A compiled report failed its reconciliation cross-check."""

    def __init__(self, report: str, left: Decimal, right: Decimal, detail: str):
        self.report = report
        self.left = left
        self.right = right
        super().__init__(f"{report} does not reconcile: {detail} ({left} != {right})")


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_code_not_found(code: str) -> str:
    """Return message for an unknown account code."""
    return f"Account code '{code}' not found"


def party_not_found(party_id: int) -> str:
    """Return message for missing party."""
    return f"Party {party_id} not found"


def bank_account_not_found(bank_account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {bank_account_id} not found"


def batch_not_found(batch_id: int) -> str:
    """Return message for missing batch."""
    return f"Batch {batch_id} not found"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def duplicate_document(source_type: str, number: str) -> str:
    """Return message for a document number that has already been posted."""
    return f"{source_type.replace('_', ' ').capitalize()} '{number}' has already been posted"


def account_delete_blocked(account_id: int, line_count: int, child_count: int) -> str:
    """Return message when account has posted lines or child accounts."""
    parts = []
    if line_count > 0:
        parts.append(f"{line_count} journal line{'s' if line_count != 1 else ''}")
    if child_count > 0:
        parts.append(f"{child_count} child account{'s' if child_count != 1 else ''}")
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Deactivate it instead."
    )
