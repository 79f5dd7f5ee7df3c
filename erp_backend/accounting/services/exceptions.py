# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for the posting engine. Every engine operation is
all-or-nothing: raising one of these inside transaction.atomic rolls back
every write made by the operation.

`code` is the machine-readable kind returned to API clients.
"""

from __future__ import annotations

from decimal import Decimal


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    code = "accounting_error"


class ConfigurationError(AccountingServiceError):
    """Raised when required accounts are missing, inactive or not postable."""

    code = "configuration_error"

    def __init__(self, message: str, *, missing_codes=()):
        super().__init__(message)
        self.missing_codes = list(missing_codes)


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry cannot be created."""

    code = "journal_entry_error"


class ImbalancedEntryError(JournalEntryCreationError):
    """Raised when debits and credits differ by more than the tolerance."""

    code = "imbalanced_entry"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        super().__init__(
            f"Journal entry not balanced: debits={total_debit} credits={total_credit}"
        )
        self.total_debit = total_debit
        self.total_credit = total_credit


class InsufficientStockError(AccountingServiceError):
    """Raised when a posting would take a product's stock below zero."""

    code = "insufficient_stock"

    def __init__(self, *, product, available: Decimal, requested: Decimal):
        super().__init__(
            f"Insufficient stock for {product.code} ({product.name}): "
            f"available={available} requested={requested}"
        )
        self.product_id = product.pk
        self.available = available
        self.requested = requested


class AllocationLimitError(AccountingServiceError):
    """Raised when a payment allocation breaks a payment or invoice limit."""

    code = "allocation_limit"


class NotFoundError(AccountingServiceError):
    """Raised when a referenced document, payment or allocation does not exist."""

    code = "not_found"


class ConcurrencyConflictError(AccountingServiceError):
    """Raised when a row changed underneath an operation (version mismatch)."""

    code = "concurrency_conflict"


class InvalidDocumentStateError(AccountingServiceError):
    """Raised when a transition is not allowed from the document's current state."""

    code = "invalid_state"


class InvalidAmountError(AccountingServiceError):
    """Raised when a monetary or quantity value cannot be parsed."""

    code = "invalid_amount"
