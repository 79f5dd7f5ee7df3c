# accounting/services/document_lifecycle.py

"""
======================================================
PATH: accounting/services/document_lifecycle.py
======================================================
DOCUMENT POSTING STATE MACHINE

    DRAFT --post--> POSTED --cancel--> CANCELLED

Single entry point for every document transition. The façade owns the
shared protocol; per-type handlers (sales/purchases/products services) own
the journal lines and stock effects:

1. lock the document row, check status and expected_version
2. require at least one item
3. handler: lock products (id order) + counterparty, validate, post the
   journal, move stock, adjust balances
4. write status / journal link / timestamps and bump version (CAS)

All of it runs in ONE transaction: any error leaves nothing behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable

from django.db import transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.concurrency import bump_version, check_expected_version, lock_row
from accounting.services.exceptions import InvalidDocumentStateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostingOutcome:
    journal_entry: JournalEntry | None
    cost_amount: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class DocumentHandler:
    model: type
    post: Callable
    cancel: Callable | None = None


def get_handlers() -> dict[str, DocumentHandler]:
    # Lazy imports: the domain apps import accounting, not the other way round.
    from products.models import InventoryAdjustment
    from products.services.adjustment_posting import post_inventory_adjustment
    from purchases.models import PurchaseInvoice, PurchaseReturn
    from purchases.services.invoice_posting import cancel_purchase_invoice, post_purchase_invoice
    from purchases.services.return_posting import post_purchase_return
    from sales.models import SalesInvoice, SalesReturn
    from sales.services.invoice_posting import cancel_sales_invoice, post_sales_invoice
    from sales.services.return_posting import post_sales_return

    return {
        "sales_invoice": DocumentHandler(SalesInvoice, post_sales_invoice, cancel_sales_invoice),
        "purchase_invoice": DocumentHandler(
            PurchaseInvoice, post_purchase_invoice, cancel_purchase_invoice
        ),
        "sales_return": DocumentHandler(SalesReturn, post_sales_return),
        "purchase_return": DocumentHandler(PurchaseReturn, post_purchase_return),
        "inventory_adjustment": DocumentHandler(InventoryAdjustment, post_inventory_adjustment),
    }


def get_handler(document_type: str) -> DocumentHandler:
    handlers = get_handlers()
    try:
        return handlers[document_type]
    except KeyError as exc:
        raise InvalidDocumentStateError(
            f"Unknown document type '{document_type}'. Expected one of: {', '.join(handlers)}"
        ) from exc


def _result(document) -> dict:
    return {
        "document_type": document.document_type,
        "document_id": str(document.pk),
        "number": document.number,
        "status": document.status,
        "journal_entry_id": document.journal_entry_id,
        "reversal_entry_id": getattr(document, "reversal_entry_id", None),
        "cost_amount": str(document.cost_amount),
        "version": document.version,
    }


def post_document(document_type: str, document_id, *, expected_version: int | None = None) -> dict:
    handler = get_handler(document_type)

    try:
        with transaction.atomic():
            document = lock_row(handler.model, document_id)
            check_expected_version(document, expected_version)

            if not document.is_draft:
                raise InvalidDocumentStateError(
                    f"{document} is {document.status.lower()}; only drafts can be posted"
                )

            items = list(document.items.select_related("product").order_by("created_at"))
            if not items:
                raise InvalidDocumentStateError(f"{document} has no items")

            document.recalculate_totals(save=False)
            outcome = handler.post(document=document, items=items)

            bump_version(
                document,
                status=document.STATUS_POSTED,
                journal_entry=outcome.journal_entry,
                posted_at=timezone.now(),
                subtotal=document.subtotal,
                total=document.total,
                cost_amount=outcome.cost_amount,
            )
    except Exception:
        logger.warning(
            "Document posting rejected",
            extra={"document_type": document_type, "document_id": str(document_id)},
            exc_info=True,
        )
        raise

    logger.info(
        "Document posted",
        extra={
            "document_type": document_type,
            "document_id": str(document.pk),
            "journal_entry_id": document.journal_entry_id,
        },
    )
    return _result(document)


def cancel_document(
    document_type: str,
    document_id,
    *,
    expected_version: int | None = None,
    cancel_date: date | None = None,
) -> dict:
    handler = get_handler(document_type)
    if handler.cancel is None:
        raise InvalidDocumentStateError(f"{document_type} documents cannot be cancelled")

    try:
        with transaction.atomic():
            document = lock_row(handler.model, document_id)
            check_expected_version(document, expected_version)

            if not document.is_posted:
                raise InvalidDocumentStateError(
                    f"{document} is {document.status.lower()}; only posted documents can be cancelled"
                )

            items = list(document.items.select_related("product").order_by("created_at"))
            reversal = handler.cancel(
                document=document,
                items=items,
                cancel_date=cancel_date or timezone.localdate(),
            )

            bump_version(
                document,
                status=document.STATUS_CANCELLED,
                reversal_entry=reversal,
                cancelled_at=timezone.now(),
            )
    except Exception:
        logger.warning(
            "Document cancellation rejected",
            extra={"document_type": document_type, "document_id": str(document_id)},
            exc_info=True,
        )
        raise

    logger.info(
        "Document cancelled",
        extra={
            "document_type": document_type,
            "document_id": str(document.pk),
            "reversal_entry_id": reversal.pk,
        },
    )
    return _result(document)
