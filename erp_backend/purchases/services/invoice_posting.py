# purchases/services/invoice_posting.py


"""
======================================================
PATH: purchases/services/invoice_posting.py
======================================================
PURCHASE INVOICE POSTING + CANCELLATION

post_purchase_invoice (called by accounting.services.document_lifecycle):
1) journal: Dr Inventory / Cr Suppliers for the invoice total
2) stock IN via PURCHASE movements:
     unit_cost  = line_total / quantity   (6 dp rate)
     total_cost = line_total
   these rows are what the moving average is computed from
3) product.purchase_price = the line's unit price (informational)
4) supplier balance += total

cancel_purchase_invoice:
- refused while payments are allocated to the invoice
- PURCHASE movements are offset; stock must still be on hand
  (InsufficientStockError otherwise), so goods already sold block cancellation
- supplier balance -= total
- mirror journal entry dated at cancellation
"""

from __future__ import annotations

import logging

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_accounts
from accounting.services.amounts import money, rate
from accounting.services.concurrency import bump_version
from accounting.services.counterparty import adjust_balance, lock_counterparty
from accounting.services.document_lifecycle import PostingOutcome
from accounting.services.exceptions import InvalidDocumentStateError
from accounting.services.journal_entry_service import create_journal_entry, reverse_journal_entry
from products.models import InventoryMovement
from products.services.stock import lock_products, record_movement, reverse_document_movements
from purchases.models import PurchaseInvoiceItem, Supplier

logger = logging.getLogger(__name__)


def post_purchase_invoice(*, document, items) -> PostingOutcome:
    accounts = resolve_accounts(keys.INVENTORY, keys.SUPPLIERS)

    supplier = lock_counterparty(Supplier, document.supplier_id)
    products = lock_products(item.product_id for item in items)

    total = money(document.total)
    label = f"Purchase invoice #{document.number}"
    journal_entry = create_journal_entry(
        description=label,
        lines=[
            {"account": accounts[keys.INVENTORY], "debit": total, "description": label},
            {"account": accounts[keys.SUPPLIERS], "credit": total, "description": label},
        ],
        entry_date=document.document_date,
        reference=document.journal_reference,
    )

    for item in items:
        if not item.product_id:
            continue
        product = products[item.product_id]
        unit_cost = rate(item.line_total / item.quantity)

        record_movement(
            product=product,
            movement_type=InventoryMovement.MovementType.PURCHASE,
            direction=InventoryMovement.Direction.IN,
            quantity=item.quantity,
            unit_cost=unit_cost,
            total_cost=item.line_total,
            document=document,
            movement_date=document.document_date,
        )
        if product.purchase_price != item.unit_price:
            bump_version(product, purchase_price=item.unit_price)
        PurchaseInvoiceItem.objects.filter(pk=item.pk).update(unit_cost=unit_cost)

    adjust_balance(supplier, total)

    logger.info(
        "Purchase invoice posted",
        extra={"purchase_invoice_id": str(document.pk), "total": str(total)},
    )
    return PostingOutcome(journal_entry=journal_entry, cost_amount=total)


def cancel_purchase_invoice(*, document, items, cancel_date):
    if document.allocations.exists():
        raise InvalidDocumentStateError(
            f"{document} has payment allocations; unlink them before cancelling"
        )
    if document.journal_entry_id is None:
        raise InvalidDocumentStateError(f"{document} has no journal entry to reverse")

    supplier = lock_counterparty(Supplier, document.supplier_id)
    products = lock_products(item.product_id for item in items)

    reverse_document_movements(document=document, products=products, movement_date=cancel_date)
    adjust_balance(supplier, -document.total)

    return reverse_journal_entry(
        entry=document.journal_entry,
        entry_date=cancel_date,
        description=f"Reversal of purchase invoice #{document.number}",
    )
