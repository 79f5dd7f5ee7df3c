# sales/services/invoice_posting.py

"""
SALES INVOICE POSTING + CANCELLATION

post_sales_invoice (called by accounting.services.document_lifecycle):
1) aggregate requested quantity per product and check stock (ALL lines first)
2) snapshot the average cost per product (before any stock moves)
3) journal:
     Dr Customers / Cr Revenue   subtotal
     Dr COGS      / Cr Inventory total cost (only when > 0)
4) stock OUT via SALE movements at the snapshot rate
5) customer balance += subtotal

cancel_sales_invoice:
- refused while payments are allocated to the invoice (unlink first)
- SALE movements are offset (stock comes back), nothing is deleted
- customer balance -= subtotal
- mirror journal entry dated at cancellation
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_accounts
from accounting.services.amounts import ZERO, money, qty
from accounting.services.counterparty import adjust_balance, lock_counterparty
from accounting.services.document_lifecycle import PostingOutcome
from accounting.services.exceptions import InvalidDocumentStateError
from accounting.services.journal_entry_service import create_journal_entry, reverse_journal_entry
from products.models import InventoryMovement
from products.services.stock import lock_products, record_movement, require_stock, reverse_document_movements
from products.services.valuation import capture_average_costs, cost_of
from sales.models import Customer, SalesInvoiceItem

logger = logging.getLogger(__name__)


def _requested_quantities(items) -> dict:
    requested = defaultdict(Decimal)
    for item in items:
        if item.product_id:
            requested[item.product_id] += qty(item.quantity)
    return requested


def post_sales_invoice(*, document, items) -> PostingOutcome:
    accounts = resolve_accounts(keys.CUSTOMERS, keys.REVENUE, keys.COGS, keys.INVENTORY)

    customer = lock_counterparty(Customer, document.customer_id)
    requested = _requested_quantities(items)
    products = lock_products(requested.keys())

    for product_id, quantity in requested.items():
        require_stock(products[product_id], quantity)

    rates = capture_average_costs(products.keys())

    item_costs = []
    total_cost = ZERO
    for item in items:
        if not item.product_id:
            continue
        unit_cost = rates[item.product_id]
        line_cost = cost_of(unit_cost, item.quantity)
        total_cost += line_cost
        item_costs.append((item, unit_cost, line_cost))
    total_cost = money(total_cost)

    subtotal = money(document.subtotal)
    label = f"Sales invoice #{document.number}"
    lines = [
        {"account": accounts[keys.CUSTOMERS], "debit": subtotal, "description": label},
        {"account": accounts[keys.REVENUE], "credit": subtotal, "description": label},
    ]
    if total_cost > 0:
        lines += [
            {"account": accounts[keys.COGS], "debit": total_cost, "description": f"Cost of {label}"},
            {"account": accounts[keys.INVENTORY], "credit": total_cost, "description": f"Cost of {label}"},
        ]

    journal_entry = create_journal_entry(
        description=label,
        lines=lines,
        entry_date=document.document_date,
        reference=document.journal_reference,
    )

    for item, unit_cost, line_cost in item_costs:
        record_movement(
            product=products[item.product_id],
            movement_type=InventoryMovement.MovementType.SALE,
            direction=InventoryMovement.Direction.OUT,
            quantity=item.quantity,
            unit_cost=unit_cost,
            total_cost=line_cost,
            document=document,
            movement_date=document.document_date,
        )
        SalesInvoiceItem.objects.filter(pk=item.pk).update(unit_cost=unit_cost)

    adjust_balance(customer, subtotal)

    logger.info(
        "Sales invoice posted",
        extra={
            "sales_invoice_id": str(document.pk),
            "subtotal": str(subtotal),
            "cost_amount": str(total_cost),
        },
    )
    return PostingOutcome(journal_entry=journal_entry, cost_amount=total_cost)


def cancel_sales_invoice(*, document, items, cancel_date):
    if document.allocations.exists():
        raise InvalidDocumentStateError(
            f"{document} has payment allocations; unlink them before cancelling"
        )
    if document.journal_entry_id is None:
        raise InvalidDocumentStateError(f"{document} has no journal entry to reverse")

    customer = lock_counterparty(Customer, document.customer_id)
    products = lock_products(item.product_id for item in items)

    reverse_document_movements(document=document, products=products, movement_date=cancel_date)
    adjust_balance(customer, -document.subtotal)

    return reverse_journal_entry(
        entry=document.journal_entry,
        entry_date=cancel_date,
        description=f"Reversal of sales invoice #{document.number}",
    )
