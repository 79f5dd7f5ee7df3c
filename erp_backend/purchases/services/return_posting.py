# purchases/services/return_posting.py

"""
PURCHASE RETURN POSTING

Goods go back to the supplier at what they cost us:
- average cost captured per product ONCE, before stock moves
- stock must cover every product (aggregated across lines)
- journal: Dr Suppliers / Cr Inventory for the cost value
- stock OUT via PURCHASE_RETURN movements
- supplier balance -= cost value
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
from accounting.services.journal_entry_service import create_journal_entry
from products.models import InventoryMovement
from products.services.stock import lock_products, record_movement, require_stock
from products.services.valuation import capture_average_costs, cost_of
from purchases.models import PurchaseReturnItem, Supplier

logger = logging.getLogger(__name__)


def _check_invoice(document) -> None:
    invoice = document.purchase_invoice
    if invoice is None:
        return
    if not invoice.is_posted:
        raise InvalidDocumentStateError(
            f"{document} references {invoice}, which is {invoice.status.lower()}"
        )
    if document.supplier_id and invoice.supplier_id != document.supplier_id:
        raise InvalidDocumentStateError(f"{document} and {invoice} belong to different suppliers")


def post_purchase_return(*, document, items) -> PostingOutcome:
    _check_invoice(document)
    accounts = resolve_accounts(keys.SUPPLIERS, keys.INVENTORY)

    supplier = lock_counterparty(Supplier, document.supplier_id)

    requested = defaultdict(Decimal)
    for item in items:
        if item.product_id:
            requested[item.product_id] += qty(item.quantity)

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

    journal_entry = None
    label = f"Purchase return #{document.number}"
    if total_cost > 0:
        journal_entry = create_journal_entry(
            description=label,
            lines=[
                {"account": accounts[keys.SUPPLIERS], "debit": total_cost, "description": label},
                {"account": accounts[keys.INVENTORY], "credit": total_cost, "description": label},
            ],
            entry_date=document.document_date,
            reference=document.journal_reference,
        )

    for item, unit_cost, line_cost in item_costs:
        record_movement(
            product=products[item.product_id],
            movement_type=InventoryMovement.MovementType.PURCHASE_RETURN,
            direction=InventoryMovement.Direction.OUT,
            quantity=item.quantity,
            unit_cost=unit_cost,
            total_cost=line_cost,
            document=document,
            movement_date=document.document_date,
        )
        PurchaseReturnItem.objects.filter(pk=item.pk).update(unit_cost=unit_cost)

    adjust_balance(supplier, -total_cost)

    logger.info(
        "Purchase return posted",
        extra={"purchase_return_id": str(document.pk), "cost_amount": str(total_cost)},
    )
    return PostingOutcome(journal_entry=journal_entry, cost_amount=total_cost)
