# sales/services/return_posting.py

"""
SALES RETURN POSTING

- the invoice it returns against (if any) must be posted and belong to the
  same customer
- average cost is captured per product ONCE, before stock moves
- journal:
    Dr Revenue   / Cr Customers  return total
    Dr Inventory / Cr COGS       cost of the returned goods (only when > 0)
- stock IN via SALE_RETURN movements at the captured cost
- customer balance -= return total
"""

from __future__ import annotations

import logging

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_accounts
from accounting.services.amounts import ZERO, money
from accounting.services.counterparty import adjust_balance, lock_counterparty
from accounting.services.document_lifecycle import PostingOutcome
from accounting.services.exceptions import InvalidDocumentStateError
from accounting.services.journal_entry_service import create_journal_entry
from products.models import InventoryMovement
from products.services.stock import lock_products, record_movement
from products.services.valuation import capture_average_costs, cost_of
from sales.models import Customer, SalesReturnItem

logger = logging.getLogger(__name__)


def _check_invoice(document) -> None:
    invoice = document.sales_invoice
    if invoice is None:
        return
    if not invoice.is_posted:
        raise InvalidDocumentStateError(
            f"{document} references {invoice}, which is {invoice.status.lower()}"
        )
    if document.customer_id and invoice.customer_id != document.customer_id:
        raise InvalidDocumentStateError(f"{document} and {invoice} belong to different customers")


def post_sales_return(*, document, items) -> PostingOutcome:
    _check_invoice(document)
    accounts = resolve_accounts(keys.CUSTOMERS, keys.REVENUE, keys.COGS, keys.INVENTORY)

    customer = lock_counterparty(Customer, document.customer_id)
    products = lock_products(item.product_id for item in items)
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

    total = money(document.total)
    label = f"Sales return #{document.number}"
    lines = [
        {"account": accounts[keys.REVENUE], "debit": total, "description": label},
        {"account": accounts[keys.CUSTOMERS], "credit": total, "description": label},
    ]
    if total_cost > 0:
        lines += [
            {"account": accounts[keys.INVENTORY], "debit": total_cost, "description": f"Cost of {label}"},
            {"account": accounts[keys.COGS], "credit": total_cost, "description": f"Cost of {label}"},
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
            movement_type=InventoryMovement.MovementType.SALE_RETURN,
            direction=InventoryMovement.Direction.IN,
            quantity=item.quantity,
            unit_cost=unit_cost,
            total_cost=line_cost,
            document=document,
            movement_date=document.document_date,
        )
        SalesReturnItem.objects.filter(pk=item.pk).update(unit_cost=unit_cost)

    adjust_balance(customer, -total)

    logger.info(
        "Sales return posted",
        extra={"sales_return_id": str(document.pk), "total": str(total), "cost_amount": str(total_cost)},
    )
    return PostingOutcome(journal_entry=journal_entry, cost_amount=total_cost)
