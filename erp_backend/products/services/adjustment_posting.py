# products/services/adjustment_posting.py

"""
INVENTORY ADJUSTMENT POSTING

Physical count -> stock + ledger:
- system_quantity is refreshed from the LOCKED product (the draft figure may be stale)
- difference = actual - system; zero-difference lines are left alone
- |difference| is valued at the average cost (captured before any mutation)
- shortages aggregate into  Dr INVENTORY_LOSS / Cr INVENTORY
- surpluses aggregate into  Dr INVENTORY      / Cr INVENTORY_GAIN
- stock is SET to actual_quantity, with one ADJUSTMENT movement per changed product

No journal entry is created when nothing changed.
"""

from __future__ import annotations

from decimal import Decimal

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import resolve_adjustment_accounts
from accounting.services.amounts import ZERO, money, qty
from accounting.services.document_lifecycle import PostingOutcome
from accounting.services.exceptions import InvalidDocumentStateError
from accounting.services.journal_entry_service import create_journal_entry
from products.models import InventoryAdjustmentItem, InventoryMovement
from products.services.stock import lock_products, record_movement
from products.services.valuation import capture_average_costs, cost_of


def post_inventory_adjustment(*, document, items) -> PostingOutcome:
    stocked = [item for item in items if item.product_id]
    if not stocked:
        raise InvalidDocumentStateError(f"{document} has no product lines")

    seen = set()
    for item in stocked:
        if item.product_id in seen:
            raise InvalidDocumentStateError(
                f"{document} counts product {item.product.code} more than once"
            )
        seen.add(item.product_id)

    products = lock_products(seen)
    rates = capture_average_costs(products.keys())

    loss = ZERO
    gain = ZERO
    changes = []

    for item in stocked:
        product = products[item.product_id]
        system_quantity = qty(product.quantity_on_hand)
        difference = qty(item.actual_quantity) - system_quantity
        unit_cost = rates[product.pk]
        total_cost = cost_of(unit_cost, abs(difference))

        InventoryAdjustmentItem.objects.filter(pk=item.pk).update(
            system_quantity=system_quantity,
            difference=difference,
            unit_cost=unit_cost,
            total_cost=total_cost,
        )

        if difference == 0:
            continue

        if difference < 0:
            loss += total_cost
        else:
            gain += total_cost
        changes.append((product, difference, unit_cost, total_cost))

    journal_entry = None
    if loss > 0 or gain > 0:
        accounts = resolve_adjustment_accounts(need_loss=loss > 0, need_gain=gain > 0)
        lines = []
        if loss > 0:
            lines += [
                {
                    "account": accounts[keys.INVENTORY_LOSS],
                    "debit": loss,
                    "description": "Inventory shortage",
                },
                {"account": accounts[keys.INVENTORY], "credit": loss, "description": "Inventory shortage"},
            ]
        if gain > 0:
            lines += [
                {"account": accounts[keys.INVENTORY], "debit": gain, "description": "Inventory surplus"},
                {
                    "account": accounts[keys.INVENTORY_GAIN],
                    "credit": gain,
                    "description": "Inventory surplus",
                },
            ]

        journal_entry = create_journal_entry(
            description=f"Inventory adjustment #{document.number}",
            lines=lines,
            entry_date=document.document_date,
            reference=document.journal_reference,
        )

    for product, difference, unit_cost, total_cost in changes:
        record_movement(
            product=product,
            movement_type=InventoryMovement.MovementType.ADJUSTMENT,
            direction=InventoryMovement.Direction.IN if difference > 0 else InventoryMovement.Direction.OUT,
            quantity=abs(difference),
            unit_cost=unit_cost,
            total_cost=total_cost,
            document=document,
            movement_date=document.document_date,
            notes="Stock count adjustment",
        )

    document.subtotal = money(loss + gain)
    document.total = document.subtotal
    return PostingOutcome(journal_entry=journal_entry, cost_amount=money(gain - loss))
