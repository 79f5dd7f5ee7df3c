# products/services/valuation.py

"""
INVENTORY VALUATION (MOVING WEIGHTED AVERAGE)

average cost = Σ signed total_cost / Σ signed quantity
over the product's OPENING_BALANCE and PURCHASE movements (reversal rows,
e.g. from a cancelled purchase invoice, count negatively).

Sales, returns and adjustments never change the rate; they consume or restore
stock AT the rate. The value is recomputed from the full history on every
call (a linear scan over the product's cost-bearing movements).

Rounding:
- the rate is kept at 6 dp
- money is rounded to 2 dp (ROUND_HALF_UP) only when a journal line or a
  movement total is written, via cost_of()
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Sum

from accounting.services.amounts import ZERO, money, rate
from products.models import InventoryMovement

COST_BEARING_TYPES = (
    InventoryMovement.MovementType.OPENING_BALANCE,
    InventoryMovement.MovementType.PURCHASE,
)


def average_cost(product_id) -> Decimal:
    rows = (
        InventoryMovement.objects.filter(
            product_id=product_id,
            movement_type__in=COST_BEARING_TYPES,
        )
        .values("direction")
        .annotate(quantity=Sum("quantity"), cost=Sum("total_cost"))
    )

    quantity = Decimal("0")
    cost = Decimal("0")
    for row in rows:
        sign = 1 if row["direction"] == InventoryMovement.Direction.IN else -1
        quantity += sign * (row["quantity"] or 0)
        cost += sign * (row["cost"] or 0)

    if quantity <= 0:
        return rate(0)
    return rate(cost / quantity)


def capture_average_costs(product_ids) -> dict:
    """Snapshot the rate of every product once, before any stock mutation."""
    return {pid: average_cost(pid) for pid in product_ids}


def cost_of(unit_rate, quantity) -> Decimal:
    if not unit_rate or not quantity:
        return ZERO
    return money(Decimal(str(unit_rate)) * Decimal(str(quantity)))
