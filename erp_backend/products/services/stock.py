# products/services/stock.py

"""
STOCK LEDGER (APPLICATION SERVICE)

The only code allowed to move Product.quantity_on_hand. Every change is
paired with exactly one append-only InventoryMovement, so the running figure
can always be rebuilt from the movement history (see quantity_from_movements).

Callers run inside transaction.atomic and pass products they have already
locked with lock_products().
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from accounting.services.amounts import money, qty, rate
from accounting.services.concurrency import bump_version
from accounting.services.exceptions import (
    AccountingServiceError,
    InsufficientStockError,
    InvalidDocumentStateError,
)
from products.models import InventoryMovement, Product

logger = logging.getLogger(__name__)

Direction = InventoryMovement.Direction
MovementType = InventoryMovement.MovementType


class StockDriftError(AccountingServiceError):
    """quantity_on_hand no longer matches the movement history."""

    code = "stock_drift"


def lock_products(product_ids) -> dict:
    """Lock products in a stable (id) order so concurrent postings cannot deadlock."""
    ids = sorted({pid for pid in product_ids if pid}, key=str)
    if not ids:
        return {}
    locked = Product.objects.select_for_update().filter(pk__in=ids).order_by("pk")
    return {p.pk: p for p in locked}


def require_stock(product: Product, quantity: Decimal) -> None:
    if product.quantity_on_hand < quantity:
        raise InsufficientStockError(
            product=product,
            available=product.quantity_on_hand,
            requested=quantity,
        )


def record_movement(
    *,
    product: Product,
    movement_type: str,
    direction: str,
    quantity,
    unit_cost=0,
    total_cost=None,
    document=None,
    movement_date: date | None = None,
    reverses: InventoryMovement | None = None,
    notes: str = "",
) -> InventoryMovement:
    """
    Apply a stock change to a locked product and append its movement.

    OUT movements require enough stock (InsufficientStockError otherwise).
    """
    quantity = qty(quantity)
    unit_cost = rate(unit_cost)
    total_cost = money(total_cost if total_cost is not None else unit_cost * quantity)

    if direction == Direction.OUT:
        require_stock(product, quantity)
        new_quantity = product.quantity_on_hand - quantity
    else:
        new_quantity = product.quantity_on_hand + quantity

    bump_version(product, quantity_on_hand=qty(new_quantity))

    return InventoryMovement.objects.create(
        product=product,
        movement_type=movement_type,
        direction=direction,
        quantity=quantity,
        unit_cost=unit_cost,
        total_cost=total_cost,
        movement_date=movement_date or timezone.localdate(),
        reference_type=getattr(document, "document_type", "") if document is not None else "",
        reference_id=getattr(document, "pk", None),
        reverses=reverses,
        notes=notes,
    )


def reverse_document_movements(*, document, products: dict, movement_date: date | None = None) -> list:
    """
    Offset every movement of `document` with an opposite-direction row.

    Nothing is deleted: each original movement gains exactly one reversal that
    points back at it. Restores stock for sales, removes it for purchases.
    """
    originals = list(
        InventoryMovement.objects.filter(
            reference_type=document.document_type,
            reference_id=document.pk,
            reverses__isnull=True,
        ).order_by("created_at")
    )

    reversals = []
    for movement in originals:
        if InventoryMovement.objects.filter(reverses=movement).exists():
            raise InvalidDocumentStateError(f"Movement {movement.pk} has already been reversed")

        product = products.get(movement.product_id)
        if product is None:
            raise InvalidDocumentStateError(f"Product {movement.product_id} was not locked for reversal")

        opposite = Direction.OUT if movement.direction == Direction.IN else Direction.IN
        reversals.append(
            record_movement(
                product=product,
                movement_type=movement.movement_type,
                direction=opposite,
                quantity=movement.quantity,
                unit_cost=movement.unit_cost,
                total_cost=movement.total_cost,
                document=document,
                movement_date=movement_date,
                reverses=movement,
                notes=f"Reversal of {movement.movement_type.lower()} movement",
            )
        )

    return reversals


@transaction.atomic
def record_opening_balance(
    *,
    product: Product,
    quantity,
    unit_cost,
    movement_date: date | None = None,
    notes: str = "Opening balance",
) -> InventoryMovement:
    """Administrative stock import: raises stock at a known cost, no journal."""
    quantity = qty(quantity)
    if quantity <= 0:
        raise InvalidDocumentStateError("Opening balance quantity must be greater than zero")

    locked = lock_products([product.pk])[product.pk]
    movement = record_movement(
        product=locked,
        movement_type=MovementType.OPENING_BALANCE,
        direction=Direction.IN,
        quantity=quantity,
        unit_cost=unit_cost,
        movement_date=movement_date,
        notes=notes,
    )
    product.quantity_on_hand = locked.quantity_on_hand
    product.version = locked.version

    logger.info(
        "Opening balance recorded",
        extra={"product_id": str(product.pk), "quantity": str(quantity), "unit_cost": str(unit_cost)},
    )
    return movement


def quantity_from_movements(product) -> Decimal:
    """Σ IN − Σ OUT over the product's full movement history."""
    totals = InventoryMovement.objects.filter(product_id=getattr(product, "pk", product)).aggregate(
        qty_in=Sum("quantity", filter=Q(direction=Direction.IN)),
        qty_out=Sum("quantity", filter=Q(direction=Direction.OUT)),
    )
    return qty((totals["qty_in"] or 0) - (totals["qty_out"] or 0))


def assert_stock_consistent(product) -> None:
    product = Product.objects.get(pk=getattr(product, "pk", product))
    expected = quantity_from_movements(product)
    if qty(product.quantity_on_hand) != expected:
        logger.error(
            "Stock drift detected",
            extra={
                "product_id": str(product.pk),
                "quantity_on_hand": str(product.quantity_on_hand),
                "movement_fold": str(expected),
            },
        )
        raise StockDriftError(
            f"{product.code}: quantity_on_hand={product.quantity_on_hand} "
            f"but movements sum to {expected}"
        )
