# products/models/inventory_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is an unsigned magnitude; direction says IN or OUT
- Direction validated against movement_type (reversal rows run the other way)
- Every movement except opening balances references its originating document
- Cancellation appends offsetting rows (reverses=<original>), never deletes
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .product import Product


class InventoryMovement(models.Model):
    class MovementType(models.TextChoices):
        OPENING_BALANCE = "OPENING_BALANCE", "Opening Balance"
        PURCHASE = "PURCHASE", "Purchase"
        PURCHASE_RETURN = "PURCHASE_RETURN", "Purchase Return"
        SALE = "SALE", "Sale"
        SALE_RETURN = "SALE_RETURN", "Sale Return"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"

    class Direction(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    TYPE_TO_DIRECTION = {
        MovementType.OPENING_BALANCE: Direction.IN,
        MovementType.PURCHASE: Direction.IN,
        MovementType.SALE_RETURN: Direction.IN,
        MovementType.SALE: Direction.OUT,
        MovementType.PURCHASE_RETURN: Direction.OUT,
        MovementType.ADJUSTMENT: None,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    direction = models.CharField(max_length=3, choices=Direction.choices)

    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_cost = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=Decimal("0"),
        help_text="Per-unit cost rate at movement time (6 dp).",
    )
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    movement_date = models.DateField(default=timezone.localdate)

    reference_type = models.CharField(max_length=32, blank=True, default="")
    reference_id = models.UUIDField(null=True, blank=True)

    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversed_by",
    )

    notes = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "movement_type"]),
            models.Index(fields=["product", "created_at"]),
            models.Index(fields=["reference_type", "reference_id"]),
            models.Index(fields=["movement_date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=Decimal("0")),
                name="chk_inventory_movement_quantity_gt_zero",
            ),
        ]

    @property
    def signed_quantity(self) -> Decimal:
        return self.quantity if self.direction == self.Direction.IN else -self.quantity

    @property
    def signed_total_cost(self) -> Decimal:
        return self.total_cost if self.direction == self.Direction.IN else -self.total_cost

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected = self.TYPE_TO_DIRECTION.get(self.movement_type)
        if expected and self.reverses_id:
            expected = self.Direction.OUT if expected == self.Direction.IN else self.Direction.IN
        if expected and self.direction != expected:
            raise ValidationError(f"{self.movement_type} requires direction={expected}")

        if self.movement_type != self.MovementType.OPENING_BALANCE and not self.reference_id:
            raise ValidationError("Document movements must reference their document")

        if self.reverses_id and self.reverses.product_id != self.product_id:
            raise ValidationError("A reversal must offset a movement of the same product")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryMovement records are immutable and cannot be deleted")

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} {self.direction} | {self.quantity}"
