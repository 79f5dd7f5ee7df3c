# products/models/inventory_adjustment.py

"""
Physical stock count document.

Each line records the counted (actual) quantity for a product. On posting the
engine refreshes system_quantity from the locked product, values the
difference at average cost, sets stock to the counted figure and books the
shortage/surplus.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.document import PostableDocument, _money

from .product import Product


class InventoryAdjustment(PostableDocument):
    document_type = "inventory_adjustment"

    class Meta(PostableDocument.Meta):
        verbose_name = "inventory adjustment"
        verbose_name_plural = "inventory adjustments"

    def recalculate_totals(self, *, save: bool = True) -> None:
        self.subtotal = _money(sum((item.total_cost for item in self.items.all()), Decimal("0.00")))
        self.total = self.subtotal
        if save:
            self.save(update_fields=["subtotal", "total", "updated_at"])


class InventoryAdjustmentItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    document = models.ForeignKey(
        InventoryAdjustment,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    system_quantity = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("0"))
    actual_quantity = models.DecimalField(max_digits=14, decimal_places=3)
    difference = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("0"))

    unit_cost = models.DecimalField(max_digits=18, decimal_places=6, default=Decimal("0"))
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    notes = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(actual_quantity__gte=Decimal("0")),
                name="chk_adjustment_item_actual_nonnegative",
            ),
        ]

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name}: {self.system_quantity} -> {self.actual_quantity}"

    def clean(self):
        if self.actual_quantity is None or self.actual_quantity < 0:
            raise ValidationError({"actual_quantity": "actual_quantity cannot be negative"})

    def save(self, *args, **kwargs):
        if self.document_id and not self.document.is_draft:
            raise ValidationError("Items of a posted adjustment cannot be changed")

        if self.product_id and self._state.adding and not self.system_quantity:
            self.system_quantity = self.product.quantity_on_hand

        self.difference = Decimal(str(self.actual_quantity)) - Decimal(str(self.system_quantity or 0))
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.document_id and not self.document.is_draft:
            raise ValidationError("Items of a posted adjustment cannot be deleted")
        return super().delete(*args, **kwargs)
