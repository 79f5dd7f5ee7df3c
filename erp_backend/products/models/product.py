# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Product(models.Model):
    """
    Represents a stocked, sellable product.

    STOCK MODEL (IMPORTANT):
    - quantity_on_hand is the authoritative running stock
    - it is mutated ONLY by the posting engine (products.services.stock),
      together with an append-only InventoryMovement row
    - it must always equal the fold of the product's movements
    - valuation is the moving weighted average over purchase/opening movements
      (products.services.valuation); purchase_price is informational only
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    unit = models.CharField(max_length=32, blank=True, default="")

    purchase_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Last known purchase price (updated when a purchase invoice is posted).",
    )
    selling_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    quantity_on_hand = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0"),
        editable=False,
    )
    min_stock_level = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal("0"))

    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        indexes = [
            models.Index(fields=["name"]),
            models.Index(fields=["is_active"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_on_hand__gte=Decimal("0")),
                name="chk_product_quantity_nonnegative",
            ),
            models.CheckConstraint(
                condition=Q(purchase_price__gte=Decimal("0.00"))
                & Q(selling_price__gte=Decimal("0.00")),
                name="chk_product_prices_nonnegative",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_on_hand <= self.min_stock_level

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError({"code": "Product code is required"})
        if not self.name:
            raise ValidationError({"name": "Product name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
