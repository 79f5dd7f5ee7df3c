# accounting/models/document.py

"""
======================================================
PATH: accounting/models/document.py
======================================================
POSTABLE DOCUMENT BASES

Shared abstract shape of every commercial document the posting engine knows
about (sales invoice, purchase invoice, sales return, purchase return,
inventory adjustment) and of their line items.

Lifecycle:
    DRAFT --post--> POSTED --cancel--> CANCELLED   (cancel: invoices only)

Guarantees:
- Only drafts can be edited or deleted
- Status, journal link, cost snapshot and version are written by the engine
  (accounting.services.document_lifecycle), never by API payloads
- number is sequential per concrete document type
"""

from __future__ import annotations

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models import Max, Q
from django.utils import timezone

from accounting.services.exceptions import ConcurrencyConflictError

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


class PostableDocument(models.Model):
    STATUS_DRAFT = "DRAFT"
    STATUS_POSTED = "POSTED"
    STATUS_CANCELLED = "CANCELLED"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Engine dispatch key, e.g. "sales_invoice"; set by each concrete model.
    document_type = ""
    cancellable = False

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    number = models.PositiveIntegerField(editable=False)
    document_date = models.DateField(default=timezone.localdate)

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    cost_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Inventory cost captured at posting",
    )

    reference = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    posted_at = models.DateTimeField(null=True, blank=True)

    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-document_date", "-number"]
        constraints = [
            models.UniqueConstraint(
                fields=["number"],
                name="uniq_%(app_label)s_%(class)s_number",
            ),
            models.CheckConstraint(
                condition=Q(subtotal__gte=Decimal("0.00")) & Q(total__gte=Decimal("0.00")),
                name="chk_%(app_label)s_%(class)s_totals_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "document_date"]),
        ]

    def __str__(self):
        return f"{self.get_document_label()} #{self.number}"

    @classmethod
    def get_document_label(cls) -> str:
        return str(cls._meta.verbose_name).capitalize()

    @property
    def is_draft(self) -> bool:
        return self.status == self.STATUS_DRAFT

    @property
    def is_posted(self) -> bool:
        return self.status == self.STATUS_POSTED

    @property
    def is_cancelled(self) -> bool:
        return self.status == self.STATUS_CANCELLED

    @property
    def journal_reference(self) -> str:
        return f"{self.document_type}:{self.pk}"

    @classmethod
    def next_number(cls) -> int:
        current = cls._default_manager.aggregate(m=Max("number"))["m"]
        return (current or 0) + 1

    def recalculate_totals(self, *, save: bool = True) -> None:
        self.subtotal = _money(sum((item.line_total for item in self.items.all()), Decimal("0.00")))
        self.total = _money(self.subtotal + (self.tax or Decimal("0.00")))
        if save:
            self.save(update_fields=["subtotal", "total", "updated_at"])

    def clean(self):
        self.reference = (self.reference or "").strip()

        if self.status == self.STATUS_POSTED and not self.posted_at:
            raise ValidationError({"posted_at": "posted_at is required when status is POSTED"})

        if self.status == self.STATUS_DRAFT and self.journal_entry_id:
            raise ValidationError({"journal_entry": "Draft documents cannot carry a journal entry"})

    def save(self, *args, **kwargs):
        numbered = self._state.adding and not self.number
        if numbered:
            self.number = self.next_number()
        self.full_clean()
        if not numbered:
            return super().save(*args, **kwargs)

        try:
            with transaction.atomic():
                return super().save(*args, **kwargs)
        except IntegrityError as exc:
            self.number = None
            raise ConcurrencyConflictError(
                f"{self.get_document_label()} number was taken by a concurrent request; retry the operation"
            ) from exc

    def delete(self, *args, **kwargs):
        if not self.is_draft:
            raise ValidationError(
                f"{self.get_document_label()} #{self.number} is {self.status.lower()} and cannot be deleted"
            )
        return super().delete(*args, **kwargs)


class InvoiceDocument(PostableDocument):
    """Invoices additionally track settlement and can be cancelled."""

    cancellable = True

    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    cancelled_at = models.DateTimeField(null=True, blank=True)
    reversal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta(PostableDocument.Meta):
        abstract = True

    @property
    def remaining_amount(self) -> Decimal:
        return _money(self.total - self.paid_amount)

    def clean(self):
        super().clean()

        if self.paid_amount is not None and self.paid_amount < Decimal("0.00"):
            raise ValidationError({"paid_amount": "paid_amount cannot be negative"})

        if self.status == self.STATUS_CANCELLED and not self.cancelled_at:
            raise ValidationError({"cancelled_at": "cancelled_at is required when status is CANCELLED"})


class DocumentItem(models.Model):
    """
    One line of a document. Concrete subclasses declare
    `document = ForeignKey(<Document>, related_name="items")`.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    description = models.CharField(max_length=255, blank=True, default="")

    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    line_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    unit_cost = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        null=True,
        blank=True,
        help_text="Average-cost snapshot written at posting",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=Decimal("0")),
                name="chk_%(app_label)s_%(class)s_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(unit_price__gte=Decimal("0.00")) & Q(discount__gte=Decimal("0.00")),
                name="chk_%(app_label)s_%(class)s_price_nonnegative",
            ),
        ]

    def __str__(self):
        product_name = getattr(self.product, "name", None) or self.description or "Item"
        return f"{product_name} x {self.quantity}"

    def clean(self):
        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({"quantity": "quantity must be > 0"})

        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError({"unit_price": "unit_price cannot be negative"})

        if self.discount is not None and self.discount < 0:
            raise ValidationError({"discount": "discount cannot be negative"})

        if self.quantity is not None and self.unit_price is not None:
            gross = Decimal(str(self.quantity)) * Decimal(str(self.unit_price))
            if (self.discount or 0) > gross:
                raise ValidationError({"discount": "discount cannot exceed the line amount"})

    def save(self, *args, **kwargs):
        if self.document_id and not self.document.is_draft:
            raise ValidationError("Items of a posted or cancelled document cannot be changed")

        self.full_clean()
        self.line_total = _money(
            Decimal(str(self.quantity)) * Decimal(str(self.unit_price)) - (self.discount or 0)
        )
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.document_id and not self.document.is_draft:
            raise ValidationError("Items of a posted or cancelled document cannot be deleted")
        return super().delete(*args, **kwargs)
