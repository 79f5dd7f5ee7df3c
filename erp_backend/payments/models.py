# payments/models.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, models, transaction
from django.db.models import Max, Q
from django.utils import timezone

from accounting.services.exceptions import ConcurrencyConflictError


class Payment(models.Model):
    """
    Money received from a customer (RECEIPT) or paid to a supplier (DISBURSEMENT).

    Design:
    - Posted on creation with its settlement journal entry; immutable afterwards
    - May be allocated to one or more invoices of the same counterparty,
      never beyond its amount; the unallocated rest stays "on account"
    """

    TYPE_RECEIPT = "RECEIPT"
    TYPE_DISBURSEMENT = "DISBURSEMENT"

    TYPES = [
        (TYPE_RECEIPT, "Receipt"),
        (TYPE_DISBURSEMENT, "Disbursement"),
    ]

    METHOD_CASH = "cash"
    METHOD_BANK = "bank"
    METHOD_CHECK = "check"

    METHODS = [
        (METHOD_CASH, "Cash"),
        (METHOD_BANK, "Bank transfer"),
        (METHOD_CHECK, "Check"),
    ]

    STATUS_POSTED = "POSTED"

    STATUSES = [
        (STATUS_POSTED, "Posted"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    number = models.PositiveIntegerField(editable=False)
    payment_type = models.CharField(max_length=20, choices=TYPES)

    customer = models.ForeignKey(
        "sales.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )
    supplier = models.ForeignKey(
        "purchases.Supplier",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    payment_date = models.DateField(default=timezone.localdate)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    method = models.CharField(max_length=20, choices=METHODS, default=METHOD_CASH)
    reference = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_POSTED)
    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-number"]
        constraints = [
            models.UniqueConstraint(
                fields=["payment_type", "number"],
                name="uniq_payment_type_number",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="payment_amount_gt_zero",
            ),
            models.CheckConstraint(
                condition=(
                    Q(payment_type="RECEIPT", customer__isnull=False, supplier__isnull=True)
                    | Q(payment_type="DISBURSEMENT", supplier__isnull=False, customer__isnull=True)
                ),
                name="payment_counterparty_matches_type",
            ),
        ]
        indexes = [
            models.Index(fields=["customer", "payment_date"]),
            models.Index(fields=["supplier", "payment_date"]),
        ]

    def __str__(self):
        prefix = "RCV" if self.payment_type == self.TYPE_RECEIPT else "PAY"
        return f"{prefix}-{self.number} {self.amount}"

    @property
    def counterparty(self):
        return self.customer if self.payment_type == self.TYPE_RECEIPT else self.supplier

    @property
    def counterparty_id(self):
        return self.customer_id if self.payment_type == self.TYPE_RECEIPT else self.supplier_id

    @classmethod
    def next_number(cls, payment_type: str) -> int:
        current = cls.objects.filter(payment_type=payment_type).aggregate(m=Max("number"))["m"]
        return (current or 0) + 1

    def clean(self):
        self.reference = (self.reference or "").strip()

        if self.amount is not None and self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "amount must be > 0"})

        if self.payment_type == self.TYPE_RECEIPT and not self.customer_id:
            raise ValidationError({"customer": "A receipt requires a customer"})
        if self.payment_type == self.TYPE_DISBURSEMENT and not self.supplier_id:
            raise ValidationError({"supplier": "A disbursement requires a supplier"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Posted payments are immutable")

        if not self.number:
            self.number = self.next_number(self.payment_type)
        self.full_clean()

        try:
            with transaction.atomic():
                return super().save(*args, **kwargs)
        except IntegrityError as exc:
            self.number = None
            raise ConcurrencyConflictError(
                "Payment number was taken by a concurrent request; retry the operation"
            ) from exc

    def delete(self, *args, **kwargs):
        raise ValidationError("Posted payments cannot be deleted")


class PaymentAllocation(models.Model):
    """
    Links part (or all) of a payment to one invoice.

    Exactly one of sales_invoice / purchase_invoice is set, matching the
    payment type. Invoice.paid_amount is the sum of its allocations.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    payment = models.ForeignKey(
        Payment,
        on_delete=models.PROTECT,
        related_name="allocations",
    )
    sales_invoice = models.ForeignKey(
        "sales.SalesInvoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="allocations",
    )
    purchase_invoice = models.ForeignKey(
        "purchases.PurchaseInvoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="allocations",
    )

    allocated_amount = models.DecimalField(max_digits=14, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(allocated_amount__gt=Decimal("0.00")),
                name="payment_allocation_amount_gt_zero",
            ),
            models.CheckConstraint(
                condition=(
                    Q(sales_invoice__isnull=False, purchase_invoice__isnull=True)
                    | Q(sales_invoice__isnull=True, purchase_invoice__isnull=False)
                ),
                name="payment_allocation_exactly_one_invoice",
            ),
        ]

    def __str__(self):
        return f"{self.payment} -> {self.invoice}: {self.allocated_amount}"

    @property
    def invoice(self):
        return self.sales_invoice or self.purchase_invoice

    def clean(self):
        if self.allocated_amount is not None and self.allocated_amount <= Decimal("0.00"):
            raise ValidationError({"allocated_amount": "allocated_amount must be > 0"})
        if bool(self.sales_invoice_id) == bool(self.purchase_invoice_id):
            raise ValidationError("An allocation references exactly one invoice")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
