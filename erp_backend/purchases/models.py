# purchases/models.py

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.counterparty import Counterparty
from accounting.models.document import DocumentItem, InvoiceDocument, PostableDocument


class Supplier(Counterparty):
    """
    Supplier master. balance = amount we owe the supplier.
    """

    class Meta(Counterparty.Meta):
        verbose_name = "supplier"
        verbose_name_plural = "suppliers"


class PurchaseInvoice(InvoiceDocument):
    """
    Supplier invoice header.

    Posting is performed by purchases.services.invoice_posting:
    - Dr Inventory / Cr Suppliers for the invoice total
    - stock IN at line cost (drives the moving average)
    - supplier balance += total
    """

    document_type = "purchase_invoice"

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )
    supplier_invoice_number = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="The supplier's own invoice number",
    )
    due_date = models.DateField(null=True, blank=True)

    class Meta(InvoiceDocument.Meta):
        verbose_name = "purchase invoice"
        verbose_name_plural = "purchase invoices"

    def clean(self):
        super().clean()
        self.supplier_invoice_number = (self.supplier_invoice_number or "").strip()
        if self.due_date and self.document_date and self.due_date < self.document_date:
            raise ValidationError({"due_date": "due_date cannot be before the invoice date"})


class PurchaseInvoiceItem(DocumentItem):
    document = models.ForeignKey(
        PurchaseInvoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(DocumentItem.Meta):
        pass


class PurchaseReturn(PostableDocument):
    """
    Goods sent back to a supplier, valued at average cost. Not cancellable.
    """

    document_type = "purchase_return"

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="returns",
    )
    purchase_invoice = models.ForeignKey(
        PurchaseInvoice,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="returns",
    )
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta(PostableDocument.Meta):
        verbose_name = "purchase return"
        verbose_name_plural = "purchase returns"

    def clean(self):
        super().clean()
        if self.purchase_invoice_id and self.supplier_id:
            if self.purchase_invoice.supplier_id != self.supplier_id:
                raise ValidationError(
                    {"purchase_invoice": "The invoice belongs to a different supplier"}
                )


class PurchaseReturnItem(DocumentItem):
    document = models.ForeignKey(
        PurchaseReturn,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(DocumentItem.Meta):
        pass
