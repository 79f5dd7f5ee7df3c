# sales/models/sales_invoice.py

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.document import DocumentItem, InvoiceDocument

from .customer import Customer


class SalesInvoice(InvoiceDocument):
    """
    Customer invoice.

    Posting (sales.services.invoice_posting):
    - Dr Customers / Cr Revenue for the subtotal
    - Dr COGS / Cr Inventory for the average cost of the goods sold
    - stock out, customer balance up by the subtotal
    """

    document_type = "sales_invoice"

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_invoices",
    )
    due_date = models.DateField(null=True, blank=True)

    class Meta(InvoiceDocument.Meta):
        verbose_name = "sales invoice"
        verbose_name_plural = "sales invoices"

    def clean(self):
        super().clean()
        if self.due_date and self.document_date and self.due_date < self.document_date:
            raise ValidationError({"due_date": "due_date cannot be before the invoice date"})


class SalesInvoiceItem(DocumentItem):
    document = models.ForeignKey(
        SalesInvoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(DocumentItem.Meta):
        pass
