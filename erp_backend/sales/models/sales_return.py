# sales/models/sales_return.py

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.document import DocumentItem, PostableDocument

from .customer import Customer
from .sales_invoice import SalesInvoice


class SalesReturn(PostableDocument):
    """
    Goods returned by a customer. Not cancellable once posted.

    Optionally references the invoice it returns against; the customer must
    then match the invoice's customer.
    """

    document_type = "sales_return"

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_returns",
    )
    sales_invoice = models.ForeignKey(
        SalesInvoice,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="returns",
    )
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta(PostableDocument.Meta):
        verbose_name = "sales return"
        verbose_name_plural = "sales returns"

    def clean(self):
        super().clean()
        if self.sales_invoice_id and self.customer_id:
            if self.sales_invoice.customer_id != self.customer_id:
                raise ValidationError(
                    {"sales_invoice": "The invoice belongs to a different customer"}
                )


class SalesReturnItem(DocumentItem):
    document = models.ForeignKey(
        SalesReturn,
        on_delete=models.CASCADE,
        related_name="items",
    )

    class Meta(DocumentItem.Meta):
        pass
