# sales/serializers/sales_invoice.py

"""
SALES INVOICE SERIALIZERS

Drafts are created/edited with nested items. Totals, paid_amount and the
cost snapshot are engine-owned and read-only.
"""

from rest_framework import serializers

from accounting.api.serializers.documents import (
    INVOICE_READ_ONLY_FIELDS,
    DocumentItemSerializer,
    DraftDocumentSerializer,
)
from sales.models import SalesInvoice, SalesInvoiceItem


class SalesInvoiceItemSerializer(DocumentItemSerializer):
    class Meta(DocumentItemSerializer.Meta):
        model = SalesInvoiceItem


class SalesInvoiceSerializer(DraftDocumentSerializer):
    items = SalesInvoiceItemSerializer(many=True, required=False)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    remaining_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta(DraftDocumentSerializer.Meta):
        model = SalesInvoice
        read_only_fields = INVOICE_READ_ONLY_FIELDS

    def validate_customer(self, customer):
        if customer is not None and not customer.is_active:
            raise serializers.ValidationError("Customer is inactive")
        return customer
