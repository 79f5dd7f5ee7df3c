# sales/serializers/sales_return.py

from rest_framework import serializers

from accounting.api.serializers.documents import DocumentItemSerializer, DraftDocumentSerializer
from sales.models import SalesReturn, SalesReturnItem


class SalesReturnItemSerializer(DocumentItemSerializer):
    class Meta(DocumentItemSerializer.Meta):
        model = SalesReturnItem


class SalesReturnSerializer(DraftDocumentSerializer):
    items = SalesReturnItemSerializer(many=True, required=False)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)

    class Meta(DraftDocumentSerializer.Meta):
        model = SalesReturn

    def validate(self, attrs):
        customer = attrs.get("customer", getattr(self.instance, "customer", None))
        invoice = attrs.get("sales_invoice", getattr(self.instance, "sales_invoice", None))

        if invoice is not None:
            if customer is None:
                attrs["customer"] = invoice.customer
            elif invoice.customer_id != customer.pk:
                raise serializers.ValidationError(
                    {"sales_invoice": "The invoice belongs to a different customer"}
                )
            if not invoice.is_posted:
                raise serializers.ValidationError(
                    {"sales_invoice": "Returns can only reference posted invoices"}
                )

        return attrs
