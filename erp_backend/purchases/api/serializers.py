# purchases/api/serializers.py

from rest_framework import serializers

from accounting.api.serializers.counterparty import CounterpartySerializer
from accounting.api.serializers.documents import (
    INVOICE_READ_ONLY_FIELDS,
    DocumentItemSerializer,
    DraftDocumentSerializer,
)
from purchases.models import (
    PurchaseInvoice,
    PurchaseInvoiceItem,
    PurchaseReturn,
    PurchaseReturnItem,
    Supplier,
)


class SupplierSerializer(CounterpartySerializer):
    class Meta(CounterpartySerializer.Meta):
        model = Supplier


class PurchaseInvoiceItemSerializer(DocumentItemSerializer):
    class Meta(DocumentItemSerializer.Meta):
        model = PurchaseInvoiceItem
        extra_kwargs = {"product": {"required": True, "allow_null": False}}


class PurchaseInvoiceSerializer(DraftDocumentSerializer):
    items = PurchaseInvoiceItemSerializer(many=True, required=False)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)
    remaining_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta(DraftDocumentSerializer.Meta):
        model = PurchaseInvoice
        read_only_fields = INVOICE_READ_ONLY_FIELDS


class PurchaseReturnItemSerializer(DocumentItemSerializer):
    class Meta(DocumentItemSerializer.Meta):
        model = PurchaseReturnItem
        extra_kwargs = {"product": {"required": True, "allow_null": False}}


class PurchaseReturnSerializer(DraftDocumentSerializer):
    items = PurchaseReturnItemSerializer(many=True, required=False)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)

    class Meta(DraftDocumentSerializer.Meta):
        model = PurchaseReturn

    def validate(self, attrs):
        supplier = attrs.get("supplier", getattr(self.instance, "supplier", None))
        invoice = attrs.get("purchase_invoice", getattr(self.instance, "purchase_invoice", None))

        if invoice is not None:
            if supplier is None:
                attrs["supplier"] = invoice.supplier
            elif invoice.supplier_id != supplier.pk:
                raise serializers.ValidationError(
                    {"purchase_invoice": "The invoice belongs to a different supplier"}
                )
            if not invoice.is_posted:
                raise serializers.ValidationError(
                    {"purchase_invoice": "Returns can only reference posted invoices"}
                )

        return attrs
