# products/serializers/adjustment.py

from rest_framework import serializers

from accounting.api.serializers.documents import DraftDocumentSerializer
from products.models import InventoryAdjustment, InventoryAdjustmentItem


class InventoryAdjustmentItemSerializer(serializers.ModelSerializer):
    product_code = serializers.CharField(source="product.code", read_only=True, default=None)
    product_name = serializers.CharField(source="product.name", read_only=True, default=None)

    class Meta:
        model = InventoryAdjustmentItem
        fields = [
            "id",
            "product",
            "product_code",
            "product_name",
            "system_quantity",
            "actual_quantity",
            "difference",
            "unit_cost",
            "total_cost",
            "notes",
        ]
        # system_quantity is refreshed from the product when the count is posted.
        read_only_fields = ["id", "system_quantity", "difference", "unit_cost", "total_cost"]
        extra_kwargs = {"product": {"required": True, "allow_null": False}}


class InventoryAdjustmentSerializer(DraftDocumentSerializer):
    items = InventoryAdjustmentItemSerializer(many=True, required=False)

    class Meta(DraftDocumentSerializer.Meta):
        model = InventoryAdjustment

    def validate_items(self, items):
        product_ids = [item["product"].pk for item in items]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Each product may appear only once per adjustment")
        return items
