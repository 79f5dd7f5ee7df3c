# products/serializers/product.py

"""
PRODUCT SERIALIZERS

Guarantees:
- quantity_on_hand is read-only: stock moves only through posted documents
  (or an opening balance), never through a product update
- average_cost is derived from the movement history on read
"""

from rest_framework import serializers

from accounting.api.serializers.master_data import MasterDataSerializer
from products.models import InventoryMovement, Product
from products.services.valuation import average_cost, cost_of


class ProductSerializer(MasterDataSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "code",
            "name",
            "unit",
            "purchase_price",
            "selling_price",
            "quantity_on_hand",
            "min_stock_level",
            "is_low_stock",
            "is_active",
            "version",
            "expected_version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "quantity_on_hand",
            "is_low_stock",
            "version",
            "created_at",
            "updated_at",
        ]


class ProductAverageCostSerializer(serializers.ModelSerializer):
    average_cost = serializers.SerializerMethodField()
    stock_value = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ["id", "code", "name", "quantity_on_hand", "average_cost", "stock_value"]
        read_only_fields = fields

    def _rate(self, obj):
        cache = self.context.setdefault("average_costs", {})
        if obj.pk not in cache:
            cache[obj.pk] = average_cost(obj.pk)
        return cache[obj.pk]

    def get_average_cost(self, obj):
        return str(self._rate(obj))

    def get_stock_value(self, obj):
        return str(cost_of(self._rate(obj), obj.quantity_on_hand))


class OpeningBalanceSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3, min_value=0)
    unit_cost = serializers.DecimalField(max_digits=18, decimal_places=6, min_value=0)
    movement_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=255)


class InventoryMovementSerializer(serializers.ModelSerializer):
    product_code = serializers.CharField(source="product.code", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = InventoryMovement
        fields = [
            "id",
            "product",
            "product_code",
            "product_name",
            "movement_type",
            "direction",
            "quantity",
            "unit_cost",
            "total_cost",
            "movement_date",
            "reference_type",
            "reference_id",
            "reverses",
            "notes",
            "created_at",
        ]
        read_only_fields = fields
