# products/serializers/__init__.py

from .adjustment import InventoryAdjustmentItemSerializer, InventoryAdjustmentSerializer
from .product import (
    InventoryMovementSerializer,
    OpeningBalanceSerializer,
    ProductAverageCostSerializer,
    ProductSerializer,
)

__all__ = [
    "ProductSerializer",
    "ProductAverageCostSerializer",
    "OpeningBalanceSerializer",
    "InventoryMovementSerializer",
    "InventoryAdjustmentSerializer",
    "InventoryAdjustmentItemSerializer",
]
