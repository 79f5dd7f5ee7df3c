# products/views/__init__.py

from .adjustment import InventoryAdjustmentViewSet
from .movement import InventoryMovementViewSet
from .product import ProductViewSet

__all__ = [
    "ProductViewSet",
    "InventoryMovementViewSet",
    "InventoryAdjustmentViewSet",
]
