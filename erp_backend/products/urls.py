# products/urls.py

"""
PRODUCTS URLS

Register product domain routes under /api/products/:
    /api/products/products/
    /api/products/movements/
    /api/products/adjustments/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import (
    InventoryAdjustmentViewSet,
    InventoryMovementViewSet,
    ProductViewSet,
)

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"movements", InventoryMovementViewSet, basename="movements")
router.register(r"adjustments", InventoryAdjustmentViewSet, basename="adjustments")

urlpatterns = [
    path("", include(router.urls)),
]
