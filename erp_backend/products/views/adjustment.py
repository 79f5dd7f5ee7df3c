# products/views/adjustment.py

from drf_spectacular.utils import extend_schema

from accounting.api.views.documents import DraftDocumentViewSet
from products.models import InventoryAdjustment
from products.serializers import InventoryAdjustmentSerializer


@extend_schema(tags=["products"])
class InventoryAdjustmentViewSet(DraftDocumentViewSet):
    """Stock counts. Post via /api/documents/inventory_adjustment/<id>/post/."""

    serializer_class = InventoryAdjustmentSerializer
    queryset = InventoryAdjustment.objects.prefetch_related("items__product")
