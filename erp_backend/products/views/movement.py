# products/views/movement.py

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from products.models import InventoryMovement
from products.serializers import InventoryMovementSerializer


@extend_schema(tags=["products"])
class InventoryMovementViewSet(ReadOnlyModelViewSet):
    """
    Append-only inventory ledger.

    Filtering:
    - ?product=<uuid>
    - ?movement_type=SALE
    - ?reference_type=sales_invoice&reference_id=<uuid>
    """

    permission_classes = [IsAuthenticated]
    serializer_class = InventoryMovementSerializer
    http_method_names = ["get", "head", "options"]
    filterset_fields = ["product", "movement_type", "direction", "reference_type", "reference_id"]

    queryset = InventoryMovement.objects.select_related("product").order_by("-created_at")
