# sales/api/viewsets/sales_return.py

from drf_spectacular.utils import extend_schema

from accounting.api.views.documents import DraftDocumentViewSet
from sales.models import SalesReturn
from sales.serializers import SalesReturnSerializer


@extend_schema(tags=["sales"])
class SalesReturnViewSet(DraftDocumentViewSet):
    """Returns post once and are never cancelled."""

    serializer_class = SalesReturnSerializer
    filterset_fields = ["status", "customer", "sales_invoice"]

    queryset = SalesReturn.objects.select_related("customer", "sales_invoice").prefetch_related(
        "items__product"
    )
