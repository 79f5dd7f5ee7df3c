# sales/api/viewsets/sales_invoice.py

"""
SALES INVOICE VIEWSET

Draft CRUD with nested items. Posting / cancellation go through
/api/documents/sales_invoice/<id>/post|cancel/.
"""

from drf_spectacular.utils import extend_schema

from accounting.api.views.documents import DraftDocumentViewSet
from sales.models import SalesInvoice
from sales.serializers import SalesInvoiceSerializer


@extend_schema(tags=["sales"])
class SalesInvoiceViewSet(DraftDocumentViewSet):
    serializer_class = SalesInvoiceSerializer
    filterset_fields = ["status", "customer", "document_date"]

    queryset = SalesInvoice.objects.select_related("customer").prefetch_related("items__product")
