# accounting/api/views/journal_entries.py

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.serializers.journal_entries import JournalEntrySerializer
from accounting.models.journal import JournalEntry


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to journal entries (immutable, audit-safe).

    Filtering (django-filter):
    - ?reference=sales_invoice:<uuid>
    - ?entry_date=YYYY-MM-DD
    - ?reverses=<id>
    """

    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    http_method_names = ["get", "head", "options"]
    filterset_fields = ["reference", "entry_date", "reverses", "status"]

    queryset = JournalEntry.objects.prefetch_related("lines__account").order_by(
        "-entry_date", "-entry_number"
    )
