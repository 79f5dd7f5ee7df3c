# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import AccountListSerializer
from accounting.api.serializers.counterparty import CounterpartySerializer
from accounting.api.serializers.documents import (
    DocumentItemSerializer,
    DocumentTransitionSerializer,
    DraftDocumentSerializer,
)
from accounting.api.serializers.master_data import MasterDataSerializer
from accounting.api.serializers.journal_entries import (
    JournalEntryLineSerializer,
    JournalEntrySerializer,
)

__all__ = [
    "AccountListSerializer",
    "CounterpartySerializer",
    "JournalEntrySerializer",
    "JournalEntryLineSerializer",
    "DraftDocumentSerializer",
    "DocumentItemSerializer",
    "DocumentTransitionSerializer",
    "MasterDataSerializer",
]
