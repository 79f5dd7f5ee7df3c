# accounting/api/views/__init__.py

"""
accounting.api.views package

Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import AccountListView, AccountStatementView
from accounting.api.views.documents import (
    DocumentCancelView,
    DocumentPostView,
    DraftDocumentViewSet,
)
from accounting.api.views.financial_statements import BalanceSheetView, ProfitAndLossView
from accounting.api.views.journal_entries import JournalEntryViewSet
from accounting.api.views.trial_balance import TrialBalanceView

__all__ = [
    "AccountListView",
    "AccountStatementView",
    "JournalEntryViewSet",
    "TrialBalanceView",
    "ProfitAndLossView",
    "BalanceSheetView",
    "DocumentPostView",
    "DocumentCancelView",
    "DraftDocumentViewSet",
]
