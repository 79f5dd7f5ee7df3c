# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounting.api.views.accounts import AccountListView, AccountStatementView
from accounting.api.views.financial_statements import BalanceSheetView, ProfitAndLossView
from accounting.api.views.journal_entries import JournalEntryViewSet
from accounting.api.views.trial_balance import TrialBalanceView

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")

urlpatterns = [
    # Router endpoints
    path("", include(router.urls)),
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("profit-and-loss/", ProfitAndLossView.as_view(), name="profit-and-loss"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    # Master data
    path("accounts/", AccountListView.as_view(), name="accounts"),
    path(
        "accounts/<str:code>/statement/",
        AccountStatementView.as_view(),
        name="account-statement",
    ),
]
