# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseInvoiceDetailView,
    PurchaseInvoiceListCreateView,
    PurchaseReturnDetailView,
    PurchaseReturnListCreateView,
    SupplierDetailView,
    SupplierListCreateView,
    SupplierStatementView,
)

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="purchase-suppliers"),
    path(
        "suppliers/<uuid:supplier_id>/",
        SupplierDetailView.as_view(),
        name="purchase-supplier-detail",
    ),
    path(
        "suppliers/<uuid:supplier_id>/statement/",
        SupplierStatementView.as_view(),
        name="purchase-supplier-statement",
    ),
    path(
        "invoices/", PurchaseInvoiceListCreateView.as_view(), name="purchase-invoices"
    ),
    path(
        "invoices/<uuid:document_id>/",
        PurchaseInvoiceDetailView.as_view(),
        name="purchase-invoice-detail",
    ),
    path("returns/", PurchaseReturnListCreateView.as_view(), name="purchase-returns"),
    path(
        "returns/<uuid:document_id>/",
        PurchaseReturnDetailView.as_view(),
        name="purchase-return-detail",
    ),
]
