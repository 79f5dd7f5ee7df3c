# sales/api/urls.py

"""
SALES API URLS

    /api/sales/customers/
    /api/sales/customers/<uuid>/statement/
    /api/sales/invoices/
    /api/sales/returns/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.viewsets import CustomerViewSet, SalesInvoiceViewSet, SalesReturnViewSet

router = DefaultRouter()

router.register(r"customers", CustomerViewSet, basename="customers")
router.register(r"invoices", SalesInvoiceViewSet, basename="sales-invoices")
router.register(r"returns", SalesReturnViewSet, basename="sales-returns")

urlpatterns = [
    path("", include(router.urls)),
]
