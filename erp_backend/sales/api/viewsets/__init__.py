# sales/api/viewsets/__init__.py

from .customer import CustomerViewSet
from .sales_invoice import SalesInvoiceViewSet
from .sales_return import SalesReturnViewSet

__all__ = ["CustomerViewSet", "SalesInvoiceViewSet", "SalesReturnViewSet"]
