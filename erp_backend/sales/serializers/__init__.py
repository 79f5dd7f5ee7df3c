# sales/serializers/__init__.py

from .customer import CustomerSerializer
from .sales_invoice import SalesInvoiceItemSerializer, SalesInvoiceSerializer
from .sales_return import SalesReturnItemSerializer, SalesReturnSerializer

__all__ = [
    "CustomerSerializer",
    "SalesInvoiceSerializer",
    "SalesInvoiceItemSerializer",
    "SalesReturnSerializer",
    "SalesReturnItemSerializer",
]
