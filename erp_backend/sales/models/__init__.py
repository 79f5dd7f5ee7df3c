# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS
"""

from .customer import Customer
from .sales_invoice import SalesInvoice, SalesInvoiceItem
from .sales_return import SalesReturn, SalesReturnItem

__all__ = [
    "Customer",
    "SalesInvoice",
    "SalesInvoiceItem",
    "SalesReturn",
    "SalesReturnItem",
]
