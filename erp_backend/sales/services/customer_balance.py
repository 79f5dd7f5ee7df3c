# sales/services/customer_balance.py

"""
Customer balance fold.

Rebuilds what Customer.balance should be from the source records:
    Σ subtotal of posted invoices
  − Σ total of posted returns
  − Σ receipts
Cancelled invoices contribute nothing (their effect was reversed).
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Sum

from accounting.services.amounts import money
from payments.models import Payment
from sales.models import SalesInvoice, SalesReturn


def customer_balance_from_documents(customer) -> Decimal:
    invoiced = SalesInvoice.objects.filter(
        customer=customer, status=SalesInvoice.STATUS_POSTED
    ).aggregate(s=Sum("subtotal"))["s"]
    returned = SalesReturn.objects.filter(
        customer=customer, status=SalesReturn.STATUS_POSTED
    ).aggregate(s=Sum("total"))["s"]
    received = Payment.objects.filter(
        payment_type=Payment.TYPE_RECEIPT, customer=customer
    ).aggregate(s=Sum("amount"))["s"]

    return money((invoiced or 0) - (returned or 0) - (received or 0))
