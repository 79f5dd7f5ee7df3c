# purchases/services/supplier_balance.py

"""
Supplier balance fold.

    Σ total of posted purchase invoices
  − Σ cost_amount of posted purchase returns
  − Σ disbursements
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Sum

from accounting.services.amounts import money
from payments.models import Payment
from purchases.models import PurchaseInvoice, PurchaseReturn


def supplier_balance_from_documents(supplier) -> Decimal:
    invoiced = PurchaseInvoice.objects.filter(
        supplier=supplier, status=PurchaseInvoice.STATUS_POSTED
    ).aggregate(s=Sum("total"))["s"]
    returned = PurchaseReturn.objects.filter(
        supplier=supplier, status=PurchaseReturn.STATUS_POSTED
    ).aggregate(s=Sum("cost_amount"))["s"]
    paid = Payment.objects.filter(
        payment_type=Payment.TYPE_DISBURSEMENT, supplier=supplier
    ).aggregate(s=Sum("amount"))["s"]

    return money((invoiced or 0) - (returned or 0) - (paid or 0))
