# accounting/tests/helpers.py

"""
Builders shared by the engine tests.

Documents are created as drafts through the ORM and posted through the
public façade (post_document / cancel_document), exactly like the API does.
"""

from __future__ import annotations

from decimal import Decimal
from io import StringIO

from django.core.management import call_command

from accounting.services.balance_service import account_balance
from accounting.services.document_lifecycle import cancel_document, post_document
from accounting.services.trial_balance_service import TrialBalanceService
from products.models import InventoryAdjustment, InventoryAdjustmentItem, Product
from purchases.models import (
    PurchaseInvoice,
    PurchaseInvoiceItem,
    PurchaseReturn,
    PurchaseReturnItem,
    Supplier,
)
from sales.models import Customer, SalesInvoice, SalesInvoiceItem, SalesReturn, SalesReturnItem


def D(value) -> Decimal:
    return Decimal(str(value))


def seed_chart():
    call_command("seed_chart", stdout=StringIO())


def make_product(code="P-100", name="Widget", **kwargs) -> Product:
    return Product.objects.create(code=code, name=name, **kwargs)


def make_customer(code="C-100", name="Acme Trading") -> Customer:
    return Customer.objects.create(code=code, name=name)


def make_supplier(code="S-100", name="Global Supplies") -> Supplier:
    return Supplier.objects.create(code=code, name=name)


def _fill(document, item_model, lines):
    for product, quantity, unit_price in lines:
        item_model.objects.create(
            document=document,
            product=product,
            quantity=D(quantity),
            unit_price=D(unit_price),
        )
    document.recalculate_totals()
    return document


def _post(document):
    post_document(document.document_type, document.pk)
    document.refresh_from_db()
    return document


def purchase_invoice(supplier, lines, *, post=True) -> PurchaseInvoice:
    invoice = _fill(PurchaseInvoice.objects.create(supplier=supplier), PurchaseInvoiceItem, lines)
    return _post(invoice) if post else invoice


def sales_invoice(customer, lines, *, post=True) -> SalesInvoice:
    invoice = _fill(SalesInvoice.objects.create(customer=customer), SalesInvoiceItem, lines)
    return _post(invoice) if post else invoice


def sales_return(customer, lines, *, invoice=None, post=True) -> SalesReturn:
    document = _fill(
        SalesReturn.objects.create(customer=customer, sales_invoice=invoice), SalesReturnItem, lines
    )
    return _post(document) if post else document


def purchase_return(supplier, lines, *, invoice=None, post=True) -> PurchaseReturn:
    document = _fill(
        PurchaseReturn.objects.create(supplier=supplier, purchase_invoice=invoice),
        PurchaseReturnItem,
        lines,
    )
    return _post(document) if post else document


def inventory_adjustment(counts, *, post=True) -> InventoryAdjustment:
    """counts: [(product, actual_quantity), ...]"""
    document = InventoryAdjustment.objects.create()
    for product, actual in counts:
        InventoryAdjustmentItem.objects.create(
            document=document, product=product, actual_quantity=D(actual)
        )
    return _post(document) if post else document


def cancel(document):
    cancel_document(document.document_type, document.pk)
    document.refresh_from_db()
    return document


def trial_balance_balanced() -> bool:
    return TrialBalanceService().generate()["totals"]["balanced"]


def balance_of(code: str) -> Decimal:
    return account_balance(code)
