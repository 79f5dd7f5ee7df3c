# payments/services/reconciler.py

"""
======================================================
PATH: payments/services/reconciler.py
======================================================
PAYMENT ALLOCATION RECONCILER

Two independent facts are kept in step:
- money moved        -> Payment + settlement journal + counterparty balance
- what it settled    -> PaymentAllocation rows + invoice.paid_amount

Operations:
- create_payment_and_allocate: pay (part of) one posted invoice
- create_payment:              on-account payment, allocated later
- link_existing_payment:       allocate an existing payment's remainder
- unlink_allocation:           undo a link (money stays received/paid)

Invariants (enforced under row locks on payment + invoice):
- Σ allocations of a payment  <= payment.amount
- Σ allocations of an invoice <= invoice.total
- invoice.paid_amount == Σ allocations of the invoice (recomputed, never incremented)

Settlement journal:
    RECEIPT      Dr Cash/Bank  / Cr Customers
    DISBURSEMENT Dr Suppliers  / Cr Cash/Bank
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.services import account_resolver as keys
from accounting.services.account_resolver import payment_account_key, resolve_accounts
from accounting.services.amounts import ZERO, money
from accounting.services.concurrency import lock_row
from accounting.services.counterparty import adjust_balance
from accounting.services.exceptions import (
    AllocationLimitError,
    InvalidDocumentStateError,
    NotFoundError,
)
from accounting.services.journal_entry_service import create_journal_entry
from payments.models import Payment, PaymentAllocation
from purchases.models import PurchaseInvoice, Supplier
from sales.models import Customer, SalesInvoice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentSide:
    counterparty_model: type
    counterparty_field: str
    invoice_model: type
    invoice_field: str
    control_key: str


SIDES = {
    Payment.TYPE_RECEIPT: PaymentSide(Customer, "customer", SalesInvoice, "sales_invoice", keys.CUSTOMERS),
    Payment.TYPE_DISBURSEMENT: PaymentSide(
        Supplier, "supplier", PurchaseInvoice, "purchase_invoice", keys.SUPPLIERS
    ),
}


def _side(payment_type: str) -> PaymentSide:
    try:
        return SIDES[payment_type]
    except KeyError as exc:
        raise InvalidDocumentStateError(
            f"Unknown payment_type '{payment_type}'. Use RECEIPT or DISBURSEMENT."
        ) from exc


# ------------------------------------------------------------
# READ HELPERS
# ------------------------------------------------------------


def allocated_total(*, payment=None, invoice=None) -> Decimal:
    qs = PaymentAllocation.objects.all()
    if payment is not None:
        qs = qs.filter(payment=payment)
    if invoice is not None:
        field = "sales_invoice" if isinstance(invoice, SalesInvoice) else "purchase_invoice"
        qs = qs.filter(**{field: invoice})
    return money(qs.aggregate(s=Sum("allocated_amount"))["s"] or ZERO)


def payment_remaining(payment) -> Decimal:
    return money(payment.amount - allocated_total(payment=payment))


def invoice_remaining(invoice) -> Decimal:
    return money(invoice.total - allocated_total(invoice=invoice))


def unallocated_payments(payment_type: str, counterparty_id) -> list:
    """Payments of a counterparty that still have something left to allocate."""
    side = _side(payment_type)
    payments = Payment.objects.filter(
        payment_type=payment_type, **{f"{side.counterparty_field}_id": counterparty_id}
    ).order_by("payment_date", "number")

    result = []
    for payment in payments:
        remaining = payment_remaining(payment)
        if remaining > 0:
            payment.remaining_amount = remaining
            result.append(payment)
    return result


def recompute_paid_amount(invoice) -> Decimal:
    """paid_amount := Σ allocations. Persisted after every allocation change."""
    paid = allocated_total(invoice=invoice)
    type(invoice).objects.filter(pk=invoice.pk).update(paid_amount=paid, updated_at=timezone.now())
    invoice.paid_amount = paid
    return paid


# ------------------------------------------------------------
# VALIDATION
# ------------------------------------------------------------


def _check_invoice_allocatable(*, side: PaymentSide, invoice, counterparty_id) -> None:
    if not invoice.is_posted:
        raise InvalidDocumentStateError(
            f"{invoice} is {invoice.status.lower()}; payments can only settle posted invoices"
        )
    if getattr(invoice, f"{side.counterparty_field}_id") != counterparty_id:
        raise AllocationLimitError(f"{invoice} belongs to a different {side.counterparty_field}")


def _check_amount(amount: Decimal, limit: Decimal, what: str) -> None:
    if amount <= 0:
        raise AllocationLimitError("Allocation amount must be greater than zero")
    if amount > limit:
        raise AllocationLimitError(f"Allocation of {amount} exceeds the {what} ({limit})")


def _allocate(*, payment: Payment, side: PaymentSide, invoice, amount: Decimal) -> PaymentAllocation:
    allocation = PaymentAllocation.objects.create(
        payment=payment,
        allocated_amount=amount,
        **{side.invoice_field: invoice},
    )
    recompute_paid_amount(invoice)
    return allocation


# ------------------------------------------------------------
# PAYMENT CREATION
# ------------------------------------------------------------


def _post_payment(
    *,
    payment_type: str,
    counterparty_id,
    amount,
    method: str,
    payment_date,
    reference: str,
    notes: str,
    invoice=None,
) -> Payment:
    side = _side(payment_type)
    amount = money(amount)
    if amount <= 0:
        raise AllocationLimitError("Payment amount must be greater than zero")

    method = (method or Payment.METHOD_CASH).strip().lower()
    if method not in dict(Payment.METHODS):
        raise InvalidDocumentStateError("Invalid method. Use 'cash', 'bank' or 'check'.")

    money_key = payment_account_key(method)
    accounts = resolve_accounts(money_key, side.control_key)

    counterparty = lock_row(side.counterparty_model, counterparty_id)
    if not counterparty.is_active:
        raise InvalidDocumentStateError(f"{counterparty} is inactive")

    if invoice is not None:
        _check_invoice_allocatable(side=side, invoice=invoice, counterparty_id=counterparty.pk)
        _check_amount(amount, invoice_remaining(invoice), "invoice remaining amount")

    payment_id = uuid.uuid4()
    payment_date = payment_date or timezone.localdate()
    label = (
        f"Receipt from {counterparty.name}"
        if payment_type == Payment.TYPE_RECEIPT
        else f"Payment to {counterparty.name}"
    )
    if invoice is not None:
        label = f"{label} for {invoice}"

    if payment_type == Payment.TYPE_RECEIPT:
        debit_account, credit_account = accounts[money_key], accounts[side.control_key]
    else:
        debit_account, credit_account = accounts[side.control_key], accounts[money_key]

    journal_entry = create_journal_entry(
        description=label,
        lines=[
            {"account": debit_account, "debit": amount, "description": label},
            {"account": credit_account, "credit": amount, "description": label},
        ],
        entry_date=payment_date,
        reference=f"payment:{payment_id}",
    )

    payment = Payment.objects.create(
        id=payment_id,
        payment_type=payment_type,
        payment_date=payment_date,
        amount=amount,
        method=method,
        reference=reference or "",
        notes=notes or "",
        journal_entry=journal_entry,
        **{side.counterparty_field: counterparty},
    )

    adjust_balance(counterparty, -amount)
    return payment


@transaction.atomic
def create_payment(
    *,
    payment_type: str,
    counterparty_id,
    amount,
    method: str = Payment.METHOD_CASH,
    payment_date=None,
    reference: str = "",
    notes: str = "",
) -> Payment:
    """Record an on-account payment; it can be linked to invoices later."""
    logger.info(
        "Creating payment",
        extra={"payment_type": payment_type, "counterparty_id": str(counterparty_id), "amount": str(amount)},
    )

    payment = _post_payment(
        payment_type=payment_type,
        counterparty_id=counterparty_id,
        amount=amount,
        method=method,
        payment_date=payment_date,
        reference=reference,
        notes=notes,
    )

    logger.info(
        "Payment created",
        extra={"payment_id": str(payment.id), "journal_entry_id": payment.journal_entry_id},
    )
    return payment


@transaction.atomic
def create_payment_and_allocate(
    *,
    payment_type: str,
    counterparty_id,
    amount,
    invoice_id,
    method: str = Payment.METHOD_CASH,
    payment_date=None,
    reference: str = "",
    notes: str = "",
) -> Payment:
    """Pay (part of) one posted invoice: payment, journal, balance and allocation at once."""
    logger.info(
        "Creating payment for invoice",
        extra={
            "payment_type": payment_type,
            "counterparty_id": str(counterparty_id),
            "invoice_id": str(invoice_id),
            "amount": str(amount),
        },
    )

    side = _side(payment_type)
    invoice = lock_row(side.invoice_model, invoice_id)

    payment = _post_payment(
        payment_type=payment_type,
        counterparty_id=counterparty_id,
        amount=amount,
        method=method,
        payment_date=payment_date,
        reference=reference,
        notes=notes,
        invoice=invoice,
    )
    _allocate(payment=payment, side=side, invoice=invoice, amount=payment.amount)

    logger.info(
        "Payment created and allocated",
        extra={
            "payment_id": str(payment.id),
            "invoice_id": str(invoice.pk),
            "paid_amount": str(invoice.paid_amount),
        },
    )
    return payment


# ------------------------------------------------------------
# LINK / UNLINK
# ------------------------------------------------------------


@transaction.atomic
def link_existing_payment(*, payment_id, invoice_id, amount) -> PaymentAllocation:
    """
    Allocate part of an existing payment to an invoice.

    amount must satisfy 0 < amount <= min(payment remaining, invoice remaining).
    No journal and no balance change: the money already moved.
    """
    payment = lock_row(Payment, payment_id)
    side = _side(payment.payment_type)
    invoice = lock_row(side.invoice_model, invoice_id)

    _check_invoice_allocatable(side=side, invoice=invoice, counterparty_id=payment.counterparty_id)

    amount = money(amount)
    limit = min(payment_remaining(payment), invoice_remaining(invoice))
    try:
        _check_amount(amount, limit, "payment/invoice remaining amount")
    except AllocationLimitError:
        logger.warning(
            "Allocation rejected",
            extra={
                "payment_id": str(payment.pk),
                "invoice_id": str(invoice.pk),
                "amount": str(amount),
                "limit": str(limit),
            },
        )
        raise

    allocation = _allocate(payment=payment, side=side, invoice=invoice, amount=amount)

    logger.info(
        "Payment linked to invoice",
        extra={
            "allocation_id": str(allocation.pk),
            "payment_id": str(payment.pk),
            "invoice_id": str(invoice.pk),
            "amount": str(amount),
        },
    )
    return allocation


@transaction.atomic
def unlink_allocation(*, allocation_id) -> Decimal:
    """
    Remove an allocation and recompute the invoice's paid_amount.
    The payment, its journal entry and the counterparty balance are untouched.
    """
    allocation = lock_row(PaymentAllocation, allocation_id, label="Allocation")
    invoice = allocation.invoice
    invoice = lock_row(type(invoice), invoice.pk)

    allocation.delete()
    paid = recompute_paid_amount(invoice)

    logger.info(
        "Allocation removed",
        extra={"allocation_id": str(allocation_id), "invoice_id": str(invoice.pk), "paid_amount": str(paid)},
    )
    return paid
