# payments/tests/test_reconciler.py

"""
RECONCILER TESTS

Invariants under test:
- Σ allocations of a payment never exceeds its amount
- Σ allocations of an invoice never exceeds its total
- invoice.paid_amount always equals Σ of its allocations
- linking and unlinking never touch the ledger or the counterparty balance
"""

import uuid
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.exceptions import (
    AllocationLimitError,
    ConcurrencyConflictError,
    InvalidDocumentStateError,
    NotFoundError,
)
from accounting.tests.helpers import (
    D,
    balance_of,
    cancel,
    make_customer,
    make_product,
    make_supplier,
    purchase_invoice,
    sales_invoice,
    seed_chart,
    trial_balance_balanced,
)
from payments.models import Payment, PaymentAllocation
from payments.services.reconciler import (
    allocated_total,
    create_payment,
    create_payment_and_allocate,
    invoice_remaining,
    link_existing_payment,
    payment_remaining,
    unallocated_payments,
    unlink_allocation,
)


def lines_of(entry):
    return sorted(
        (line.account.code, line.debit, line.credit)
        for line in JournalEntryLine.objects.filter(journal_entry=entry).select_related("account")
    )


class ReceiptAllocationTests(TestCase):
    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.product = make_product()
        purchase_invoice(make_supplier(), [(self.product, 100, 1)])
        self.invoice_a = sales_invoice(self.customer, [(self.product, 10, 10)])
        self.invoice_b = sales_invoice(self.customer, [(self.product, 6, 10)])

    def _receipt(self, amount, **kwargs):
        return create_payment(
            payment_type=Payment.TYPE_RECEIPT, counterparty_id=self.customer.pk, amount=amount, **kwargs
        )

    def assertPaidMatchesAllocations(self, *invoices):
        for invoice in invoices:
            invoice.refresh_from_db()
            self.assertEqual(invoice.paid_amount, allocated_total(invoice=invoice))
            self.assertLessEqual(invoice.paid_amount, invoice.total)

    def test_on_account_receipt_moves_money_only(self):
        payment = self._receipt("150")

        self.assertEqual(payment.number, 1)
        self.assertEqual(payment.journal_entry.reference, f"payment:{payment.pk}")
        self.assertEqual(
            lines_of(payment.journal_entry),
            [("1101", D("150.00"), D("0.00")), ("1103", D("0.00"), D("150.00"))],
        )
        self.assertEqual(payment_remaining(payment), D("150.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, D("10.00"))
        self.assertFalse(payment.allocations.exists())

    def test_bank_receipts_hit_the_bank_account(self):
        payment = self._receipt("20", method="bank")
        self.assertIn(("1102", D("20.00"), D("0.00")), lines_of(payment.journal_entry))

    def test_link_up_to_the_payment_remainder(self):
        payment = self._receipt("150")
        entries_before = JournalEntry.objects.count()

        link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_a.pk, amount="100")

        with self.assertRaises(AllocationLimitError):
            link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_b.pk, amount="50.01")

        # Exactly the remainder is accepted.
        link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_b.pk, amount="50")

        self.assertEqual(payment_remaining(payment), D("0.00"))
        self.assertPaidMatchesAllocations(self.invoice_a, self.invoice_b)
        self.assertEqual(self.invoice_b.remaining_amount, D("10.00"))
        self.assertEqual(JournalEntry.objects.count(), entries_before)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, D("10.00"))

    def test_link_up_to_the_invoice_remainder(self):
        payment = self._receipt("500")

        with self.assertRaises(AllocationLimitError):
            link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_b.pk, amount="60.01")

        link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_b.pk, amount="60")
        self.assertEqual(invoice_remaining(self.invoice_b), D("0.00"))

        with self.assertRaises(AllocationLimitError):
            link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_b.pk, amount="0.01")

    def test_amount_must_be_positive(self):
        payment = self._receipt("50")
        with self.assertRaises(AllocationLimitError):
            link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_a.pk, amount="0")
        with self.assertRaises(AllocationLimitError):
            self._receipt("-5")

    def test_unlink_recomputes_paid_amount_and_keeps_the_money(self):
        payment = self._receipt("150")
        first = link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_a.pk, amount="70")
        link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_a.pk, amount="30")
        entries_before = JournalEntry.objects.count()

        paid = unlink_allocation(allocation_id=first.pk)

        self.assertEqual(paid, D("30.00"))
        self.assertPaidMatchesAllocations(self.invoice_a)
        self.assertEqual(payment_remaining(payment), D("120.00"))
        self.assertEqual(JournalEntry.objects.count(), entries_before)
        self.assertTrue(Payment.objects.filter(pk=payment.pk).exists())

    def test_unlink_unknown_allocation(self):
        with self.assertRaises(NotFoundError):
            unlink_allocation(allocation_id=uuid.uuid4())

    def test_pay_and_allocate_in_one_step(self):
        payment = create_payment_and_allocate(
            payment_type=Payment.TYPE_RECEIPT,
            counterparty_id=self.customer.pk,
            amount="40",
            invoice_id=self.invoice_a.pk,
        )

        allocation = payment.allocations.get()
        self.assertEqual(allocation.sales_invoice_id, self.invoice_a.pk)
        self.assertIsNone(allocation.purchase_invoice_id)
        self.assertEqual(allocation.allocated_amount, D("40.00"))
        self.assertPaidMatchesAllocations(self.invoice_a)
        self.assertTrue(trial_balance_balanced())

    def test_overpaying_an_invoice_writes_nothing(self):
        entries_before = JournalEntry.objects.count()

        with self.assertRaises(AllocationLimitError):
            create_payment_and_allocate(
                payment_type=Payment.TYPE_RECEIPT,
                counterparty_id=self.customer.pk,
                amount="100.01",
                invoice_id=self.invoice_a.pk,
            )

        self.assertFalse(Payment.objects.exists())
        self.assertEqual(JournalEntry.objects.count(), entries_before)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.balance, D("160.00"))

    def test_invoice_of_another_customer_is_rejected(self):
        other = make_customer(code="C-200", name="Other")
        foreign = sales_invoice(other, [(self.product, 1, 10)])
        payment = self._receipt("50")

        with self.assertRaises(AllocationLimitError):
            link_existing_payment(payment_id=payment.pk, invoice_id=foreign.pk, amount="5")
        with self.assertRaises(AllocationLimitError):
            create_payment_and_allocate(
                payment_type=Payment.TYPE_RECEIPT,
                counterparty_id=self.customer.pk,
                amount="5",
                invoice_id=foreign.pk,
            )

    def test_only_posted_invoices_can_be_settled(self):
        draft = sales_invoice(self.customer, [(self.product, 1, 10)], post=False)
        payment = self._receipt("50")

        with self.assertRaises(InvalidDocumentStateError):
            link_existing_payment(payment_id=payment.pk, invoice_id=draft.pk, amount="5")

        cancel(self.invoice_b)
        with self.assertRaises(InvalidDocumentStateError):
            link_existing_payment(payment_id=payment.pk, invoice_id=self.invoice_b.pk, amount="5")

    def test_inactive_customer_cannot_pay(self):
        self.customer.is_active = False
        self.customer.save()

        with self.assertRaises(InvalidDocumentStateError):
            self._receipt("10")

    def test_unknown_method_is_rejected(self):
        with self.assertRaises(InvalidDocumentStateError):
            self._receipt("10", method="crypto")

    def test_unallocated_payments_lists_remainders(self):
        spent = self._receipt("60")
        partly = self._receipt("80")
        link_existing_payment(payment_id=spent.pk, invoice_id=self.invoice_b.pk, amount="60")
        link_existing_payment(payment_id=partly.pk, invoice_id=self.invoice_a.pk, amount="30")

        open_payments = unallocated_payments(Payment.TYPE_RECEIPT, self.customer.pk)

        self.assertEqual([p.pk for p in open_payments], [partly.pk])
        self.assertEqual(open_payments[0].remaining_amount, D("50.00"))

    def test_payments_and_allocations_are_permanent(self):
        payment = self._receipt("10")

        payment.notes = "edited"
        with self.assertRaises(ValidationError):
            payment.save()
        with self.assertRaises(ValidationError):
            payment.delete()

        with self.assertRaises(ValidationError):
            PaymentAllocation.objects.create(payment=payment, allocated_amount=D("1"))


class DisbursementTests(TestCase):
    def setUp(self):
        seed_chart()
        self.supplier = make_supplier()
        self.invoice = purchase_invoice(self.supplier, [(make_product(), 10, 25)])

    def test_disbursement_debits_the_supplier(self):
        payment = create_payment_and_allocate(
            payment_type=Payment.TYPE_DISBURSEMENT,
            counterparty_id=self.supplier.pk,
            amount="100",
            invoice_id=self.invoice.pk,
        )

        self.assertEqual(
            lines_of(payment.journal_entry),
            [("1101", D("0.00"), D("100.00")), ("2101", D("100.00"), D("0.00"))],
        )
        self.invoice.refresh_from_db()
        self.supplier.refresh_from_db()
        self.assertEqual(self.invoice.paid_amount, D("100.00"))
        self.assertEqual(self.supplier.balance, D("150.00"))
        self.assertEqual(balance_of("2101"), D("150.00"))
        self.assertEqual(balance_of("1101"), D("-100.00"))

    def test_number_taken_by_a_concurrent_payment_is_a_conflict(self):
        first = create_payment(
            payment_type=Payment.TYPE_DISBURSEMENT, counterparty_id=self.supplier.pk, amount="40"
        )

        with mock.patch.object(Payment, "next_number", return_value=first.number), mock.patch.object(
            Payment, "full_clean"
        ):
            with self.assertRaises(ConcurrencyConflictError):
                create_payment(
                    payment_type=Payment.TYPE_DISBURSEMENT, counterparty_id=self.supplier.pk, amount="15"
                )

        self.supplier.refresh_from_db()
        self.assertEqual(Payment.objects.count(), 1)
        self.assertEqual(self.supplier.balance, D("210.00"))
        self.assertEqual(JournalEntry.objects.filter(reference__startswith="payment:").count(), 1)

    def test_receipt_cannot_settle_a_purchase_invoice(self):
        customer = make_customer()
        receipt = create_payment(
            payment_type=Payment.TYPE_RECEIPT, counterparty_id=customer.pk, amount="10"
        )

        with self.assertRaises(NotFoundError):
            link_existing_payment(payment_id=receipt.pk, invoice_id=self.invoice.pk, amount="5")

    def test_unknown_payment_type(self):
        with self.assertRaises(InvalidDocumentStateError):
            create_payment(payment_type="REFUND", counterparty_id=self.supplier.pk, amount="10")
