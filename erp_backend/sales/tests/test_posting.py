# sales/tests/test_posting.py

from django.test import TestCase

from accounting.models.journal import JournalEntryLine
from accounting.services.document_lifecycle import post_document
from accounting.services.exceptions import InvalidDocumentStateError
from accounting.tests.helpers import (
    D,
    balance_of,
    cancel,
    make_customer,
    make_product,
    make_supplier,
    purchase_invoice,
    sales_invoice,
    sales_return,
    seed_chart,
)
from payments.models import Payment
from payments.services.reconciler import create_payment_and_allocate
from sales.models import SalesReturn, SalesReturnItem
from sales.services.customer_balance import customer_balance_from_documents


def journal_lines(entry):
    return sorted(
        (line.account.code, line.debit, line.credit)
        for line in JournalEntryLine.objects.filter(journal_entry=entry).select_related("account")
    )


class SalesInvoicePostingTests(TestCase):
    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.product = make_product(selling_price=D("25"))
        purchase_invoice(make_supplier(), [(self.product, 10, 15)])

    def test_posting_books_revenue_cost_and_stock(self):
        invoice = sales_invoice(self.customer, [(self.product, 4, 25)])

        self.assertEqual(
            journal_lines(invoice.journal_entry),
            [
                ("1103", D("100.00"), D("0.00")),
                ("1104", D("0.00"), D("60.00")),
                ("4101", D("0.00"), D("100.00")),
                ("5101", D("60.00"), D("0.00")),
            ],
        )
        self.assertEqual(invoice.journal_entry.entry_date, invoice.document_date)
        self.assertEqual(invoice.items.get().unit_cost, D("15"))

        self.product.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, D("6"))
        self.assertEqual(self.customer.balance, D("100.00"))

    def test_cancel_restores_stock_and_balance(self):
        invoice = sales_invoice(self.customer, [(self.product, 4, 25)])

        cancel(invoice)

        self.product.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, D("10"))
        self.assertEqual(self.customer.balance, D("0.00"))
        self.assertEqual(balance_of("4101"), D("0.00"))
        self.assertEqual(balance_of("5101"), D("0.00"))
        self.assertEqual(
            journal_lines(invoice.reversal_entry),
            [
                ("1103", D("0.00"), D("100.00")),
                ("1104", D("60.00"), D("0.00")),
                ("4101", D("100.00"), D("0.00")),
                ("5101", D("0.00"), D("60.00")),
            ],
        )

    def test_cancel_refused_while_payments_are_allocated(self):
        invoice = sales_invoice(self.customer, [(self.product, 4, 25)])
        create_payment_and_allocate(
            payment_type=Payment.TYPE_RECEIPT,
            counterparty_id=self.customer.pk,
            amount="40",
            invoice_id=invoice.pk,
        )

        with self.assertRaises(InvalidDocumentStateError):
            cancel(invoice)

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, "POSTED")


class SalesReturnPostingTests(TestCase):
    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.product = make_product()
        purchase_invoice(make_supplier(), [(self.product, 10, 15)])
        self.invoice = sales_invoice(self.customer, [(self.product, 4, 25)])

    def test_return_reverses_revenue_and_restocks_at_cost(self):
        document = sales_return(self.customer, [(self.product, 1, 25)], invoice=self.invoice)

        self.assertEqual(
            journal_lines(document.journal_entry),
            [
                ("1103", D("0.00"), D("25.00")),
                ("1104", D("15.00"), D("0.00")),
                ("4101", D("25.00"), D("0.00")),
                ("5101", D("0.00"), D("15.00")),
            ],
        )
        self.assertEqual(document.cost_amount, D("15.00"))

        self.customer.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.customer.balance, D("75.00"))
        self.assertEqual(self.product.quantity_on_hand, D("7"))

    def test_return_without_an_invoice_is_allowed(self):
        document = sales_return(self.customer, [(self.product, 1, 20)])
        self.assertEqual(document.status, "POSTED")

    def test_return_against_a_draft_invoice_is_rejected(self):
        draft = sales_invoice(self.customer, [(self.product, 1, 25)], post=False)

        with self.assertRaises(InvalidDocumentStateError):
            sales_return(self.customer, [(self.product, 1, 25)], invoice=draft)

    def test_return_against_a_cancelled_invoice_is_rejected(self):
        document = sales_return(self.customer, [(self.product, 1, 25)], invoice=self.invoice, post=False)
        cancel(self.invoice)

        with self.assertRaises(InvalidDocumentStateError):
            post_document("sales_return", document.pk)

    def test_customer_must_match_the_invoice(self):
        other = make_customer(code="C-200", name="Other")
        document = SalesReturn.objects.create(customer=self.customer, sales_invoice=self.invoice)
        SalesReturnItem.objects.create(
            document=document, product=self.product, quantity=D("1"), unit_price=D("1")
        )
        # Move the customer underneath the draft, bypassing model validation.
        SalesReturn.objects.filter(pk=document.pk).update(customer=other)

        with self.assertRaises(InvalidDocumentStateError):
            post_document("sales_return", document.pk)


class CustomerBalanceFoldTests(TestCase):
    def test_balance_equals_documents_minus_receipts(self):
        seed_chart()
        customer = make_customer()
        product = make_product()
        purchase_invoice(make_supplier(), [(product, 50, 3)])

        first = sales_invoice(customer, [(product, 10, 8)])
        second = sales_invoice(customer, [(product, 5, 8)])
        sales_return(customer, [(product, 2, 8)], invoice=first)
        create_payment_and_allocate(
            payment_type=Payment.TYPE_RECEIPT, counterparty_id=customer.pk, amount="30", invoice_id=first.pk
        )
        cancel(second)

        customer.refresh_from_db()
        self.assertEqual(customer.balance, D("34.00"))
        self.assertEqual(customer_balance_from_documents(customer), D("34.00"))
        self.assertEqual(balance_of("1103"), D("34.00"))
