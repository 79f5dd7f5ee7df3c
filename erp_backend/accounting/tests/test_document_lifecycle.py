# accounting/tests/test_document_lifecycle.py

"""
Posting state machine shared by every document type:
DRAFT -> POSTED -> CANCELLED, all-or-nothing, version-checked.
"""

import uuid
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.services.document_lifecycle import cancel_document, post_document
from accounting.services.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    InvalidDocumentStateError,
    NotFoundError,
)
from accounting.tests.helpers import (
    D,
    cancel,
    make_customer,
    make_product,
    make_supplier,
    purchase_invoice,
    sales_invoice,
    sales_return,
    seed_chart,
)
from products.models import InventoryMovement
from sales.models import SalesInvoice, SalesInvoiceItem


class DocumentLifecycleTests(TestCase):
    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.supplier = make_supplier()
        self.widget = make_product()
        self.gadget = make_product(code="P-200", name="Gadget")
        purchase_invoice(self.supplier, [(self.widget, 10, 50), (self.gadget, 2, 30)])

    def test_post_returns_the_new_state(self):
        invoice = sales_invoice(self.customer, [(self.widget, 1, 90)], post=False)

        result = post_document("sales_invoice", invoice.pk)

        invoice.refresh_from_db()
        self.assertEqual(result["status"], "POSTED")
        self.assertEqual(result["document_id"], str(invoice.pk))
        self.assertEqual(result["journal_entry_id"], invoice.journal_entry_id)
        self.assertEqual(result["cost_amount"], "50.00")
        self.assertEqual(result["version"], 1)
        self.assertIsNotNone(invoice.posted_at)

    def test_status_only_moves_forward(self):
        invoice = sales_invoice(self.customer, [(self.widget, 1, 90)])

        with self.assertRaises(InvalidDocumentStateError):
            post_document("sales_invoice", invoice.pk)

        cancel(invoice)
        self.assertEqual(invoice.status, SalesInvoice.STATUS_CANCELLED)

        with self.assertRaises(InvalidDocumentStateError):
            cancel_document("sales_invoice", invoice.pk)
        with self.assertRaises(InvalidDocumentStateError):
            post_document("sales_invoice", invoice.pk)

    def test_draft_cannot_be_cancelled(self):
        invoice = sales_invoice(self.customer, [(self.widget, 1, 90)], post=False)
        with self.assertRaises(InvalidDocumentStateError):
            cancel_document("sales_invoice", invoice.pk)

    def test_document_without_items_is_rejected(self):
        invoice = SalesInvoice.objects.create(customer=self.customer)
        with self.assertRaises(InvalidDocumentStateError):
            post_document("sales_invoice", invoice.pk)

    def test_number_taken_by_a_concurrent_draft_is_a_conflict(self):
        first = sales_invoice(self.customer, [(self.widget, 1, 90)], post=False)

        clash = SalesInvoice(customer=self.customer)
        with mock.patch.object(SalesInvoice, "next_number", return_value=first.number), mock.patch.object(
            SalesInvoice, "full_clean"
        ):
            with self.assertRaises(ConcurrencyConflictError):
                clash.save()

        self.assertIsNone(clash.number)
        self.assertEqual(SalesInvoice.objects.count(), 1)

    def test_stale_expected_version_is_a_conflict(self):
        invoice = sales_invoice(self.customer, [(self.widget, 1, 90)], post=False)

        with self.assertRaises(ConcurrencyConflictError):
            post_document("sales_invoice", invoice.pk, expected_version=3)

        post_document("sales_invoice", invoice.pk, expected_version=0)
        with self.assertRaises(ConcurrencyConflictError):
            cancel_document("sales_invoice", invoice.pk, expected_version=0)

    def test_failed_posting_leaves_nothing_behind(self):
        entries_before = JournalEntry.objects.count()
        movements_before = InventoryMovement.objects.count()

        # Widget has stock, gadget does not: the whole invoice must fail.
        invoice = sales_invoice(
            self.customer, [(self.widget, 1, 90), (self.gadget, 5, 40)], post=False
        )
        with self.assertRaises(InsufficientStockError) as ctx:
            post_document("sales_invoice", invoice.pk)

        self.assertEqual(ctx.exception.available, D("2.000"))
        self.assertEqual(ctx.exception.requested, D("5"))

        invoice.refresh_from_db()
        self.widget.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(invoice.status, SalesInvoice.STATUS_DRAFT)
        self.assertEqual(invoice.version, 0)
        self.assertEqual(self.widget.quantity_on_hand, D("10"))
        self.assertEqual(self.customer.balance, D("0.00"))
        self.assertEqual(JournalEntry.objects.count(), entries_before)
        self.assertEqual(InventoryMovement.objects.count(), movements_before)

    def test_quantity_is_checked_across_lines_of_the_same_product(self):
        invoice = sales_invoice(
            self.customer, [(self.widget, 6, 90), (self.widget, 6, 90)], post=False
        )
        with self.assertRaises(InsufficientStockError):
            post_document("sales_invoice", invoice.pk)

    def test_unknown_document_type(self):
        with self.assertRaises(InvalidDocumentStateError):
            post_document("delivery_note", uuid.uuid4())

    def test_missing_document_is_not_found(self):
        with self.assertRaises(NotFoundError):
            post_document("sales_invoice", uuid.uuid4())
        with self.assertRaises(NotFoundError):
            post_document("sales_invoice", "not-a-uuid")

    def test_returns_cannot_be_cancelled(self):
        document = sales_return(self.customer, [(self.widget, 1, 90)])
        with self.assertRaises(InvalidDocumentStateError):
            cancel_document("sales_return", document.pk)

    def test_posted_documents_and_items_are_frozen(self):
        invoice = sales_invoice(self.customer, [(self.widget, 1, 90)])

        with self.assertRaises(ValidationError):
            invoice.delete()

        item = invoice.items.first()
        item.quantity = D("2")
        with self.assertRaises(ValidationError):
            item.save()
        with self.assertRaises(ValidationError):
            item.delete()
        with self.assertRaises(ValidationError):
            SalesInvoiceItem.objects.create(
                document=invoice, product=self.widget, quantity=D("1"), unit_price=D("1")
            )

    def test_cancel_links_a_reversal_dated_on_cancel_date(self):
        invoice = sales_invoice(self.customer, [(self.widget, 1, 90)])
        cancel_date = invoice.document_date

        result = cancel_document("sales_invoice", invoice.pk, cancel_date=cancel_date)

        reversal = JournalEntry.objects.get(pk=result["reversal_entry_id"])
        self.assertEqual(reversal.reverses_id, invoice.journal_entry_id)
        self.assertEqual(reversal.entry_date, cancel_date)
        self.assertEqual(result["status"], "CANCELLED")
