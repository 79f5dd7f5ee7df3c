# sales/tests/test_api.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.tests.helpers import (
    D,
    make_customer,
    make_product,
    make_supplier,
    purchase_invoice,
    sales_invoice,
    seed_chart,
)
from accounting.services.document_lifecycle import post_document
from accounting.services.exceptions import ConcurrencyConflictError, InvalidDocumentStateError
from payments.models import Payment
from payments.services.reconciler import create_payment
from sales.models import Customer, SalesInvoice
from sales.serializers import CustomerSerializer, SalesInvoiceSerializer


class SalesApiTestCase(TestCase):
    def setUp(self):
        seed_chart()
        user = get_user_model().objects.create_user(username="seller", password="pass12345")
        self.client = APIClient()
        self.client.force_authenticate(user=user)

        self.customer = make_customer()
        self.product = make_product()
        purchase_invoice(make_supplier(), [(self.product, 20, 10)])


class SalesInvoiceApiTests(SalesApiTestCase):
    def _create_draft(self, **overrides):
        payload = {
            "customer": str(self.customer.pk),
            "items": [
                {"product": str(self.product.pk), "quantity": "3", "unit_price": "18.00"},
                {"product": str(self.product.pk), "quantity": "1", "unit_price": "20.00", "discount": "2.00"},
            ],
        }
        payload.update(overrides)
        return self.client.post("/api/sales/invoices/", payload, format="json")

    def test_draft_totals_come_from_the_lines(self):
        response = self._create_draft(subtotal="1.00", status="POSTED")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "DRAFT")
        self.assertEqual(response.data["subtotal"], "72.00")
        self.assertEqual(response.data["total"], "72.00")
        self.assertEqual(len(response.data["items"]), 2)
        self.assertEqual(response.data["customer_name"], "Acme Trading")

    def test_items_are_replaced_on_update(self):
        invoice_id = self._create_draft().data["id"]

        response = self.client.patch(
            f"/api/sales/invoices/{invoice_id}/",
            {"items": [{"product": str(self.product.pk), "quantity": "2", "unit_price": "30.00"}]},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["subtotal"], "60.00")
        self.assertEqual(SalesInvoice.objects.get(pk=invoice_id).items.count(), 1)

    def test_posted_invoice_cannot_be_edited_or_deleted(self):
        invoice = sales_invoice(self.customer, [(self.product, 1, 15)])

        response = self.client.patch(
            f"/api/sales/invoices/{invoice.pk}/", {"notes": "changed"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "invalid_state")

        response = self.client.delete(f"/api/sales/invoices/{invoice.pk}/")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "validation_error")
        self.assertTrue(SalesInvoice.objects.filter(pk=invoice.pk).exists())

    def test_edit_from_a_stale_read_cannot_reopen_a_posted_invoice(self):
        invoice = sales_invoice(self.customer, [(self.product, 1, 15)], post=False)
        stale = SalesInvoice.objects.get(pk=invoice.pk)
        post_document("sales_invoice", invoice.pk)

        serializer = SalesInvoiceSerializer(stale, data={"notes": "late edit"}, partial=True)
        serializer.is_valid(raise_exception=True)
        with self.assertRaises(InvalidDocumentStateError):
            serializer.save()

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, SalesInvoice.STATUS_POSTED)
        self.assertIsNotNone(invoice.journal_entry_id)
        self.assertEqual(invoice.notes, "")

        with self.assertRaises(InvalidDocumentStateError):
            post_document("sales_invoice", invoice.pk)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_on_hand, D("19"))

    def test_draft_edits_bump_the_version_and_honour_expected_version(self):
        invoice_id = self._create_draft().data["id"]

        response = self.client.patch(
            f"/api/sales/invoices/{invoice_id}/",
            {"notes": "first", "expected_version": 0},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["version"], 1)
        self.assertNotIn("expected_version", response.data)

        response = self.client.patch(
            f"/api/sales/invoices/{invoice_id}/",
            {"notes": "second", "expected_version": 0},
            format="json",
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "concurrency_conflict")
        self.assertEqual(SalesInvoice.objects.get(pk=invoice_id).notes, "first")

        with self.assertRaises(ConcurrencyConflictError):
            post_document("sales_invoice", invoice_id, expected_version=0)
        self.assertEqual(post_document("sales_invoice", invoice_id, expected_version=1)["status"], "POSTED")

    def test_draft_can_be_deleted(self):
        invoice_id = self._create_draft().data["id"]

        response = self.client.delete(f"/api/sales/invoices/{invoice_id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(SalesInvoice.objects.filter(pk=invoice_id).exists())

    def test_inactive_customer_is_rejected(self):
        self.customer.is_active = False
        self.customer.save()

        response = self._create_draft()

        self.assertEqual(response.status_code, 400)
        self.assertIn("customer", response.data)

    def test_filter_by_status(self):
        sales_invoice(self.customer, [(self.product, 1, 15)])
        self._create_draft()

        response = self.client.get("/api/sales/invoices/", {"status": "DRAFT"})

        self.assertEqual(response.data["count"], 1)


class SalesReturnApiTests(SalesApiTestCase):
    def test_customer_is_taken_from_the_invoice(self):
        invoice = sales_invoice(self.customer, [(self.product, 2, 15)])

        response = self.client.post(
            "/api/sales/returns/",
            {
                "sales_invoice": str(invoice.pk),
                "items": [{"product": str(self.product.pk), "quantity": "1", "unit_price": "15.00"}],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["customer"], self.customer.pk)

    def test_draft_invoice_cannot_be_referenced(self):
        draft = sales_invoice(self.customer, [(self.product, 2, 15)], post=False)

        response = self.client.post(
            "/api/sales/returns/",
            {"customer": str(self.customer.pk), "sales_invoice": str(draft.pk)},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("sales_invoice", response.data)


class CustomerApiTests(SalesApiTestCase):
    def test_balance_is_read_only(self):
        response = self.client.post(
            "/api/sales/customers/",
            {"code": "C-9", "name": "Walk-in", "balance": "500.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["balance"], "0.00")

    def test_statement_lists_open_invoices_and_unallocated_receipts(self):
        invoice = sales_invoice(self.customer, [(self.product, 2, 50)])
        create_payment(payment_type=Payment.TYPE_RECEIPT, counterparty_id=self.customer.pk, amount="30")

        response = self.client.get(f"/api/sales/customers/{self.customer.pk}/statement/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["balance"], "70.00")
        self.assertEqual(response.data["balance_from_documents"], "70.00")
        self.assertEqual([row["id"] for row in response.data["open_invoices"]], [str(invoice.pk)])
        self.assertEqual(response.data["unallocated_receipts"][0]["remaining_amount"], "30.00")

    def test_edit_from_a_stale_read_keeps_the_posted_balance(self):
        stale = Customer.objects.get(pk=self.customer.pk)
        sales_invoice(self.customer, [(self.product, 2, 50)])

        serializer = CustomerSerializer(stale, data={"phone": "555-0199"}, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.phone, "555-0199")
        self.assertEqual(self.customer.balance, D("100.00"))
        self.assertEqual(self.customer.version, 2)
