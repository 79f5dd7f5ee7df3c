# accounting/tests/test_api.py

import uuid

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.account import Account
from accounting.tests.helpers import (
    make_customer,
    make_product,
    make_supplier,
    purchase_invoice,
    sales_invoice,
    seed_chart,
)


class AccountingApiTestCase(TestCase):
    def setUp(self):
        seed_chart()
        self.user = get_user_model().objects.create_user(username="clerk", password="pass12345")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.customer = make_customer()
        self.supplier = make_supplier()
        self.product = make_product()


class DocumentTransitionApiTests(AccountingApiTestCase):
    def test_requires_authentication(self):
        invoice = sales_invoice(self.customer, [(self.product, 1, 10)], post=False)
        response = APIClient().post(f"/api/documents/sales_invoice/{invoice.pk}/post/")
        self.assertIn(response.status_code, (401, 403))

    def test_post_then_cancel(self):
        purchase_invoice(self.supplier, [(self.product, 5, 40)])
        invoice = sales_invoice(self.customer, [(self.product, 2, 75)], post=False)

        response = self.client.post(
            f"/api/documents/sales_invoice/{invoice.pk}/post/", {}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "POSTED")
        self.assertEqual(response.data["cost_amount"], "80.00")

        response = self.client.post(
            f"/api/documents/sales_invoice/{invoice.pk}/cancel/",
            {"expected_version": 1},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "CANCELLED")
        self.assertIsNotNone(response.data["reversal_entry_id"])

    def test_posting_twice_is_a_bad_request(self):
        invoice = purchase_invoice(self.supplier, [(self.product, 1, 10)])

        response = self.client.post(f"/api/documents/purchase_invoice/{invoice.pk}/post/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "invalid_state")

    def test_unknown_document_is_not_found(self):
        response = self.client.post(f"/api/documents/sales_invoice/{uuid.uuid4()}/post/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "not_found")

    def test_stale_version_is_a_conflict(self):
        invoice = purchase_invoice(self.supplier, [(self.product, 1, 10)], post=False)

        response = self.client.post(
            f"/api/documents/purchase_invoice/{invoice.pk}/post/",
            {"expected_version": 7},
            format="json",
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "concurrency_conflict")

    def test_insufficient_stock_is_reported(self):
        invoice = sales_invoice(self.customer, [(self.product, 3, 10)], post=False)

        response = self.client.post(f"/api/documents/sales_invoice/{invoice.pk}/post/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "insufficient_stock")

    def test_missing_accounts_are_listed(self):
        Account.objects.filter(code="2101").delete()
        invoice = purchase_invoice(self.supplier, [(self.product, 1, 10)], post=False)

        response = self.client.post(f"/api/documents/purchase_invoice/{invoice.pk}/post/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "configuration_error")
        self.assertEqual(response.data["missing_codes"], ["2101"])


class LedgerReportApiTests(AccountingApiTestCase):
    def setUp(self):
        super().setUp()
        self.invoice = purchase_invoice(self.supplier, [(self.product, 4, 25)])

    def test_trial_balance(self):
        response = self.client.get("/api/accounting/trial-balance/")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["totals"]["balanced"])
        codes = [row["account_code"] for row in response.data["accounts"]]
        self.assertEqual(codes, ["1104", "2101"])

    def test_trial_balance_rejects_bad_date(self):
        response = self.client.get("/api/accounting/trial-balance/?as_of=yesterday")
        self.assertEqual(response.status_code, 400)

    def test_account_list_filters_postable(self):
        response = self.client.get("/api/accounting/accounts/?postable=1")

        self.assertEqual(response.status_code, 200)
        codes = {row["code"] for row in response.data}
        self.assertIn("1101", codes)
        self.assertNotIn("1", codes)
        self.assertNotIn("11", codes)

    def test_account_statement(self):
        response = self.client.get("/api/accounting/accounts/2101/statement/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["balance"], "100.00")
        self.assertEqual(len(response.data["lines"]), 1)
        self.assertEqual(response.data["lines"][0]["reference"], self.invoice.journal_reference)

    def test_statement_of_unknown_account(self):
        response = self.client.get("/api/accounting/accounts/9999/statement/")
        self.assertEqual(response.status_code, 404)

    def test_journal_entries_filter_by_reference(self):
        response = self.client.get(
            "/api/accounting/journal-entries/", {"reference": self.invoice.journal_reference}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        entry = response.data["results"][0]
        self.assertEqual(len(entry["lines"]), 2)
        self.assertEqual(entry["total_debit"], "100.00")

    def test_journal_entries_are_read_only(self):
        response = self.client.post("/api/accounting/journal-entries/", {}, format="json")
        self.assertEqual(response.status_code, 405)
