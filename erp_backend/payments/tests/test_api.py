# payments/tests/test_api.py

import uuid

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.tests.helpers import (
    make_customer,
    make_product,
    make_supplier,
    purchase_invoice,
    sales_invoice,
    seed_chart,
)
from payments.models import Payment, PaymentAllocation


class PaymentsApiTests(TestCase):
    def setUp(self):
        seed_chart()
        user = get_user_model().objects.create_user(username="cashier", password="pass12345")
        self.client = APIClient()
        self.client.force_authenticate(user=user)

        self.customer = make_customer()
        product = make_product()
        purchase_invoice(make_supplier(), [(product, 10, 5)])
        self.invoice = sales_invoice(self.customer, [(product, 2, 45)])

    def _receive(self, amount, **extra):
        payload = {
            "payment_type": "RECEIPT",
            "counterparty_id": str(self.customer.pk),
            "amount": amount,
        }
        payload.update(extra)
        return self.client.post("/api/payments/", payload, format="json")

    def test_receipt_allocated_to_an_invoice(self):
        response = self._receive("50.00", invoice_id=str(self.invoice.pk), method="bank")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["counterparty_name"], "Acme Trading")
        self.assertEqual(response.data["remaining_amount"], "0.00")
        self.assertEqual(len(response.data["allocations"]), 1)
        self.assertEqual(response.data["allocations"][0]["invoice_number"], self.invoice.number)

        self.invoice.refresh_from_db()
        self.assertEqual(str(self.invoice.paid_amount), "50.00")

    def test_over_allocation_is_rejected(self):
        response = self._receive("90.01", invoice_id=str(self.invoice.pk))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "allocation_limit")
        self.assertFalse(Payment.objects.exists())

    def test_link_and_unlink(self):
        payment_id = self._receive("60.00").data["id"]

        response = self.client.post(
            f"/api/payments/{payment_id}/allocations/",
            {"invoice_id": str(self.invoice.pk), "amount": "25.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        allocation_id = response.data["id"]

        response = self.client.get(f"/api/payments/{payment_id}/")
        self.assertEqual(response.data["remaining_amount"], "35.00")

        response = self.client.get(
            "/api/payments/unallocated/",
            {"payment_type": "RECEIPT", "counterparty_id": str(self.customer.pk)},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]["remaining_amount"], "35.00")

        response = self.client.delete(f"/api/payments/allocations/{allocation_id}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["paid_amount"], "0.00")
        self.assertFalse(PaymentAllocation.objects.exists())

    def test_link_beyond_the_payment_is_rejected(self):
        payment_id = self._receive("10.00").data["id"]

        response = self.client.post(
            f"/api/payments/{payment_id}/allocations/",
            {"invoice_id": str(self.invoice.pk), "amount": "10.01"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "allocation_limit")

    def test_unknown_ids_are_not_found(self):
        response = self.client.post(
            f"/api/payments/{uuid.uuid4()}/allocations/",
            {"invoice_id": str(self.invoice.pk), "amount": "1.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 404)

        response = self.client.delete(f"/api/payments/allocations/{uuid.uuid4()}/")
        self.assertEqual(response.status_code, 404)

        response = self._receive("5.00", counterparty_id=str(uuid.uuid4()))
        self.assertEqual(response.status_code, 404)

    def test_list_filters_by_type(self):
        self._receive("5.00")

        response = self.client.get("/api/payments/", {"payment_type": "DISBURSEMENT"})
        self.assertEqual(response.data["count"], 0)

        response = self.client.get("/api/payments/", {"payment_type": "RECEIPT"})
        self.assertEqual(response.data["count"], 1)

    def test_invalid_payload(self):
        response = self.client.post(
            "/api/payments/",
            {"payment_type": "GIFT", "counterparty_id": "nope", "amount": "x"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("payment_type", response.data)
        self.assertIn("amount", response.data)
