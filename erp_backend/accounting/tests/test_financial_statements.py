# accounting/tests/test_financial_statements.py

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounting.services.balance_sheet_service import CURRENT_EARNINGS_CODE, generate_balance_sheet
from accounting.services.profit_and_loss_service import get_profit_and_loss
from accounting.tests.helpers import (
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
from payments.services.reconciler import create_payment_and_allocate, unlink_allocation


class FinancialStatementTests(TestCase):
    def setUp(self):
        seed_chart()
        self.customer = make_customer()
        self.supplier = make_supplier()
        self.product = make_product()

        purchase_invoice(self.supplier, [(self.product, 20, 100)])
        purchase_invoice(self.supplier, [(self.product, 10, 120)])
        self.invoice = sales_invoice(self.customer, [(self.product, 8, 200)])
        sales_return(self.customer, [(self.product, 2, 200)], invoice=self.invoice)
        self.payment = create_payment_and_allocate(
            payment_type=Payment.TYPE_RECEIPT,
            counterparty_id=self.customer.pk,
            amount="500",
            invoice_id=self.invoice.pk,
        )

    def test_profit_and_loss_after_a_trading_cycle(self):
        report = get_profit_and_loss()

        self.assertEqual([row["code"] for row in report["income"]], ["4101"])
        self.assertEqual([row["code"] for row in report["expenses"]], ["5101"])
        self.assertEqual(report["totals"]["income_minor"], 120000)
        self.assertEqual(report["totals"]["expenses_minor"], 64000)
        self.assertEqual(report["totals"]["net_profit_minor"], 56000)
        self.assertEqual(report["totals"]["net_profit"], 560.0)

    def test_balance_sheet_includes_current_period_earnings(self):
        report = generate_balance_sheet()
        totals = report["totals"]

        self.assertEqual(
            {row["code"]: row["balance_minor"] for row in report["assets"]},
            {"1101": 50000, "1103": 70000, "1104": 256000},
        )
        self.assertEqual(
            {row["code"]: row["balance_minor"] for row in report["liabilities"]},
            {"2101": 320000},
        )
        self.assertEqual(
            {row["code"]: row["balance_minor"] for row in report["equity"]},
            {CURRENT_EARNINGS_CODE: 56000},
        )

        profit = get_profit_and_loss()["totals"]["net_profit_minor"]
        self.assertEqual(totals["assets_minor"], totals["liabilities_minor"] + profit)
        self.assertEqual(totals["assets_minor"], totals["liabilities_plus_equity_minor"])
        self.assertTrue(totals["balanced"])

    def test_cancelled_sale_drops_out_of_both_statements(self):
        unlink_allocation(allocation_id=self.payment.allocations.get().pk)
        cancel(self.invoice)

        pnl = get_profit_and_loss()
        # Only the return remains: revenue -400, cost of sales -213.33.
        self.assertEqual(pnl["totals"]["income_minor"], -40000)
        self.assertEqual(pnl["totals"]["expenses_minor"], -21333)

        sheet = generate_balance_sheet()
        self.assertEqual(
            sheet["totals"]["assets_minor"],
            sheet["totals"]["liabilities_minor"] + pnl["totals"]["net_profit_minor"],
        )

    def test_period_filter(self):
        tomorrow = timezone.localdate() + timedelta(days=1)

        report = get_profit_and_loss(date_from=tomorrow, date_to=tomorrow)

        self.assertEqual(report["income"], [])
        self.assertEqual(report["expenses"], [])
        self.assertEqual(report["totals"]["net_profit_minor"], 0)

        yesterday = timezone.localdate() - timedelta(days=1)
        sheet = generate_balance_sheet(as_of=yesterday)
        self.assertEqual(sheet["assets"], [])
        self.assertEqual(sheet["totals"]["assets_minor"], 0)


class FinancialStatementApiTests(TestCase):
    def setUp(self):
        seed_chart()
        user = get_user_model().objects.create_user(username="controller", password="pass12345")
        self.client = APIClient()
        self.client.force_authenticate(user=user)

        product = make_product()
        purchase_invoice(make_supplier(), [(product, 4, 25)])
        sales_invoice(make_customer(), [(product, 1, 40)])

    def test_profit_and_loss(self):
        response = self.client.get("/api/accounting/profit-and-loss/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["totals"]["net_profit_minor"], 1500)

    def test_balance_sheet(self):
        response = self.client.get("/api/accounting/balance-sheet/", {"as_of": timezone.localdate().isoformat()})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["totals"]["assets_minor"], 11500)
        self.assertEqual(response.data["totals"]["liabilities_plus_equity_minor"], 11500)

    def test_bad_dates_are_rejected(self):
        response = self.client.get("/api/accounting/profit-and-loss/", {"date_to": "31/12/2025"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "invalid_date")

        response = self.client.get("/api/accounting/balance-sheet/", {"as_of": "soon"})
        self.assertEqual(response.status_code, 400)
