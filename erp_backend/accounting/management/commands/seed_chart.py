# accounting/management/commands/seed_chart.py

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account

# (code, name, type, is_parent, parent_code); parents listed before children.
DEFAULT_CHART = [
    # ASSETS
    ("1", "Assets", Account.ASSET, True, None),
    ("11", "Current Assets", Account.ASSET, True, "1"),
    ("1101", "Cash on Hand", Account.ASSET, False, "11"),
    ("1102", "Bank", Account.ASSET, False, "11"),
    ("1103", "Customers (Accounts Receivable)", Account.ASSET, False, "11"),
    ("1104", "Inventory", Account.ASSET, False, "11"),
    ("12", "Fixed Assets", Account.ASSET, True, "1"),
    ("1201", "Furniture & Fixtures", Account.ASSET, False, "12"),
    ("1202", "Equipment", Account.ASSET, False, "12"),
    ("1203", "Vehicles", Account.ASSET, False, "12"),
    # LIABILITIES
    ("2", "Liabilities", Account.LIABILITY, True, None),
    ("2101", "Suppliers (Accounts Payable)", Account.LIABILITY, False, "2"),
    ("2102", "Short-term Loans", Account.LIABILITY, False, "2"),
    ("2103", "Long-term Loans", Account.LIABILITY, False, "2"),
    # EQUITY
    ("3", "Equity", Account.EQUITY, True, None),
    ("3101", "Owner Capital", Account.EQUITY, False, "3"),
    ("3102", "Retained Earnings", Account.EQUITY, False, "3"),
    # REVENUE
    ("4", "Revenue", Account.REVENUE, True, None),
    ("4101", "Sales Revenue", Account.REVENUE, False, "4"),
    ("4102", "Service Revenue", Account.REVENUE, False, "4"),
    ("4103", "Other Revenue", Account.REVENUE, False, "4"),
    ("4201", "Inventory Surplus", Account.REVENUE, False, "4"),
    # EXPENSES
    ("5", "Expenses", Account.EXPENSE, True, None),
    ("5101", "Cost of Goods Sold", Account.EXPENSE, False, "5"),
    ("5102", "Salaries & Wages", Account.EXPENSE, False, "5"),
    ("5103", "Rent", Account.EXPENSE, False, "5"),
    ("5104", "Utilities", Account.EXPENSE, False, "5"),
    ("5105", "Administrative Expenses", Account.EXPENSE, False, "5"),
    ("5106", "Marketing Expenses", Account.EXPENSE, False, "5"),
    ("5107", "Depreciation", Account.EXPENSE, False, "5"),
    ("5201", "Inventory Shortage", Account.EXPENSE, False, "5"),
]


class Command(BaseCommand):
    help = "Seed the default chart of accounts (idempotent; safe to re-run)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding chart of accounts...")

        created_count = 0
        updated_count = 0
        by_code: dict[str, Account] = {}

        for code, name, account_type, is_parent, parent_code in DEFAULT_CHART:
            parent = by_code.get(parent_code) if parent_code else None

            acc, acc_created = Account.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "account_type": account_type,
                    "is_parent": is_parent,
                    "parent": parent,
                    "is_active": True,
                },
            )
            by_code[code] = acc

            if acc_created:
                created_count += 1
                continue

            needs_update = False
            if acc.account_type != account_type:
                acc.account_type = account_type
                needs_update = True
            if acc.is_parent != is_parent:
                acc.is_parent = is_parent
                needs_update = True
            if acc.parent_id != getattr(parent, "id", None):
                acc.parent = parent
                needs_update = True
            if not acc.is_active:
                acc.is_active = True
                needs_update = True

            if needs_update:
                acc.save(update_fields=["account_type", "is_parent", "parent", "is_active", "updated_at"])
                updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Chart seeded ({created_count} new accounts, {updated_count} updated)."
            )
        )
