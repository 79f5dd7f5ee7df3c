from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product
from products.services.stock import record_opening_balance


class Command(BaseCommand):
    help = "Seed demo products with opening stock at a known cost"

    def add_arguments(self, parser):
        parser.add_argument(
            "--no-stock",
            action="store_true",
            help="Create the products without opening balances.",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        # (code, name, unit, purchase price, selling price, opening qty)
        products_data = [
            ("P-1001", "A4 Copy Paper (500 sheets)", "ream", "18.00", "25.00", "120"),
            ("P-1002", "Ballpoint Pen Blue", "box", "6.50", "9.00", "200"),
            ("P-1003", "Stapler Heavy Duty", "pcs", "42.00", "60.00", "35"),
            ("P-1004", "Printer Toner Black", "pcs", "150.00", "210.00", "18"),
            ("P-1005", "Archive Box", "pcs", "4.25", "7.50", "0"),
        ]

        created_count = 0
        opened_count = 0

        for code, name, unit, cost, price, opening_qty in products_data:
            product, created = Product.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "unit": unit,
                    "purchase_price": Decimal(cost),
                    "selling_price": Decimal(price),
                    "min_stock_level": Decimal("10"),
                },
            )
            if created:
                created_count += 1

            quantity = Decimal(opening_qty)
            # Only seed opening stock once, into an untouched product.
            if options["no_stock"] or quantity <= 0 or product.movements.exists():
                continue

            record_opening_balance(product=product, quantity=quantity, unit_cost=Decimal(cost))
            opened_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Products seeded ({created_count} new, {opened_count} opening balances)."
            )
        )
