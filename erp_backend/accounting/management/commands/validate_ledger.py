# accounting/management/commands/validate_ledger.py

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db.models import Sum

from accounting.models.journal import JournalEntry
from accounting.services.amounts import money
from accounting.services.journal_entry_service import balance_tolerance
from accounting.services.trial_balance_service import TrialBalanceService
from payments.services.reconciler import allocated_total
from products.models import Product
from products.services.stock import quantity_from_movements
from purchases.models import PurchaseInvoice, Supplier
from purchases.services.supplier_balance import supplier_balance_from_documents
from sales.models import Customer, SalesInvoice
from sales.services.customer_balance import customer_balance_from_documents


class Command(BaseCommand):
    help = (
        "Validate the running caches against their source records: "
        "journal balance, stock vs. movements, counterparty balances, paid amounts."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any error is found.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))
        errors = 0

        self.stdout.write(self.style.MIGRATE_HEADING("Ledger Validation"))

        errors += self._check_journal_entries()
        errors += self._check_trial_balance()
        errors += self._check_stock()
        errors += self._check_counterparties(Customer, customer_balance_from_documents)
        errors += self._check_counterparties(Supplier, supplier_balance_from_documents)
        errors += self._check_paid_amounts(SalesInvoice)
        errors += self._check_paid_amounts(PurchaseInvoice)

        self.stdout.write("")
        if errors == 0:
            self.stdout.write(self.style.SUCCESS("VALIDATION PASSED"))
        else:
            self.stderr.write(self.style.ERROR(f"VALIDATION FOUND ISSUES: {errors} problem(s)"))

        return self._exit(strict and errors > 0)

    # -----------------------------
    # Checks (each returns its error count)
    # -----------------------------

    def _check_journal_entries(self) -> int:
        tolerance = balance_tolerance()
        bad = []
        for entry in JournalEntry.objects.annotate(d=Sum("lines__debit"), c=Sum("lines__credit")):
            debit, credit = money(entry.d or 0), money(entry.c or 0)
            if abs(debit - credit) > tolerance or debit != entry.total_debit:
                bad.append((entry.entry_number, debit, credit, entry.total_debit))

        if bad:
            self.stderr.write(self.style.ERROR(f"[FAIL] Journal entries out of balance: {len(bad)}"))
            for number, debit, credit, header in bad[:10]:
                self.stderr.write(f"  JE-{number} lines Dr={debit} Cr={credit} header={header}")
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every journal entry balances"))
        return len(bad)

    def _check_trial_balance(self) -> int:
        totals = TrialBalanceService().generate()["totals"]
        if not totals["balanced"]:
            self.stderr.write(
                self.style.ERROR(f"[FAIL] Trial balance: debit={totals['debit']} credit={totals['credit']}")
            )
            return 1
        self.stdout.write(self.style.SUCCESS(f"[OK] Trial balance: {totals['debit']} = {totals['credit']}"))
        return 0

    def _check_stock(self) -> int:
        drifted = []
        for product in Product.objects.order_by("code"):
            expected = quantity_from_movements(product)
            if product.quantity_on_hand != expected:
                drifted.append((product.code, product.quantity_on_hand, expected))

        if drifted:
            self.stderr.write(self.style.ERROR(f"[FAIL] Stock drift on {len(drifted)} product(s)"))
            for code, on_hand, expected in drifted[:10]:
                self.stderr.write(f"  {code}: on_hand={on_hand} movements={expected}")
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Stock matches the movement history"))
        return len(drifted)

    def _check_counterparties(self, model, fold) -> int:
        label = model._meta.verbose_name_plural
        drifted = []
        for party in model.objects.order_by("code"):
            expected = fold(party)
            if party.balance != expected:
                drifted.append((party.code, party.balance, expected))

        if drifted:
            self.stderr.write(self.style.ERROR(f"[FAIL] Balance drift on {len(drifted)} {label}"))
            for code, balance, expected in drifted[:10]:
                self.stderr.write(f"  {code}: balance={balance} documents={expected}")
        else:
            self.stdout.write(self.style.SUCCESS(f"[OK] {label.capitalize()} balances match documents"))
        return len(drifted)

    def _check_paid_amounts(self, model) -> int:
        label = model._meta.verbose_name_plural
        drifted = []
        for invoice in model.objects.exclude(status=model.STATUS_DRAFT):
            expected = allocated_total(invoice=invoice)
            if invoice.paid_amount != expected:
                drifted.append((invoice.number, invoice.paid_amount, expected))

        if drifted:
            self.stderr.write(self.style.ERROR(f"[FAIL] paid_amount drift on {len(drifted)} {label}"))
            for number, paid, expected in drifted[:10]:
                self.stderr.write(f"  #{number}: paid_amount={paid} allocations={expected}")
        else:
            self.stdout.write(self.style.SUCCESS(f"[OK] {label.capitalize()} paid amounts match allocations"))
        return len(drifted)

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
