# accounting/tests/test_journal_entry_service.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.exceptions import ImbalancedEntryError, JournalEntryCreationError
from accounting.services.journal_entry_service import (
    create_journal_entry,
    entry_totals,
    is_balanced,
    reverse_journal_entry,
)
from accounting.tests.helpers import seed_chart


class JournalEntryServiceTests(TestCase):
    """
    GUARANTEES:
    - Entries balance within the tolerance or are rejected whole
    - Header totals equal the sum of the stored lines
    - Group accounts and double-sided lines are refused
    - Entries and lines are immutable
    """

    def setUp(self):
        seed_chart()
        self.cash = Account.objects.get(code="1101")
        self.revenue = Account.objects.get(code="4101")
        self.customers = Account.objects.get(code="1103")

    def test_balanced_entry_is_created_with_numbered_lines(self):
        entry = create_journal_entry(
            description="Cash sale",
            lines=[
                {"account": self.cash, "debit": "150.00"},
                {"account": self.revenue, "credit": "150.00"},
            ],
            reference="test:1",
        )

        self.assertEqual(entry.total_debit, Decimal("150.00"))
        self.assertEqual(entry.total_credit, Decimal("150.00"))
        self.assertEqual(
            list(entry.lines.values_list("line_number", flat=True)),
            [1, 2],
        )
        self.assertTrue(is_balanced(entry))

    def test_imbalanced_entry_is_rejected_and_nothing_is_written(self):
        with self.assertRaises(ImbalancedEntryError) as ctx:
            create_journal_entry(
                description="Broken",
                lines=[
                    {"account": self.cash, "debit": "100.00"},
                    {"account": self.revenue, "credit": "99.98"},
                ],
            )

        self.assertEqual(ctx.exception.total_debit, Decimal("100.00"))
        self.assertEqual(ctx.exception.total_credit, Decimal("99.98"))
        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(JournalEntryLine.objects.count(), 0)

    def test_difference_within_tolerance_is_accepted(self):
        entry = create_journal_entry(
            description="Rounding",
            lines=[
                {"account": self.cash, "debit": "100.00"},
                {"account": self.revenue, "credit": "99.99"},
            ],
        )

        # Header stores the debit side on both columns.
        self.assertEqual(entry.total_debit, Decimal("100.00"))
        self.assertEqual(entry.total_credit, Decimal("100.00"))
        self.assertEqual(entry_totals(entry), (Decimal("100.00"), Decimal("99.99")))

    @override_settings(ACCOUNTING_BALANCE_TOLERANCE=Decimal("0.00"))
    def test_tolerance_is_configurable(self):
        with self.assertRaises(ImbalancedEntryError):
            create_journal_entry(
                description="Rounding",
                lines=[
                    {"account": self.cash, "debit": "100.00"},
                    {"account": self.revenue, "credit": "99.99"},
                ],
            )

    def test_zero_lines_are_dropped(self):
        entry = create_journal_entry(
            description="With zero leg",
            lines=[
                {"account": self.cash, "debit": "10.00"},
                {"account": self.revenue, "credit": "10.00"},
                {"account": self.customers, "debit": "0", "credit": "0"},
            ],
        )
        self.assertEqual(entry.lines.count(), 2)

    def test_group_account_cannot_be_posted_to(self):
        assets = Account.objects.get(code="1")
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="Into a group",
                lines=[
                    {"account": assets, "debit": "10.00"},
                    {"account": self.revenue, "credit": "10.00"},
                ],
            )

    def test_line_with_both_sides_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="Both sides",
                lines=[
                    {"account": self.cash, "debit": "10.00", "credit": "10.00"},
                ],
            )

    def test_reversal_swaps_every_line_and_keeps_the_original(self):
        original = create_journal_entry(
            description="Invoice",
            lines=[
                {"account": self.customers, "debit": "80.00"},
                {"account": self.revenue, "credit": "80.00"},
            ],
            reference="sales_invoice:x",
        )

        mirror = reverse_journal_entry(entry=original)

        self.assertEqual(mirror.reverses_id, original.pk)
        self.assertEqual(mirror.reference, "sales_invoice:x")
        mirrored = {
            line.account.code: (line.debit, line.credit)
            for line in mirror.lines.select_related("account")
        }
        self.assertEqual(mirrored["1103"], (Decimal("0.00"), Decimal("80.00")))
        self.assertEqual(mirrored["4101"], (Decimal("80.00"), Decimal("0.00")))

        original.refresh_from_db()
        self.assertEqual(original.lines.count(), 2)

    def test_entries_and_lines_are_immutable(self):
        entry = create_journal_entry(
            description="Locked",
            lines=[
                {"account": self.cash, "debit": "5.00"},
                {"account": self.revenue, "credit": "5.00"},
            ],
        )

        entry.description = "Changed"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

        line = entry.lines.first()
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()
