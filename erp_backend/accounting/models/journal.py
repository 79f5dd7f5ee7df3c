# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY + JOURNAL LINE MODELS

A JournalEntry is one balanced accounting event; its lines carry the
per-account debits and credits.

Guarantees:
- Created only through accounting.services.journal_entry_service
- Immutable once created (no updates, no deletes)
- total_debit == total_credit on the header
- A line never carries both a debit and a credit
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from accounting.models.account import Account


class JournalEntry(models.Model):
    STATUS_POSTED = "POSTED"

    STATUSES = [
        (STATUS_POSTED, "Posted"),
    ]

    entry_number = models.PositiveIntegerField(unique=True)
    entry_date = models.DateField(
        default=timezone.localdate,
        help_text="Accounting effective date",
    )
    description = models.TextField(help_text="Narrative description of the journal entry")

    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_POSTED)

    total_debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    reference = models.CharField(
        max_length=100,
        blank=True,
        default="",
        db_index=True,
        help_text="Originating record, e.g. sales_invoice:<id> or payment:<id>",
    )
    reverses = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversals",
        help_text="The entry this one mirrors (cancellations only)",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-entry_date", "-entry_number"]
        indexes = [
            models.Index(fields=["entry_date"]),
            models.Index(fields=["created_at"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_debit=F("total_credit")),
                name="chk_journal_entry_balanced",
            ),
            models.CheckConstraint(
                condition=Q(total_debit__gte=Decimal("0.00")),
                name="chk_journal_entry_total_nonnegative",
            ),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JE-{self.entry_number} ({self.entry_date})"

    def clean(self):
        self.reference = (self.reference or "").strip()
        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")


class JournalEntryLine(models.Model):
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    description = models.CharField(max_length=255, blank=True, default="")

    line_number = models.PositiveSmallIntegerField(default=1)

    class Meta:
        ordering = ["journal_entry_id", "line_number"]
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["journal_entry", "line_number"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=Decimal("0.00")) & Q(credit__gte=Decimal("0.00")),
                name="chk_journal_line_nonnegative",
            ),
            models.CheckConstraint(
                condition=Q(debit=Decimal("0.00")) | Q(credit=Decimal("0.00")),
                name="chk_journal_line_one_side",
            ),
        ]
        verbose_name = "Journal Line"
        verbose_name_plural = "Journal Lines"

    def __str__(self):
        side = f"Dr {self.debit}" if self.debit else f"Cr {self.credit}"
        return f"{side} -> {self.account}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Journal lines are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Journal lines are immutable and cannot be deleted")
