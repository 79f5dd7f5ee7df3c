# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalEntryLine
- Enforce debit == credit (within ACCOUNTING_BALANCE_TOLERANCE)
- Guarantee atomicity (header + lines or nothing)
- Build mirror (reversal) entries

Everything else (document posting, cancellation, payments) must pass through here.

A line is a dict:
    {"account": Account, "debit": amount, "credit": amount, "description": str}
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.amounts import ZERO, money
from accounting.services.exceptions import (
    ConcurrencyConflictError,
    ImbalancedEntryError,
    JournalEntryCreationError,
)

logger = logging.getLogger(__name__)


def balance_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_TOLERANCE", "0.01")))


def _normalize_lines(lines: list) -> list[dict]:
    normalized: list[dict] = []

    for line in lines:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each journal line must be a dict")

        account = line.get("account")
        if not isinstance(account, Account) or account.pk is None:
            raise JournalEntryCreationError("Journal line references an unknown account")

        if not account.is_active:
            raise JournalEntryCreationError(f"Account {account.code} is inactive")
        if account.is_parent:
            raise JournalEntryCreationError(
                f"Account {account.code} is a group account and cannot be posted to"
            )

        debit = money(line.get("debit"))
        credit = money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")
        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A journal line cannot have both debit and credit")

        # Zero legs (e.g. a COGS leg for a free item) are dropped.
        if debit == 0 and credit == 0:
            continue

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "description": (line.get("description") or "").strip()[:255],
            }
        )

    return normalized


def _next_entry_number() -> int:
    current = JournalEntry.objects.aggregate(m=Max("entry_number"))["m"]
    return (current or 0) + 1


@transaction.atomic
def create_journal_entry(
    *,
    description: str,
    lines: list,
    entry_date: date | None = None,
    reference: str = "",
    reverses: JournalEntry | None = None,
) -> JournalEntry:
    if not lines:
        raise JournalEntryCreationError("Journal entry must contain at least one line")

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    normalized = _normalize_lines(lines)
    if not normalized:
        raise JournalEntryCreationError("Journal entry must contain at least one non-zero line")

    total_debit = money(sum((ln["debit"] for ln in normalized), ZERO))
    total_credit = money(sum((ln["credit"] for ln in normalized), ZERO))

    if abs(total_debit - total_credit) > balance_tolerance():
        logger.error(
            "Rejected imbalanced journal entry",
            extra={
                "reference": reference,
                "total_debit": str(total_debit),
                "total_credit": str(total_credit),
            },
        )
        raise ImbalancedEntryError(total_debit, total_credit)

    try:
        with transaction.atomic():
            entry = JournalEntry.objects.create(
                entry_number=_next_entry_number(),
                entry_date=entry_date or timezone.localdate(),
                description=description,
                total_debit=total_debit,
                total_credit=total_debit,
                reference=reference or "",
                reverses=reverses,
            )
    except IntegrityError as exc:
        raise ConcurrencyConflictError(
            "Journal entry number was taken by a concurrent posting; retry the operation"
        ) from exc

    JournalEntryLine.objects.bulk_create(
        [
            JournalEntryLine(
                journal_entry=entry,
                account=ln["account"],
                debit=ln["debit"],
                credit=ln["credit"],
                description=ln["description"],
                line_number=index,
            )
            for index, ln in enumerate(normalized, start=1)
        ]
    )

    logger.info(
        "Journal entry posted",
        extra={
            "journal_entry_id": entry.id,
            "entry_number": entry.entry_number,
            "reference": entry.reference,
            "total": str(total_debit),
        },
    )
    return entry


@transaction.atomic
def reverse_journal_entry(
    *,
    entry: JournalEntry,
    entry_date: date | None = None,
    description: str | None = None,
    reference: str | None = None,
) -> JournalEntry:
    """
    Post the mirror of `entry`: every line's debit and credit swapped.
    The original entry is left untouched.
    """
    lines = [
        {
            "account": line.account,
            "debit": line.credit,
            "credit": line.debit,
            "description": f"Reversal: {line.description}" if line.description else "Reversal",
        }
        for line in entry.lines.select_related("account").order_by("line_number")
    ]

    return create_journal_entry(
        description=description or f"Reversal of JE-{entry.entry_number}: {entry.description}",
        lines=lines,
        entry_date=entry_date,
        reference=entry.reference if reference is None else reference,
        reverses=entry,
    )


def entry_totals(entry: JournalEntry) -> tuple[Decimal, Decimal]:
    """Recompute (Σdebit, Σcredit) from the stored lines."""
    debit = ZERO
    credit = ZERO
    for line in entry.lines.all():
        debit += line.debit
        credit += line.credit
    return money(debit), money(credit)


def is_balanced(entry: JournalEntry) -> bool:
    debit, credit = entry_totals(entry)
    return abs(debit - credit) <= balance_tolerance()
