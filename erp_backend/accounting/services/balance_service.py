# accounting/services/balance_service.py

"""
BALANCE & STATEMENT SERVICE (READ-ONLY)

This module answers ONE question:
"What is the balance of an account, and how did it get there?"

RULES:
- READ-ONLY: no writes, ever
- JournalEntryLine is the single source of truth
- Assets & Expenses carry debit balances; the rest carry credit balances
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Sum

from accounting.models.account import Account
from accounting.models.journal import JournalEntryLine
from accounting.services.exceptions import NotFoundError

TWOPLACES = Decimal("0.01")


def _q2(amount) -> Decimal:
    return Decimal(str(amount or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _get_account(code_or_account) -> Account:
    if isinstance(code_or_account, Account):
        return code_or_account
    try:
        return Account.objects.get(code=str(code_or_account).strip())
    except Account.DoesNotExist as exc:
        raise NotFoundError(f"Account {code_or_account} not found") from exc


def _lines_for(account: Account, *, date_from: date | None = None, date_to: date | None = None):
    qs = JournalEntryLine.objects.filter(account=account).select_related("journal_entry")
    if date_from is not None:
        qs = qs.filter(journal_entry__entry_date__gte=date_from)
    if date_to is not None:
        qs = qs.filter(journal_entry__entry_date__lte=date_to)
    return qs


def _signed(account: Account, debit: Decimal, credit: Decimal) -> Decimal:
    return _q2(debit - credit) if account.is_debit_normal else _q2(credit - debit)


def account_balance(code_or_account, *, as_of: date | None = None) -> Decimal:
    account = _get_account(code_or_account)
    totals = _lines_for(account, date_to=as_of).aggregate(debit=Sum("debit"), credit=Sum("credit"))
    return _signed(account, _q2(totals["debit"]), _q2(totals["credit"]))


def account_statement(
    code_or_account,
    *,
    date_from: date | None = None,
    date_to: date | None = None,
) -> dict:
    """
    Line-by-line statement with a running balance, opening with the balance
    carried forward from before date_from.
    """
    account = _get_account(code_or_account)

    opening = Decimal("0.00")
    if date_from is not None:
        before = JournalEntryLine.objects.filter(
            account=account, journal_entry__entry_date__lt=date_from
        ).aggregate(debit=Sum("debit"), credit=Sum("credit"))
        opening = _signed(account, _q2(before["debit"]), _q2(before["credit"]))

    running = opening
    rows = []
    for line in _lines_for(account, date_from=date_from, date_to=date_to).order_by(
        "journal_entry__entry_date", "journal_entry__entry_number", "line_number"
    ):
        running = _q2(running + _signed(account, line.debit, line.credit))
        rows.append(
            {
                "date": line.journal_entry.entry_date.isoformat(),
                "entry_number": line.journal_entry.entry_number,
                "reference": line.journal_entry.reference,
                "description": line.description or line.journal_entry.description,
                "debit": str(line.debit),
                "credit": str(line.credit),
                "balance": str(running),
            }
        )

    return {
        "account_code": account.code,
        "account_name": account.name,
        "opening_balance": str(opening),
        "closing_balance": str(running),
        "lines": rows,
    }
