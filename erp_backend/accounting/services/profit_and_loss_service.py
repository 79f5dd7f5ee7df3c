# accounting/services/profit_and_loss_service.py

"""
PROFIT & LOSS SERVICE (INCOME STATEMENT)

Read-only aggregation over posted journal lines.

Contract:
{
  "date_from": "YYYY-MM-DD" | None,
  "date_to": "YYYY-MM-DD",
  "income": [{"code", "name", "amount", "amount_minor"}...],
  "expenses": [...],
  "totals": {"income", "expenses", "net_profit", + *_minor}
}

Key rules:
- Uses JournalEntry.entry_date as the accounting effective date
- Cancellations are in the ledger as mirror entries, so a cancelled
  document nets to zero inside the period that holds both entries
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.amounts import ZERO, money, to_major_number, to_minor_int


def _section_row(account: Account, amount: Decimal) -> dict:
    return {
        "code": account.code,
        "name": account.name,
        "amount": to_major_number(amount),
        "amount_minor": to_minor_int(amount),
    }


def get_profit_and_loss(*, date_from: date | None = None, date_to: date | None = None) -> dict:
    date_to = date_to or timezone.localdate()

    lines = JournalEntryLine.objects.filter(
        journal_entry__status=JournalEntry.STATUS_POSTED,
        journal_entry__entry_date__lte=date_to,
        account__account_type__in=(Account.REVENUE, Account.EXPENSE),
    )
    if date_from is not None:
        lines = lines.filter(journal_entry__entry_date__gte=date_from)

    totals_by_account = {
        row["account_id"]: row
        for row in lines.values("account_id").annotate(debit=Sum("debit"), credit=Sum("credit"))
    }
    accounts = Account.objects.filter(pk__in=totals_by_account.keys()).order_by("code")

    income, expenses = [], []
    total_income = ZERO
    total_expenses = ZERO

    for account in accounts:
        debit = money(totals_by_account[account.id]["debit"])
        credit = money(totals_by_account[account.id]["credit"])

        if account.account_type == Account.REVENUE:
            amount = money(credit - debit)
            if amount != ZERO:
                income.append(_section_row(account, amount))
                total_income += amount
        else:
            amount = money(debit - credit)
            if amount != ZERO:
                expenses.append(_section_row(account, amount))
                total_expenses += amount

    net_profit = money(total_income - total_expenses)

    return {
        "date_from": date_from.isoformat() if date_from else None,
        "date_to": date_to.isoformat(),
        "income": income,
        "expenses": expenses,
        "totals": {
            "income": to_major_number(total_income),
            "expenses": to_major_number(total_expenses),
            "net_profit": to_major_number(net_profit),
            "income_minor": to_minor_int(total_income),
            "expenses_minor": to_minor_int(total_expenses),
            "net_profit_minor": to_minor_int(net_profit),
        },
    }
