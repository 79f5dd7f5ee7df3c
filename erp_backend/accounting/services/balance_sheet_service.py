# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET SERVICE

Pure accounting read service.

Responsibilities:
- Compute balances per postable account as at a given date
- Classify balances into Assets, Liabilities, Equity
- Enforce Assets = Liabilities + Equity within the balance tolerance

Revenue/expense activity is never closed to retained earnings here, so it is
shown as "Current Period Earnings" inside Equity; that keeps the statement
balanced whenever every journal entry is.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.amounts import ZERO, money, to_major_number, to_minor_int
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import balance_tolerance

logger = logging.getLogger(__name__)

CURRENT_EARNINGS_CODE = "E-CURR"

SECTIONS = {
    Account.ASSET: "assets",
    Account.LIABILITY: "liabilities",
    Account.EQUITY: "equity",
}


def generate_balance_sheet(*, as_of: date | None = None) -> dict:
    """
    Returns:
        {
            "as_of": "YYYY-MM-DD",
            "assets": [{"code","name","balance","balance_minor"}...],
            "liabilities": [...],
            "equity": [...],
            "totals": {
                "assets", "liabilities", "equity", "liabilities_plus_equity",
                + *_minor, "balanced": true
            }
        }

    Raises AccountingServiceError if the ledger does not balance.
    """
    as_of = as_of or timezone.localdate()

    rows = (
        JournalEntryLine.objects.filter(
            journal_entry__status=JournalEntry.STATUS_POSTED,
            journal_entry__entry_date__lte=as_of,
        )
        .values("account_id")
        .annotate(debit=Sum("debit"), credit=Sum("credit"))
    )
    totals_by_account = {r["account_id"]: r for r in rows}

    accounts = Account.objects.filter(pk__in=totals_by_account.keys()).order_by("code")

    sections = {name: [] for name in SECTIONS.values()}
    totals = {name: ZERO for name in SECTIONS.values()}
    current_earnings = ZERO

    for account in accounts:
        debit = money(totals_by_account[account.id]["debit"])
        credit = money(totals_by_account[account.id]["credit"])
        balance = money(debit - credit) if account.is_debit_normal else money(credit - debit)
        if balance == ZERO:
            continue

        if account.account_type == Account.REVENUE:
            current_earnings += balance
            continue
        if account.account_type == Account.EXPENSE:
            current_earnings -= balance
            continue

        section = SECTIONS[account.account_type]
        sections[section].append(
            {
                "code": account.code,
                "name": account.name,
                "balance": to_major_number(balance),
                "balance_minor": to_minor_int(balance),
            }
        )
        totals[section] += balance

    current_earnings = money(current_earnings)
    if current_earnings != ZERO:
        sections["equity"].append(
            {
                "code": CURRENT_EARNINGS_CODE,
                "name": "Current Period Earnings",
                "balance": to_major_number(current_earnings),
                "balance_minor": to_minor_int(current_earnings),
            }
        )
        totals["equity"] += current_earnings

    assets = money(totals["assets"])
    liabilities_plus_equity = money(totals["liabilities"] + totals["equity"])
    difference: Decimal = abs(assets - liabilities_plus_equity)

    if difference > balance_tolerance():
        logger.error(
            "Balance sheet does not balance",
            extra={
                "as_of": as_of.isoformat(),
                "assets": str(assets),
                "liabilities_plus_equity": str(liabilities_plus_equity),
            },
        )
        raise AccountingServiceError(
            f"Balance sheet is unbalanced (Assets={assets} Liabilities+Equity={liabilities_plus_equity})"
        )

    return {
        "as_of": as_of.isoformat(),
        **sections,
        "totals": {
            "assets": to_major_number(assets),
            "liabilities": to_major_number(totals["liabilities"]),
            "equity": to_major_number(totals["equity"]),
            "liabilities_plus_equity": to_major_number(liabilities_plus_equity),
            "assets_minor": to_minor_int(assets),
            "liabilities_minor": to_minor_int(totals["liabilities"]),
            "equity_minor": to_minor_int(totals["equity"]),
            "liabilities_plus_equity_minor": to_minor_int(liabilities_plus_equity),
            "balanced": True,
        },
    }
