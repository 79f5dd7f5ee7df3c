# accounting/services/trial_balance_service.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.amounts import money, to_major_number, to_minor_int
from accounting.services.journal_entry_service import balance_tolerance


class TrialBalanceService:
    """
    Trial Balance computation service.

    Guarantees:
    - Covers every postable account that has journal lines
    - Uses posted JournalEntry.entry_date as the accounting timeline
    - Avoids N+1 queries by aggregating in bulk
    - Returns JSON-safe numeric values (no Decimals)
    """

    def __init__(self, account_model=Account, line_model=JournalEntryLine):
        self.Account = account_model
        self.Line = line_model

    def generate(self, *, as_of: date | None = None):
        cutoff = as_of or timezone.localdate()

        rows = (
            self.Line.objects.filter(
                journal_entry__status=JournalEntry.STATUS_POSTED,
                journal_entry__entry_date__lte=cutoff,
            )
            .values("account_id")
            .annotate(debit=Sum("debit"), credit=Sum("credit"))
        )
        totals_by_account = {r["account_id"]: r for r in rows}

        accounts = (
            self.Account.objects.filter(pk__in=totals_by_account.keys())
            .only("id", "code", "name", "account_type")
            .order_by("code")
        )

        accounts_output = []
        total_debit = Decimal("0.00")
        total_credit = Decimal("0.00")

        for acc in accounts:
            debit = money(totals_by_account[acc.id]["debit"])
            credit = money(totals_by_account[acc.id]["credit"])

            if debit == Decimal("0.00") and credit == Decimal("0.00"):
                continue

            balance = debit - credit if acc.is_debit_normal else credit - debit
            accounts_output.append(
                {
                    "account_id": acc.id,
                    "account_code": acc.code,
                    "account_name": acc.name,
                    "account_type": acc.account_type,
                    "debit": to_major_number(debit),
                    "credit": to_major_number(credit),
                    "balance": to_major_number(balance),
                    "debit_minor": to_minor_int(debit),
                    "credit_minor": to_minor_int(credit),
                }
            )

            total_debit += debit
            total_credit += credit

        total_debit = money(total_debit)
        total_credit = money(total_credit)

        return {
            "as_of": cutoff.isoformat(),
            "accounts": accounts_output,
            "totals": {
                "debit": to_major_number(total_debit),
                "credit": to_major_number(total_credit),
                "debit_minor": to_minor_int(total_debit),
                "credit_minor": to_minor_int(total_credit),
                "balanced": abs(total_debit - total_credit) <= balance_tolerance(),
            },
        }
