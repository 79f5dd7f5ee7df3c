# accounting/services/counterparty.py

"""
Running receivable/payable balances on customers and suppliers.

`balance` is a cache. It is only ever moved by the posting engine and the
payment reconciler, always on a row locked by the caller.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from accounting.services.amounts import money
from accounting.services.concurrency import bump_version, lock_row

logger = logging.getLogger(__name__)


def lock_counterparty(model, pk):
    if pk is None:
        return None
    return lock_row(model, pk)


def adjust_balance(party, delta: Decimal) -> None:
    if party is None:
        return
    delta = money(delta)
    if delta == 0:
        return

    bump_version(party, balance=money(party.balance + delta))
    logger.info(
        "Counterparty balance adjusted",
        extra={
            "counterparty": type(party).__name__,
            "counterparty_id": str(party.pk),
            "delta": str(delta),
            "balance": str(party.balance),
        },
    )
