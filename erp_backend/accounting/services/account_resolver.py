# PATH: accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account should be used for this purpose?"

Semantic keys (CASH, CUSTOMERS, COGS, ...) map to stable account codes.
Defaults below match the `seed_chart` command; deployments can override any
key through settings.ACCOUNTING_ACCOUNT_CODES.

Design goals:
- deterministic
- hard-fail on missing setup (so we never post to wrong accounts)
- report EVERY missing code at once, before anything is written
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from accounting.models.account import Account
from accounting.services.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# SEMANTIC KEYS
# ------------------------------------------------------------

CASH = "CASH"
BANK = "BANK"
CUSTOMERS = "CUSTOMERS"
INVENTORY = "INVENTORY"
SUPPLIERS = "SUPPLIERS"
REVENUE = "REVENUE"
COGS = "COGS"
INVENTORY_GAIN = "INVENTORY_GAIN"
INVENTORY_LOSS = "INVENTORY_LOSS"

DEFAULT_ACCOUNT_CODES = {
    CASH: "1101",
    BANK: "1102",
    CUSTOMERS: "1103",
    INVENTORY: "1104",
    SUPPLIERS: "2101",
    REVENUE: "4101",
    COGS: "5101",
    INVENTORY_GAIN: "4201",
    INVENTORY_LOSS: "5201",
}

# Accounts the resolver may create on demand: key -> (name, type, parent code)
AUTO_CREATED_ACCOUNTS = {
    INVENTORY_LOSS: ("Inventory Shortage", Account.EXPENSE, "5"),
    INVENTORY_GAIN: ("Inventory Surplus", Account.REVENUE, "4"),
}


def account_codes() -> dict[str, str]:
    overrides = getattr(settings, "ACCOUNTING_ACCOUNT_CODES", None) or {}
    codes = dict(DEFAULT_ACCOUNT_CODES)
    codes.update({str(k).strip().upper(): str(v).strip() for k, v in overrides.items()})
    return codes


def code_for(key: str) -> str:
    key = (key or "").strip().upper()
    codes = account_codes()
    if key not in codes:
        raise ConfigurationError(f"Unknown account key '{key}'")
    return codes[key]


def resolve_accounts(*keys: str) -> dict[str, Account]:
    """
    Resolve every semantic key in one query.

    Raises ConfigurationError naming all codes that are missing, inactive or
    group (parent) accounts.
    """
    codes = {key: code_for(key) for key in keys}
    found = {a.code: a for a in Account.objects.filter(code__in=set(codes.values()))}

    problems: list[str] = []
    missing_codes: list[str] = []
    resolved: dict[str, Account] = {}

    for key, code in codes.items():
        account = found.get(code)
        if account is None:
            problems.append(f"{code} ({key}) does not exist")
        elif not account.is_active:
            problems.append(f"{code} ({key}) is inactive")
        elif account.is_parent:
            problems.append(f"{code} ({key}) is a group account")
        else:
            resolved[key] = account
            continue
        missing_codes.append(code)

    if problems:
        logger.error(
            "Account resolution failed",
            extra={"missing_codes": missing_codes, "keys": list(keys)},
        )
        raise ConfigurationError(
            "Required accounts are not usable: "
            + "; ".join(problems)
            + ". Run `manage.py seed_chart` or fix ACCOUNTING_ACCOUNT_CODES.",
            missing_codes=missing_codes,
        )

    return resolved


def resolve_account(key: str) -> Account:
    return resolve_accounts(key)[key]


def payment_account_key(method: str) -> str:
    """Cash goes to the cash box; bank transfers and checks go to the bank."""
    return CASH if (method or "").strip().lower() == "cash" else BANK


@transaction.atomic
def resolve_adjustment_accounts(*, need_loss: bool, need_gain: bool) -> dict[str, Account]:
    """
    Resolve INVENTORY plus the shortage/surplus accounts an adjustment needs.

    The shortage (expense) and surplus (revenue) accounts are created on demand
    when absent, unless ACCOUNTING_AUTO_CREATE_ADJUSTMENT_ACCOUNTS is off.
    """
    wanted = [INVENTORY]
    if need_loss:
        wanted.append(INVENTORY_LOSS)
    if need_gain:
        wanted.append(INVENTORY_GAIN)

    if getattr(settings, "ACCOUNTING_AUTO_CREATE_ADJUSTMENT_ACCOUNTS", True):
        for key in wanted[1:]:
            _ensure_adjustment_account(key)

    return resolve_accounts(*wanted)


def _ensure_adjustment_account(key: str) -> None:
    code = code_for(key)
    if Account.objects.filter(code=code).exists():
        return

    name, account_type, parent_code = AUTO_CREATED_ACCOUNTS[key]
    parent = Account.objects.filter(code=parent_code, is_parent=True).first()

    Account.objects.create(
        code=code,
        name=name,
        account_type=account_type,
        parent=parent,
    )
    logger.warning(
        "Auto-created inventory adjustment account",
        extra={"account_code": code, "account_key": key},
    )
