# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.counterparty import Counterparty
from accounting.models.document import DocumentItem, InvoiceDocument, PostableDocument
from accounting.models.journal import JournalEntry, JournalEntryLine

__all__ = [
    "Account",
    "Counterparty",
    "JournalEntry",
    "JournalEntryLine",
    "PostableDocument",
    "InvoiceDocument",
    "DocumentItem",
]
