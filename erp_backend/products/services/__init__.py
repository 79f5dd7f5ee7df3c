from .stock import record_movement, record_opening_balance, reverse_document_movements
from .valuation import average_cost, cost_of

__all__ = [
    "record_movement",
    "record_opening_balance",
    "reverse_document_movements",
    "average_cost",
    "cost_of",
]
