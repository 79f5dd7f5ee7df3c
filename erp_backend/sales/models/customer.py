# sales/models/customer.py

from accounting.models.counterparty import Counterparty


class Customer(Counterparty):
    """Customer master. balance = amount the customer owes us."""

    class Meta(Counterparty.Meta):
        verbose_name = "customer"
        verbose_name_plural = "customers"
