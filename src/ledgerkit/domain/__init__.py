"""Domain layer for ledgerkit: engines, the transaction aggregate and form services.

Services are imported from their modules directly; importing them here would
make the database layer and the domain layer import each other.
"""

from ledgerkit.domain.entities import DrCr, Element, ReservedAccount, TransactionType
from ledgerkit.domain.transaction import Transaction

__all__ = ["DrCr", "Element", "ReservedAccount", "Transaction", "TransactionType"]
