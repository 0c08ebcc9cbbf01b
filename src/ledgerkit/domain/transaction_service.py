"""Transaction domain service."""

from typing import Any

from ledgerkit.database.base import Database
from ledgerkit.domain.balance import check_balanced
from ledgerkit.domain.transaction import Transaction


class TransactionService:
    """Service for loading and saving transaction aggregates."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def load(self, transaction_id: int) -> Transaction:
        """Load a transaction with its elements.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        return self.db.load_transaction(transaction_id)

    def save(self, transaction: Transaction, uow: Any = None) -> int:
        """Persist a merged transaction, then drop drained elements from memory.

        A failed write restores the transaction to its state before the call.

        Returns:
            Transaction ID

        Raises:
            BalanceError: If the elements do not balance; nothing is written
        """
        check_balanced(transaction.elements)
        before = transaction.snapshot()
        try:
            transaction_id = self.db.save_transaction(transaction, uow)
        except Exception:
            transaction.restore(before)
            raise
        transaction.condense_elements()
        return transaction_id

    def settlements(self, transaction: Transaction) -> list[Transaction]:
        """Transactions settling ``transaction``, oldest first."""
        if not transaction.id:
            return []
        return self.db.list_settlements(transaction.id)
