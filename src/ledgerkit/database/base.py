"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Optional

# Import entities directly; domain services import this module
from ledgerkit.domain.entities import Account, Actor, ActorType
from ledgerkit.domain.transaction import Transaction


class Database(ABC):
    """Abstract repository for ledgerkit.

    Transactions are loaded and saved as whole aggregates: a load returns the
    transaction with every live element, and a save writes the complete
    element set atomically.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema and seed the reserved accounts."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[Any]:
        """Context manager running its body inside one database transaction.

        Commits on normal exit and rolls back if the body raises. The yielded
        handle can be passed to the write methods so they join the unit.
        """
        pass

    # Account operations
    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts ordered by id."""
        pass

    # Actor operations
    @abstractmethod
    def create_actor(self, title: str, actor_type: ActorType, uow: Any = None) -> int:
        """Create a customer or supplier. Returns actor ID."""
        pass

    @abstractmethod
    def get_actor(self, actor_id: int) -> Optional[Actor]:
        """Get actor by ID."""
        pass

    @abstractmethod
    def list_actors(self, actor_type: Optional[ActorType] = None) -> list[Actor]:
        """List actors ordered by title, optionally filtered by type."""
        pass

    # Transaction operations
    @abstractmethod
    def load_transaction(self, transaction_id: int) -> Transaction:
        """Load a transaction with its live elements.

        Raises:
            NotFoundError: If the transaction does not exist
        """
        pass

    @abstractmethod
    def save_transaction(self, transaction: Transaction, uow: Any = None) -> int:
        """Persist a transaction and its full element set atomically.

        Assigns ids to the transaction and to new elements, deletes tombstoned
        elements and keeps drained ones as zeroed rows.

        Returns:
            Transaction ID
        """
        pass

    @abstractmethod
    def list_settlements(self, transaction_id: int) -> list[Transaction]:
        """List transactions with an element settling ``transaction_id``.

        Ordered by date, then id.
        """
        pass
