"""Customer domain service."""

from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Actor as ActorEntity, ActorType
from ledgerkit.domain.errors import ConflictError, ValidationError


class ActorService:
    """Service for managing customers and suppliers."""

    def __init__(self, db: Database):
        """Initialize actor service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_actor(self, title: str, actor_type: ActorType = ActorType.CUSTOMER) -> int:
        """Create a new customer or supplier.

        Args:
            title: Display name
            actor_type: Customer or supplier

        Returns:
            Actor ID

        Raises:
            ValidationError: If the title is blank
            ConflictError: If an actor of that type already has the title
        """
        title = title.strip()
        if not title:
            raise ValidationError("Name is required")

        for actor in self.db.list_actors(actor_type):
            if actor.title == title:
                raise ConflictError(f"{actor_type.value.capitalize()} '{title}' already exists")

        return self.db.create_actor(title, actor_type)

    def get_actor(self, actor_id: int) -> Optional[ActorEntity]:
        """Get actor by ID."""
        return self.db.get_actor(actor_id)

    def list_actors(self, actor_type: Optional[ActorType] = None) -> list[ActorEntity]:
        """List actors, optionally of one type."""
        return self.db.list_actors(actor_type)
