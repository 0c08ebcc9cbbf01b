"""Utility for resolving customer names to actor IDs."""

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import ActorType
from ledgerkit.domain.errors import NotFoundError


def resolve_actor(db: Database, actor: str | int, actor_type: ActorType = ActorType.CUSTOMER) -> int:
    """Resolve actor name or ID to actor ID.

    Args:
        db: Database instance
        actor: Actor title (str) or ID (int or string representation of int)
        actor_type: Only actors of this type match a title

    Returns:
        Actor ID

    Raises:
        NotFoundError: If the actor is not found
    """
    # Try to parse as integer (handles string IDs like "1")
    try:
        actor_id = int(actor)
    except (ValueError, TypeError):
        actor_id = None

    if actor_id is not None:
        if db.get_actor(actor_id) is None:
            raise NotFoundError(f"Customer ID {actor_id} not found")
        return actor_id

    for candidate in db.list_actors(actor_type):
        if candidate.title == actor:
            return candidate.id

    raise NotFoundError(f"Customer '{actor}' not found")
