"""CLI helpers for customer resolution and error handling."""

from __future__ import annotations

import click

from ledgerkit.database.base import Database
from ledgerkit.domain.errors import NotFoundError
from ledgerkit.utils.actor_resolver import resolve_actor


def resolve_actor_or_exit(ctx: click.Context, db: Database, actor: str | int) -> int:
    """Resolve customer name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_actor(db, actor)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
