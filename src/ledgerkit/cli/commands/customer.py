"""Customer management commands."""

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.actor import ActorService
from ledgerkit.domain.entities import ActorType
from ledgerkit.domain.errors import DomainError


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("add")
@click.argument("name")
@click.pass_context
def add_customer(ctx, name: str):
    """Add a new customer."""
    service = ActorService(ctx.obj["db"])
    try:
        actor_id = service.create_actor(name, ActorType.CUSTOMER)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created customer '{name.strip()}' (ID: {actor_id})")


@customer_group.command("list")
@click.pass_context
def list_customers(ctx):
    """List all customers."""
    service = ActorService(ctx.obj["db"])
    customers = service.list_actors(ActorType.CUSTOMER)
    if not customers:
        click.echo("No customers found. Use 'customer add' to create one.")
        return

    click.echo("\nCustomers:")
    for actor in customers:
        click.echo(f"  {actor.id}: {actor.title}")


def register_commands(cli):
    """Register customer commands with main CLI."""
    cli.add_command(customer_group, name="customer")
