"""CLI error handling helpers."""

import click

from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.validation import ValidationResult


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def exit_on_invalid(ctx: click.Context, result: ValidationResult) -> None:
    """Render field-scoped validation messages and exit if there are any."""
    if result.ok:
        return
    for field_name, message in result.errors.items():
        click.echo(f"Error: {field_name}: {message}", err=True)
    ctx.exit(1)
