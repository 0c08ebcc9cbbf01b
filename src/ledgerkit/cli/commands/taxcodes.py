"""Tax code listing command."""

import click

from ledgerkit.domain.tax import list_tax_codes, tax_label


@click.command("taxcodes")
@click.pass_context
def list_taxcodes(ctx):
    """List the configured tax codes."""
    registry = ctx.obj["config"].tax_codes

    click.echo("\nTax codes:")
    for definition in list_tax_codes(registry):
        rate = "variable" if definition.variable else f"{definition.rate}%"
        click.echo(f"  {definition.code:<20} {rate:<10} {tax_label(definition.code, registry)}")


def register_commands(cli):
    """Register tax code commands with main CLI."""
    cli.add_command(list_taxcodes)
