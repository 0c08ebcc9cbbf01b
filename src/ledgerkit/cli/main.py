"""Main CLI entry point."""

import click

from ledgerkit.config import load_config
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.logging_config import LOG_LEVEL_ENV, setup_logging

# Import and register all commands at module level
from ledgerkit.cli.commands import customer, payment, sale, taxcodes


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a TOML configuration file",
    envvar="LEDGERKIT_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
    envvar=LOG_LEVEL_ENV,
)
@click.pass_context
def cli(ctx, db_path: str | None, config_path: str | None, log_level: str | None):
    """Ledgerkit - Double-entry bookkeeping.

    Record sales and invoices with tax lines, take payments against invoices
    and check what is still owed.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    try:
        config = load_config(config_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    ctx.obj["config"] = config

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path or config.database_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
customer.register_commands(cli)
sale.register_commands(cli)
payment.register_commands(cli)
taxcodes.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
