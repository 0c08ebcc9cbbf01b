"""Invoice payment commands."""

import click

from ledgerkit.cli.error_handling import exit_on_invalid, handle_domain_error
from ledgerkit.domain.currency import to_formatted
from ledgerkit.domain.entities import TransactionType
from ledgerkit.domain.payment import InvoicePaymentService
from ledgerkit.domain.transaction import Transaction
from ledgerkit.domain.transaction_service import TransactionService


def load_invoice_or_exit(ctx: click.Context, invoice_id: int) -> Transaction:
    """Load an invoice, or exit with a CLI error."""
    try:
        invoice = TransactionService(ctx.obj["db"]).load(invoice_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if invoice.type != TransactionType.INVOICE:
        click.echo(f"Error: Transaction {invoice_id} is a {invoice.type.label.lower()}, not an invoice", err=True)
        ctx.exit(1)
    return invoice


def echo_balance(service: InvoicePaymentService, invoice: Transaction, settlements: list[Transaction]) -> None:
    currencies = service.config.currencies
    for currency, amount in sorted(service.outstanding(invoice, settlements).items()):
        click.echo(f"Balance: {currency} {to_formatted(amount, currency, currencies)}")


@click.command("pay")
@click.argument("invoice_id", type=int)
@click.option("--amount", required=True, help="Amount paid (e.g., 50.00)")
@click.option("--date", "payment_date", help="Payment date (YYYY-MM-DD or relative like 'today')")
@click.option("--description", help="Description")
@click.option("--payment", "payment_id", type=int, help="Existing payment to change instead of adding one")
@click.pass_context
def pay_invoice(
    ctx,
    invoice_id: int,
    amount: str,
    payment_date: str | None,
    description: str | None,
    payment_id: int | None,
) -> None:
    """Record a payment against an invoice.

    Examples:
        ledgerkit pay 3 --amount 50.00
        ledgerkit pay 3 --amount 0 --payment 5  # Zero out a payment
    """
    service = InvoicePaymentService(ctx.obj["db"], ctx.obj["config"])
    invoice = load_invoice_or_exit(ctx, invoice_id)
    settlements = service.settlements(invoice)
    form = service.extract_form_values(invoice, settlements)

    if payment_id is None:
        index = len(form.payments) - 1
    else:
        index = next((i for i, row in enumerate(form.payments) if row.t_id == payment_id), None)
        if index is None:
            click.echo(f"Error: Payment {payment_id} does not settle invoice {invoice_id}", err=True)
            ctx.exit(1)

    row = form.payments[index]
    row.amount = amount
    if payment_date is not None:
        row.date = payment_date
    if description is not None:
        row.description = description

    exit_on_invalid(ctx, service.validate(form, index))

    try:
        saved_id = service.save(invoice, settlements, form, index)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Recorded payment {saved_id} against invoice {invoice_id}")
    echo_balance(service, invoice, settlements)


@click.command("balance")
@click.argument("invoice_id", type=int)
@click.pass_context
def invoice_balance(ctx, invoice_id: int) -> None:
    """Show payments and the outstanding balance of an invoice.

    The balance is credits minus debits on accounts receivable, so an unpaid
    invoice shows a negative balance.
    """
    service = InvoicePaymentService(ctx.obj["db"], ctx.obj["config"])
    invoice = load_invoice_or_exit(ctx, invoice_id)
    settlements = service.settlements(invoice)
    form = service.extract_form_values(invoice, settlements)

    payments = form.payments[:-1]
    if not payments:
        click.echo("No payments recorded.")
    else:
        click.echo("\nPayments:")
        for row in payments:
            description = f"  {row.description}" if row.description else ""
            click.echo(f"  {row.t_id:>5}  {row.date}  {row.currency} {row.amount:>12}{description}")
    echo_balance(service, invoice, settlements)


def register_commands(cli):
    """Register payment commands with main CLI."""
    cli.add_command(pay_invoice)
    cli.add_command(invoice_balance)
