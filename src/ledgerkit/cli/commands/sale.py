"""Sale and invoice commands."""

import dataclasses
import json
from datetime import date

import click

from ledgerkit.cli.actor_resolution import resolve_actor_or_exit
from ledgerkit.cli.error_handling import exit_on_invalid, handle_domain_error
from ledgerkit.domain.currency import to_formatted
from ledgerkit.domain.entities import NEW_CUSTOMER, DrCr, TransactionType
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.sale import SaleForm, SaleLineForm, SaleService, TaxLineForm
from ledgerkit.domain.tax import rate_of
from ledgerkit.domain.tax_calc import TaxTrigger
from ledgerkit.domain.transaction import Transaction
from ledgerkit.domain.transaction_service import TransactionService


def parse_line(value: str) -> tuple[int, str]:
    """Split an ``ACCOUNT=AMOUNT`` option value."""
    account, sep, amount = value.partition("=")
    if not sep:
        raise click.BadParameter(f"'{value}' is not of the form ACCOUNT=AMOUNT", param_hint="--line")
    try:
        return int(account), amount.strip()
    except ValueError:
        raise click.BadParameter(f"Account '{account}' must be an account ID", param_hint="--line") from None


def form_to_json(form: SaleForm) -> str:
    """Serialize form values for display or later editing."""
    data = dataclasses.asdict(form)
    data["type"] = form.type.value
    return json.dumps(data, indent=2, default=str)


@click.group()
def sale_group():
    """Record sales and invoices."""
    pass


@sale_group.command("record")
@click.option("--id", "transaction_id", type=int, help="Existing sale or invoice to replace")
@click.option("--customer", help="Customer name or ID")
@click.option("--new-customer", help="Create a new customer with this name")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(["sale", "invoice"], case_sensitive=False),
    default="sale",
    help="Cash sale or invoice on account (default: sale)",
)
@click.option("--date", "txn_date", default="today", help="Date (YYYY-MM-DD or relative like 'today')")
@click.option("--description", default="", help="Description")
@click.option("--currency", help="Currency code (defaults to the configured currency)")
@click.option("--line", "lines", multiple=True, help="Revenue line as ACCOUNT=AMOUNT (repeatable)")
@click.option("--tax", "tax_code", help="Tax code applied to every line (e.g. 'au:gst:10')")
@click.option("--tax-rate", help="Rate for a variable tax code, in percent")
@click.option("--gross", is_flag=True, help="Line amounts include tax")
@click.option("--json", "json_file", type=click.File("r"), help="Read form values from a JSON file")
@click.pass_context
def record_sale(
    ctx,
    transaction_id: int | None,
    customer: str | None,
    new_customer: str | None,
    txn_type: str,
    txn_date: str,
    description: str,
    currency: str | None,
    lines: tuple[str, ...],
    tax_code: str | None,
    tax_rate: str | None,
    gross: bool,
    json_file,
) -> None:
    """Record a sale or an invoice.

    Examples:
        ledgerkit sale record --customer Acme --line 400=100 --tax au:gst:10
        ledgerkit sale record --type invoice --new-customer "Bob" --line 400=110 --gross --tax-rate 10
        ledgerkit sale record --id 3 --json form.json
    """
    db = ctx.obj["db"]
    config = ctx.obj["config"]
    service = SaleService(db, config)

    try:
        if json_file is not None:
            form = SaleForm.from_mapping(json.load(json_file))
        else:
            form = SaleForm(
                type=TransactionType(txn_type.lower()),
                date=txn_date,
                description=description,
            )
            line_currency = (currency or config.default_currency).upper()
            for account_id, amount in (parse_line(v) for v in lines):
                line = SaleLineForm(account_id=account_id, currency=line_currency, use_gross=gross)
                if gross:
                    line.gross_amount = amount
                else:
                    line.amount = amount
                if tax_code is not None or tax_rate is not None:
                    code = tax_code or ""
                    rate = tax_rate if tax_rate is not None else rate_of(code, config.tax_codes)
                    line.taxes.append(TaxLineForm(code=code, rate=rate))
                form.elements.append(line)

            trigger = TaxTrigger.GROSS_AMOUNT if gross else TaxTrigger.AMOUNT
            for index in range(len(form.elements)):
                service.recompute_line(form, index, trigger)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if new_customer:
        form.actor_id = NEW_CUSTOMER
        form.actor_title = new_customer
    elif customer:
        form.actor_id = resolve_actor_or_exit(ctx, db, customer)

    exit_on_invalid(ctx, service.validate(form))

    try:
        transaction = TransactionService(db).load(transaction_id) if transaction_id else Transaction()
        if transaction.type == TransactionType.INVOICE_PAYMENT:
            raise ValidationError(f"Transaction {transaction_id} is a payment; use 'pay' to change it")
        saved_id = service.save(transaction, form)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    totals = [
        f"{e.currency} {to_formatted(e.amount, e.currency, config.currencies)}"
        for e in transaction.elements
        if e.drcr == DrCr.DEBIT
    ]
    click.echo(f"Saved {form.type.label.lower()} {saved_id} (total {', '.join(totals)})")


@click.command("show")
@click.argument("transaction_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the form values as JSON")
@click.pass_context
def show_transaction(ctx, transaction_id: int, as_json: bool) -> None:
    """Show a transaction and its elements."""
    db = ctx.obj["db"]
    config = ctx.obj["config"]

    try:
        transaction = TransactionService(db).load(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        if transaction.type == TransactionType.INVOICE_PAYMENT:
            click.echo("Error: Payments have no sale form; use 'balance' on the invoice", err=True)
            ctx.exit(1)
        click.echo(form_to_json(SaleService(db, config).extract_form_values(transaction)))
        return

    accounts = {a.id: a.title for a in db.list_accounts()}
    actor = db.get_actor(transaction.actor_id) if transaction.actor_id else None
    txn_date = transaction.date.isoformat() if isinstance(transaction.date, date) else ""

    click.echo(f"\n{transaction.type.label} {transaction.id}  {txn_date}")
    if actor is not None:
        click.echo(f"Customer: {actor.title}")
    if transaction.description:
        click.echo(f"Description: {transaction.description}")
    click.echo("")
    for e in transaction.elements:
        side = "Dr" if e.drcr == DrCr.DEBIT else "Cr"
        amount = to_formatted(e.amount, e.currency, config.currencies)
        account = accounts.get(e.account_id, str(e.account_id))
        extra = []
        if e.tax_code:
            extra.append(f"tax {e.tax_code}")
        if e.parent_id:
            extra.append(f"on {e.parent_id}")
        if e.settle_id:
            extra.append(f"settles {e.settle_id}")
        suffix = f"  [{', '.join(extra)}]" if extra else ""
        click.echo(f"  {e.id:>5}  {side}  {account:<20} {e.currency} {amount:>12}{suffix}")


def register_commands(cli):
    """Register sale commands with main CLI."""
    cli.add_command(sale_group, name="sale")
    cli.add_command(show_transaction)
