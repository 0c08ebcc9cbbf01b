"""Invoice payment service.

A payment is its own transaction: Debit Cash, Credit AccountsReceivable, with
the credit line's settle_id pointing at the invoice it pays. The outstanding
balance of an invoice nets every AccountsReceivable element of the invoice
and its settlements.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Union

from ledgerkit.config import LedgerConfig
from ledgerkit.database.base import Database
from ledgerkit.domain.balance import get_balances
from ledgerkit.domain.currency import parse_formatted, to_formatted
from ledgerkit.domain.entities import DrCr, Element, ReservedAccount, TransactionType
from ledgerkit.domain.errors import CurrencyError, NotFoundError, ValidationError
from ledgerkit.domain.transaction import Transaction
from ledgerkit.domain.transaction_service import TransactionService
from ledgerkit.domain.validation import ValidationResult
from ledgerkit.utils.date_parser import parse_date

logger = logging.getLogger(__name__)


@dataclass
class PaymentLineForm:
    """One payment row. ``t_id`` is the payment transaction id, if saved."""

    t_id: Optional[int] = None
    date: Optional[Union[date, str]] = None
    description: str = ""
    amount: str = ""
    currency: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PaymentLineForm":
        t_id = data.get("t_id")
        try:
            t_id = int(t_id) if t_id not in (None, "", 0, "0") else None
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid payment id {t_id!r}") from e
        return cls(
            t_id=t_id,
            date=data.get("date"),
            description=str(data.get("description") or ""),
            amount=str(data.get("amount") or ""),
            currency=str(data.get("currency") or ""),
        )


@dataclass
class PaymentForm:
    """Payments of one invoice, followed by a blank row for a new payment."""

    payments: list[PaymentLineForm] = field(default_factory=list)


class InvoicePaymentService:
    """Service backing the payments panel of an invoice."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize payment service.

        Args:
            db: Database instance
            config: Ledger configuration (defaults to built-in settings)
        """
        self.db = db
        self.config = config or LedgerConfig()
        self.transactions = TransactionService(db)

    def settlements(self, invoice: Transaction) -> list[Transaction]:
        """Payments of an invoice, oldest first."""
        return [
            t for t in self.transactions.settlements(invoice) if t.type == TransactionType.INVOICE_PAYMENT
        ]

    def outstanding(self, invoice: Transaction, settlements: list[Transaction]) -> dict[str, int]:
        """Net AccountsReceivable balance of an invoice and its payments, per currency."""
        receivable = [
            e
            for t in [invoice, *settlements]
            for e in t.elements
            if e.account_id == ReservedAccount.ACCOUNTS_RECEIVABLE
        ]
        return get_balances(receivable)

    def extract_form_values(self, invoice: Transaction, settlements: list[Transaction]) -> PaymentForm:
        """Build payment rows from the settlements, plus a blank row."""
        currencies = self.config.currencies
        values = PaymentForm()
        for s in settlements:
            for e in s.elements:
                if e.drcr == DrCr.CREDIT and e.account_id == ReservedAccount.ACCOUNTS_RECEIVABLE:
                    values.payments.append(
                        PaymentLineForm(
                            t_id=s.id,
                            date=s.date,
                            description=s.description,
                            amount=to_formatted(e.amount, e.currency, currencies),
                            currency=e.currency,
                        )
                    )

        currency = invoice.elements[0].currency if invoice.elements else self.config.default_currency
        values.payments.append(PaymentLineForm(date=date.today(), currency=currency))
        return values

    def validate(self, form: PaymentForm, index: int) -> ValidationResult:
        """Check one payment row. Pure: no database access."""
        result = ValidationResult()
        if not 0 <= index < len(form.payments):
            result.add("submit", "Nothing to save")
            return result

        item = form.payments[index]
        try:
            amount = parse_formatted(item.amount, item.currency, self.config.currencies)
        except CurrencyError:
            result.add(f"payments[{index}].amount", "Invalid amount")
        else:
            if amount < 0:
                result.add(f"payments[{index}].amount", "Invalid amount")

        if not item.date:
            result.add(f"payments[{index}].date", "Date is required")
        else:
            try:
                parse_date(item.date)
            except ValueError:
                result.add(f"payments[{index}].date", "Invalid date")
        return result

    def save(self, invoice: Transaction, settlements: list[Transaction], form: PaymentForm, index: int) -> int:
        """Create or modify the payment in row ``index``.

        A new payment is appended to ``settlements``.

        Returns:
            ID of the payment transaction

        Raises:
            ValidationError: If the invoice is unsaved or a new payment has no amount
            NotFoundError: If the row refers to a payment that is not a settlement
        """
        if not invoice.id or invoice.type != TransactionType.INVOICE:
            raise ValidationError("Payments can only be recorded against a saved invoice")

        item = form.payments[index]
        amount = parse_formatted(item.amount, item.currency, self.config.currencies)

        if item.t_id:
            payment = next((s for s in settlements if s.id == item.t_id), None)
            if payment is None:
                raise NotFoundError(f"Payment {item.t_id} does not settle invoice {invoice.id}")
            dr = payment.first_dr_element()
            cr = payment.first_cr_element()
            dr_id = dr.id if dr is not None else None
            cr_id = cr.id if cr is not None else None
        elif amount > 0:
            payment = Transaction(type=TransactionType.INVOICE_PAYMENT, actor_id=invoice.actor_id)
            dr_id = cr_id = None
        else:
            raise ValidationError("No amount specified")

        before = payment.snapshot()
        payment.merge_elements(
            [
                Element(
                    id=dr_id,
                    account_id=ReservedAccount.CASH,
                    drcr=DrCr.DEBIT,
                    amount=amount,
                    currency=item.currency,
                ),
                Element(
                    id=cr_id,
                    account_id=ReservedAccount.ACCOUNTS_RECEIVABLE,
                    drcr=DrCr.CREDIT,
                    amount=amount,
                    currency=item.currency,
                    settle_id=invoice.id,
                ),
            ]
        )
        try:
            payment.date = parse_date(item.date)
            payment.description = item.description
            payment_id = self.transactions.save(payment)
        except Exception:
            payment.restore(before)
            raise
        if not item.t_id:
            settlements.append(payment)
        logger.info("Recorded payment %s against invoice %s", payment_id, invoice.id)
        return payment_id
