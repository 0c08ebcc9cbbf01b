"""Sale and invoice form service.

Converts between a persisted Sale/Invoice transaction and the values of the
form used to edit it. Revenue lines are Credit elements; each may carry tax
lines (Credit elements on TaxPayable attached to it). The Debit side is one
generated balancing line per currency, posted to Cash for a sale and to
AccountsReceivable for an invoice, and is never shown on the form.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Union

from ledgerkit.config import LedgerConfig
from ledgerkit.database.base import Database
from ledgerkit.domain.currency import parse_formatted, to_formatted
from ledgerkit.domain.entities import (
    NEW_CUSTOMER,
    PENDING_PARENT,
    ActorType,
    DrCr,
    Element,
    ReservedAccount,
    TransactionType,
)
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.tax import compose_code, rate_of
from ledgerkit.domain.tax_calc import TaxState, TaxTrigger, recompute
from ledgerkit.domain.transaction import Transaction
from ledgerkit.domain.transaction_service import TransactionService
from ledgerkit.domain.validation import ValidationResult, validate_element_amounts, validate_element_tax_amounts
from ledgerkit.utils.amount_parser import parse_rate
from ledgerkit.utils.date_parser import parse_date

logger = logging.getLogger(__name__)


def _optional_id(value: Any) -> Optional[int]:
    if value in (None, "", 0, "0"):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid id {value!r}") from e


def _int(value: Any, name: str) -> int:
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {name} {value!r}") from e


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class TaxLineForm:
    """One tax line under a revenue line."""

    e_id: Optional[int] = None
    code: str = ""
    rate: str = ""
    amount: str = ""
    description: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaxLineForm":
        return cls(
            e_id=_optional_id(data.get("e_id")),
            code=_text(data.get("code")),
            rate=_text(data.get("rate")),
            amount=_text(data.get("amount")),
            description=_text(data.get("description")),
        )


@dataclass
class SaleLineForm:
    """One revenue line with its tax lines."""

    e_id: Optional[int] = None
    account_id: int = 0
    amount: str = ""
    currency: str = ""
    use_gross: bool = False
    gross_amount: str = ""
    description: str = ""
    taxes: list[TaxLineForm] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SaleLineForm":
        return cls(
            e_id=_optional_id(data.get("e_id")),
            account_id=_int(data.get("account_id"), "account id"),
            amount=_text(data.get("amount")),
            currency=_text(data.get("currency")),
            use_gross=bool(_int(data.get("use_gross"), "use_gross flag")),
            gross_amount=_text(data.get("gross_amount")),
            description=_text(data.get("description")),
            taxes=[TaxLineForm.from_mapping(t) for t in data.get("taxes") or []],
        )


@dataclass
class SaleForm:
    """Values of the sale/invoice form."""

    type: TransactionType = TransactionType.SALE
    actor_id: int = 0
    actor_title: str = ""
    date: Optional[Union[date, str]] = None
    description: str = ""
    elements: list[SaleLineForm] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SaleForm":
        """Build a typed form from a loosely typed payload.

        Raises:
            ValidationError: If a field has the wrong shape (non-numeric ids,
                unknown transaction type)
        """
        try:
            txn_type = TransactionType(data.get("type") or TransactionType.SALE)
        except ValueError as e:
            raise ValidationError(f"Unknown transaction type {data.get('type')!r}") from e
        if txn_type not in (TransactionType.SALE, TransactionType.INVOICE):
            raise ValidationError(f"A sale form cannot save a {txn_type.label.lower()}")
        return cls(
            type=txn_type,
            actor_id=_int(data.get("actor_id"), "actor id"),
            actor_title=_text(data.get("actor_title")),
            date=data.get("date"),
            description=_text(data.get("description")),
            elements=[SaleLineForm.from_mapping(e) for e in data.get("elements") or []],
        )


class SaleService:
    """Service backing the sale and invoice forms."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize sale service.

        Args:
            db: Database instance
            config: Ledger configuration (defaults to built-in settings)
        """
        self.db = db
        self.config = config or LedgerConfig()
        self.transactions = TransactionService(db)

    def form_currency(self, form: SaleForm) -> str:
        """All lines use the currency of the first line."""
        if form.elements and form.elements[0].currency:
            return form.elements[0].currency
        return self.config.default_currency

    def new_form(self, txn_type: TransactionType = TransactionType.SALE) -> SaleForm:
        """Blank form with two lines in the default currency."""
        currency = self.config.default_currency
        return SaleForm(
            type=txn_type,
            date=date.today(),
            elements=[SaleLineForm(currency=currency), SaleLineForm(currency=currency)],
        )

    def recompute_line(self, form: SaleForm, index: int, trigger: TaxTrigger) -> SaleLineForm:
        """Run the tax calculation for one line and write the results back."""
        line = form.elements[index]
        state = recompute(
            TaxState(
                amount=line.amount,
                gross_amount=line.gross_amount,
                use_gross=line.use_gross,
                currency=self.form_currency(form),
                rates=tuple(tax.rate for tax in line.taxes),
                tax_amounts=tuple(tax.amount for tax in line.taxes),
            ),
            trigger,
            self.config.currencies,
        )
        line.amount = state.amount
        line.gross_amount = state.gross_amount
        line.use_gross = state.use_gross
        for tax, amount in zip(line.taxes, state.tax_amounts):
            tax.amount = amount
        return line

    def extract_form_values(self, transaction: Transaction) -> SaleForm:
        """Build form values from a transaction.

        Only Credit elements are surfaced. Tax lines are grouped under their
        parent line; tax lines whose parent is not among the top-level lines
        are promoted to lines of their own.
        """
        currencies = self.config.currencies
        values = SaleForm(
            type=transaction.type,
            actor_id=transaction.actor_id,
            date=transaction.date,
            description=transaction.description,
        )

        def as_line(e: Element) -> SaleLineForm:
            return SaleLineForm(
                e_id=e.id,
                account_id=e.account_id,
                amount=to_formatted(e.amount, e.currency, currencies),
                currency=e.currency,
                use_gross=e.use_gross,
                gross_amount=to_formatted(e.gross_amount, e.currency, currencies),
                description=e.description,
            )

        children = []
        for e in transaction.elements:
            if e.drcr != DrCr.CREDIT:
                continue
            if e.parent_id == 0:
                values.elements.append(as_line(e))
            else:
                children.append(e)

        parents = {line.e_id: line for line in values.elements}
        for e in children:
            parent = parents.get(e.parent_id)
            if parent is None:
                logger.debug("Promoting orphan tax element %s", e.id)
                values.elements.append(as_line(e))
                continue
            parent.taxes.append(
                TaxLineForm(
                    e_id=e.id,
                    code=e.tax_code,
                    rate=rate_of(e.tax_code, self.config.tax_codes),
                    amount=to_formatted(e.amount, e.currency, currencies),
                    description=e.description,
                )
            )
        return values

    def validate(self, form: SaleForm) -> ValidationResult:
        """Check form values. Pure: no database access."""
        result = ValidationResult()
        if not form.actor_id:
            result.add("actor_id", "Customer is required")
        elif form.actor_id == NEW_CUSTOMER and not form.actor_title.strip():
            result.add("actor_title", "Name is required")

        if not form.date:
            result.add("date", "Date is required")
        else:
            try:
                parse_date(form.date)
            except ValueError:
                result.add("date", "Invalid date")

        if not form.elements:
            result.add("submit", "Nothing to save")
            return result

        currency = self.form_currency(form)
        validate_element_amounts(result, form.elements, currency, self.config.currencies)
        validate_element_tax_amounts(result, form.elements, currency, self.config.currencies)
        return result

    def desired_elements(self, form: SaleForm) -> list[Element]:
        """Convert form lines to desired Credit elements (no balancing lines)."""
        currency = self.form_currency(form)
        currencies = self.config.currencies
        elements: list[Element] = []
        for line in form.elements:
            elements.append(
                Element(
                    id=line.e_id or None,
                    account_id=line.account_id,
                    drcr=DrCr.CREDIT,
                    amount=parse_formatted(line.amount, currency, currencies),
                    currency=currency,
                    use_gross=bool(line.use_gross),
                    gross_amount=parse_formatted(line.gross_amount, currency, currencies),
                    description=line.description,
                )
            )
            for tax in line.taxes:
                has_code = tax.code != "" or parse_rate(tax.rate) != 0
                elements.append(
                    Element(
                        id=tax.e_id or None,
                        account_id=ReservedAccount.TAX_PAYABLE,
                        drcr=DrCr.CREDIT,
                        amount=parse_formatted(tax.amount, currency, currencies),
                        currency=currency,
                        tax_code=compose_code(tax.code, tax.rate, self.config.tax_codes) if has_code else "",
                        parent_id=PENDING_PARENT,
                        description=tax.description,
                    )
                )
        return elements

    def save(self, transaction: Transaction, form: SaleForm) -> int:
        """Merge form values into a transaction and persist it.

        Runs in one unit of work: a new customer requested by the form is
        created together with the transaction. If persistence fails the
        transaction is restored, so the same object can be saved again.

        Returns:
            Transaction ID
        """
        txn_date = parse_date(form.date)
        desired = self.desired_elements(form)
        account = (
            ReservedAccount.CASH if form.type == TransactionType.SALE else ReservedAccount.ACCOUNTS_RECEIVABLE
        )
        desired += transaction.balancing_elements(desired, account)

        before = transaction.snapshot()
        try:
            with self.db.unit_of_work() as uow:
                actor_id = form.actor_id
                if actor_id == NEW_CUSTOMER:
                    actor_id = self.db.create_actor(form.actor_title.strip(), ActorType.CUSTOMER, uow)
                    logger.info("Created customer %s (%s)", actor_id, form.actor_title.strip())

                transaction.merge_elements(desired)
                transaction.type = form.type
                transaction.date = txn_date
                transaction.description = form.description
                transaction.actor_id = actor_id
                return self.transactions.save(transaction, uow)
        except Exception:
            transaction.restore(before)
            raise
