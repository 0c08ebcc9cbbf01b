"""Form validation results and shared amount checks.

Validation never raises for user mistakes: every problem is recorded against
the form field it belongs to, so the caller can show it next to that field.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from ledgerkit.domain.currency import parse_formatted
from ledgerkit.domain.errors import CurrencyError
from ledgerkit.domain.tax import normalize_rate


@dataclass
class ValidationResult:
    """Field-scoped error messages, in the order they were found."""

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def add(self, field_name: str, message: str) -> None:
        # Keep the first message per field
        self.errors.setdefault(field_name, message)

    @property
    def first_field(self) -> Optional[str]:
        return next(iter(self.errors), None)

    @property
    def first_message(self) -> Optional[str]:
        return next(iter(self.errors.values()), None)


def check_amount(
    result: ValidationResult, field_name: str, text: str, currency: str, currencies: Mapping[str, int]
) -> None:
    """Record "Invalid amount" if text does not parse as a non-negative amount."""
    try:
        value = parse_formatted(text, currency, currencies)
    except CurrencyError:
        result.add(field_name, "Invalid amount")
        return
    if value < 0:
        result.add(field_name, "Invalid amount")


def validate_element_amounts(
    result: ValidationResult, lines: Sequence[Any], currency: str, currencies: Mapping[str, int]
) -> None:
    """Check the net and gross amounts of every line."""
    if currency not in currencies:
        result.add("elements[0].currency", "Unknown currency")
        return
    for index, line in enumerate(lines):
        check_amount(result, f"elements[{index}].amount", line.amount, currency, currencies)
        check_amount(result, f"elements[{index}].gross_amount", line.gross_amount, currency, currencies)


def validate_element_tax_amounts(
    result: ValidationResult, lines: Sequence[Any], currency: str, currencies: Mapping[str, int]
) -> None:
    """Check rates and amounts of every tax line."""
    if currency not in currencies:
        return
    for index, line in enumerate(lines):
        for sub_index, tax in enumerate(line.taxes):
            prefix = f"elements[{index}].taxes[{sub_index}]"
            if tax.rate.strip() and not normalize_rate(tax.rate):
                result.add(f"{prefix}.rate", "Invalid rate")
            check_amount(result, f"{prefix}.amount", tax.amount, currency, currencies)
