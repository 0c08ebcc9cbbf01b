"""Currency engine: minor-unit scales, formatting and parsing.

Amounts are stored as integers in the currency's minor unit (cents for USD).
The registry maps a currency code to the number of minor-unit digits and is
always passed in explicitly; the default below is immutable.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from types import MappingProxyType

from ledgerkit.domain.errors import CurrencyError, unknown_currency
from ledgerkit.utils.amount_parser import parse_amount

DEFAULT_CURRENCIES: Mapping[str, int] = MappingProxyType(
    {
        "AUD": 2,
        "BHD": 3,
        "CAD": 2,
        "CHF": 2,
        "CNY": 2,
        "EUR": 2,
        "GBP": 2,
        "HKD": 2,
        "IDR": 2,
        "INR": 2,
        "JPY": 0,
        "KRW": 0,
        "KWD": 3,
        "MYR": 2,
        "NZD": 2,
        "SGD": 2,
        "USD": 2,
    }
)


@dataclass(frozen=True)
class CurrencyInfo:
    """Currency code with its number of minor-unit digits."""

    code: str
    scale: int


def get_currency_info(code: str, currencies: Mapping[str, int] = DEFAULT_CURRENCIES) -> CurrencyInfo:
    """Look up a currency in the registry.

    Raises:
        CurrencyError: If the code is not registered
    """
    scale = currencies.get(code)
    if scale is None:
        raise CurrencyError(unknown_currency(code))
    return CurrencyInfo(code=code, scale=scale)


def to_formatted(amount: int, currency: str, currencies: Mapping[str, int] = DEFAULT_CURRENCIES) -> str:
    """Render an integer minor-unit amount as a decimal string.

    Examples:
        to_formatted(1000, "USD") -> "10.00"
        to_formatted(-5, "USD") -> "-0.05"
        to_formatted(500, "JPY") -> "500"
    """
    info = get_currency_info(currency, currencies)
    value = Decimal(int(amount)).scaleb(-info.scale)
    return f"{value:.{info.scale}f}"


def parse_formatted(text: str, currency: str, currencies: Mapping[str, int] = DEFAULT_CURRENCIES) -> int:
    """Parse decimal text into integer minor units, rounding half-up.

    Blank text parses to 0.

    Raises:
        CurrencyError: If the currency is unknown or the text is malformed
    """
    info = get_currency_info(currency, currencies)
    if text is None or not str(text).strip():
        return 0
    try:
        value = parse_amount(str(text))
    except ValueError as e:
        raise CurrencyError(f"Invalid amount '{text}'") from e
    return int(value.scaleb(info.scale).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def fits_scale(text: str, currency: str, currencies: Mapping[str, int] = DEFAULT_CURRENCIES) -> bool:
    """True if text parses in the currency's scale without rounding.

    Blank text fits. Malformed text does not.

    Raises:
        CurrencyError: If the currency is unknown
    """
    info = get_currency_info(currency, currencies)
    if text is None or not str(text).strip():
        return True
    try:
        value = parse_amount(str(text))
    except ValueError:
        return False
    return value == value.quantize(Decimal(1).scaleb(-info.scale))


def to_minor_units(value: Decimal) -> int:
    """Round a Decimal number of minor units half-up to an integer."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
