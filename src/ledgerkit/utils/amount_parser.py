"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)
    - "10." and ".5"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string is empty or cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols, grouping commas and inner whitespace
    amount_str = re.sub(r"[$€£¥\s]", "", amount_str)
    amount_str = amount_str.replace(",", "")

    if not _NUMBER.match(amount_str):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}") from e
    return -amount if is_negative else amount


def parse_rate(rate_str: str) -> Decimal:
    """Parse a percentage rate, treating blank or non-numeric text as zero."""
    try:
        return parse_amount(rate_str.rstrip().rstrip("%"))
    except ValueError:
        return Decimal(0)
