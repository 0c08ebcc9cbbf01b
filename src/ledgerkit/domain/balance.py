"""Balance and sum engine."""

from collections.abc import Iterable

from ledgerkit.domain.entities import DrCr, Element
from ledgerkit.domain.errors import BalanceError, unbalanced


def _net_credits(elements: Iterable[Element]) -> dict[str, int]:
    """Credit total minus debit total per currency, in first-seen order."""
    totals: dict[str, int] = {}
    for element in elements:
        if not element.currency and element.amount == 0:
            # Zeroed leftover entry
            continue
        totals.setdefault(element.currency, 0)
        totals[element.currency] -= int(DrCr(element.drcr)) * element.amount
    return totals


def get_sums(elements: Iterable[Element]) -> dict[str, int]:
    """Amount of the balancing entry needed per currency.

    A positive value is the amount of the Debit line that balances the
    currency, a negative value calls for a Credit line, and 0 means the
    currency already balances and no line is generated.
    """
    return _net_credits(elements)


def get_balances(elements: Iterable[Element]) -> dict[str, int]:
    """Outstanding balance per currency across linked transactions.

    Callers pass the elements of an invoice and its settlements that post to
    the shared receivable or payable account. Every currency present gets an
    entry, including zero once fully settled.
    """
    return _net_credits(elements)


def check_balanced(elements: Iterable[Element]) -> None:
    """Raise BalanceError if any currency has unequal debits and credits."""
    off = {currency: amount for currency, amount in _net_credits(elements).items() if amount}
    if off:
        raise BalanceError(unbalanced(off))
