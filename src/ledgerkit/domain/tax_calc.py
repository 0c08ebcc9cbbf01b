"""Tax calculation engine.

Each revenue line has a net amount, a gross amount and a list of tax lines.
Whichever of net or gross the user typed last drives the other:

    net-driven:   tax_i = round(net * rate_i / 100), gross = net + sum(tax)
    gross-driven: net = round(gross / (1 + sum(rate) / 100)), tax_i as above,
                  the rounding residual goes to the last non-zero-rate line
                  (a shortfall spills onto earlier taxed lines, then net)

All arithmetic is on integer minor units with half-up rounding, so
``net + sum(tax) == gross`` holds exactly either way.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from ledgerkit.domain.currency import (
    DEFAULT_CURRENCIES,
    fits_scale,
    parse_formatted,
    to_formatted,
    to_minor_units,
)
from ledgerkit.domain.errors import CurrencyError
from ledgerkit.utils.amount_parser import parse_rate

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


class TaxTrigger(str, Enum):
    """The input the user changed last."""

    AMOUNT = "amount"
    GROSS_AMOUNT = "gross_amount"
    CURRENCY = "currency"
    RATES = "rates"


@dataclass(frozen=True)
class TaxState:
    """Display state of one revenue line and its tax lines."""

    amount: str = ""
    gross_amount: str = ""
    use_gross: bool = False
    currency: str = ""
    rates: tuple[str, ...] = ()
    tax_amounts: tuple[str, ...] = ()


def tax_for(net: int, rate: Decimal) -> int:
    """Tax on a net amount at a percentage rate, in minor units."""
    return to_minor_units(Decimal(net) * rate / HUNDRED)


def split_net(net: int, rates: Sequence[Decimal]) -> tuple[int, list[int]]:
    """Derive gross and tax amounts from a net amount.

    Returns:
        (gross, tax amounts in rate order)
    """
    taxes = [tax_for(net, rate) for rate in rates]
    return net + sum(taxes), taxes


def split_gross(gross: int, rates: Sequence[Decimal]) -> tuple[int, list[int]]:
    """Derive net and tax amounts from a gross amount.

    The rounding residual is absorbed by the last tax line with a non-zero
    rate (declaration order), or by net when every rate is zero. A negative
    residual larger than that line's tax spills onto earlier taxed lines and
    then net, so no amount goes below zero.

    Returns:
        (net, tax amounts in rate order)
    """
    total_rate = sum(rates, Decimal(0))
    divisor = 1 + total_rate / HUNDRED
    if divisor <= 0:
        net = gross
    else:
        net = to_minor_units(Decimal(gross) / divisor)
    taxes = [tax_for(net, rate) for rate in rates]

    residual = gross - net - sum(taxes)
    taxed = [index for index in range(len(rates) - 1, -1, -1) if rates[index]]
    if residual > 0 and taxed:
        taxes[taxed[0]] += residual
        residual = 0
    # A shortfall is taken from taxed lines last to first, never below zero
    for index in taxed:
        if residual >= 0:
            break
        take = min(-residual, max(taxes[index], 0))
        taxes[index] -= take
        residual += take
    net += residual
    return net, taxes


def recompute(
    state: TaxState, trigger: TaxTrigger, currencies: Mapping[str, int] = DEFAULT_CURRENCIES
) -> TaxState:
    """Recompute the derived fields of a line after ``trigger`` changed.

    Pure and idempotent: the same state and trigger always give the same
    result. Unparseable input clears the derived fields.

    Switching to a currency whose scale cannot hold the typed driver amount
    leaves that text as typed and clears the derived fields, so the value is
    never rounded behind the user's back.
    """
    trigger = TaxTrigger(trigger)
    use_gross = state.use_gross
    if trigger == TaxTrigger.AMOUNT:
        use_gross = False if state.amount.strip() else use_gross
    elif trigger == TaxTrigger.GROSS_AMOUNT:
        use_gross = bool(state.gross_amount.strip())

    rates = [parse_rate(rate) for rate in state.rates]
    blank = [not rate.strip() for rate in state.rates]
    driver = state.gross_amount if use_gross else state.amount

    if not driver.strip():
        return replace(
            state,
            use_gross=use_gross,
            amount="" if use_gross else state.amount,
            gross_amount=state.gross_amount if use_gross else "",
            tax_amounts=tuple("" for _ in rates),
        )

    if trigger == TaxTrigger.CURRENCY and state.currency in currencies and not fits_scale(
        driver, state.currency, currencies
    ):
        logger.debug("Amount %r needs re-entering in %s", driver, state.currency)
        return replace(
            state,
            use_gross=use_gross,
            amount=state.amount if not use_gross else "",
            gross_amount=state.gross_amount if use_gross else "",
            tax_amounts=tuple("" for _ in rates),
        )

    try:
        if use_gross:
            gross = parse_formatted(driver, state.currency, currencies)
            net, taxes = split_gross(gross, rates)
        else:
            net = parse_formatted(driver, state.currency, currencies)
            gross, taxes = split_net(net, rates)
    except CurrencyError as e:
        logger.debug("Cannot recompute taxes: %s", e)
        return replace(
            state,
            use_gross=use_gross,
            amount=state.amount if not use_gross else "",
            gross_amount=state.gross_amount if use_gross else "",
            tax_amounts=tuple("" for _ in rates),
        )

    def fmt(value: int) -> str:
        return to_formatted(value, state.currency, currencies)

    tax_amounts = tuple("" if is_blank else fmt(tax) for tax, is_blank in zip(taxes, blank))
    if trigger == TaxTrigger.CURRENCY:
        # Re-render everything in the new scale, values unchanged
        return replace(
            state, use_gross=use_gross, amount=fmt(net), gross_amount=fmt(gross), tax_amounts=tax_amounts
        )
    if use_gross:
        return replace(state, use_gross=True, amount=fmt(net), tax_amounts=tax_amounts)
    return replace(state, use_gross=False, gross_amount=fmt(gross), tax_amounts=tax_amounts)
