"""Tax code engine.

A tax code is a string of the form ``category:label:rate``, for example
``au:gst:10``. Generic codes have an empty category and label (``::10``, or
the empty string before a rate is typed) and their rate is user-editable.
The synthetic zero code ``:zero:0`` always has rate 0 and is fixed.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from ledgerkit.domain.errors import TaxCodeError

ZERO = "zero"


@dataclass(frozen=True)
class TaxCodeDefinition:
    """Registry entry keyed by ``category:label``."""

    category: str
    label: str
    rate: str
    variable: bool = False
    title: str = ""

    @property
    def key(self) -> str:
        return f"{self.category}:{self.label}"

    @property
    def code(self) -> str:
        return f"{self.category}:{self.label}:{self.rate}"


@dataclass(frozen=True)
class TaxCodeInfo:
    """Parsed view of a tax code."""

    category: str
    label: str
    rate: str
    variable: bool


def _registry(definitions) -> Mapping[str, TaxCodeDefinition]:
    return MappingProxyType({d.key: d for d in definitions})


DEFAULT_TAX_CODES: Mapping[str, TaxCodeDefinition] = _registry(
    [
        TaxCodeDefinition("", "", "", variable=True, title="Custom rate"),
        TaxCodeDefinition("", ZERO, "0", title="Zero rated"),
        TaxCodeDefinition("au", "gst", "10", title="Australia GST"),
        TaxCodeDefinition("nz", "gst", "15", title="New Zealand GST"),
        TaxCodeDefinition("sg", "gst", "9", title="Singapore GST"),
        TaxCodeDefinition("uk", "vat", "20", title="UK VAT standard"),
        TaxCodeDefinition("uk", "vat-reduced", "5", title="UK VAT reduced"),
        TaxCodeDefinition("us", "sales", "", variable=True, title="US sales tax"),
    ]
)


def registry_from_definitions(definitions) -> Mapping[str, TaxCodeDefinition]:
    """Build an immutable tax-code registry from definitions.

    Raises:
        TaxCodeError: If a fixed code has no numeric rate
    """
    definitions = list(definitions)
    for d in definitions:
        if not d.variable and not normalize_rate(d.rate):
            raise TaxCodeError(f"Tax code '{d.key}' needs a numeric rate")
    return _registry(definitions)


def _split(code: str) -> tuple[str, str, str]:
    parts = (code or "").split(":", 2)
    parts += [""] * (3 - len(parts))
    return parts[0].strip(), parts[1].strip(), parts[2].strip()


def normalize_rate(rate_text: str) -> str:
    """Return a canonical decimal string for a rate, or "" if not numeric."""
    text = (rate_text or "").strip().rstrip("%").strip()
    if not text:
        return ""
    try:
        value = Decimal(text)
    except InvalidOperation:
        return ""
    if not value.is_finite():
        return ""
    normalized = format(value.normalize(), "f")
    return "0" if normalized in ("-0", "0") else normalized


def parse_code(code: str, registry: Mapping[str, TaxCodeDefinition] = DEFAULT_TAX_CODES) -> TaxCodeInfo:
    """Parse a tax code into category, label, rate and variability."""
    category, label, rate = _split(code)

    if category == ZERO or (not category and label == ZERO):
        return TaxCodeInfo(category=category, label=label, rate="0", variable=False)

    definition = registry.get(f"{category}:{label}")
    if definition is not None:
        if definition.variable:
            return TaxCodeInfo(category, label, normalize_rate(rate), True)
        return TaxCodeInfo(category, label, definition.rate, False)

    if not category and not label:
        return TaxCodeInfo(category, label, normalize_rate(rate), True)

    return TaxCodeInfo(category, label, normalize_rate(rate), False)


def compose_code(
    code: str, rate_text: str, registry: Mapping[str, TaxCodeDefinition] = DEFAULT_TAX_CODES
) -> str:
    """Combine a picked code with a typed rate.

    Variable codes get the rate written into them; fixed codes are returned
    unchanged since their rate cannot be edited.

    Examples:
        compose_code("", "10") -> "::10"
        compose_code("::10", "12.50") -> "::12.5"
        compose_code("au:gst:10", "7") -> "au:gst:10"
    """
    info = parse_code(code, registry)
    if not info.variable:
        return code
    return f"{info.category}:{info.label}:{normalize_rate(rate_text)}"


def rate_of(code: str, registry: Mapping[str, TaxCodeDefinition] = DEFAULT_TAX_CODES) -> str:
    """Return the rate of a code as a decimal string ("" when unset)."""
    return parse_code(code, registry).rate


def tax_label(code: str, registry: Mapping[str, TaxCodeDefinition] = DEFAULT_TAX_CODES) -> str:
    """Return a human label for a code."""
    info = parse_code(code, registry)
    definition = registry.get(f"{info.category}:{info.label}")
    title = definition.title if definition is not None and definition.title else ""
    if not title:
        title = info.label.upper() if info.label else "Tax"
    if info.variable and info.rate:
        return f"{title} {info.rate}%"
    return title


def list_tax_codes(registry: Mapping[str, TaxCodeDefinition] = DEFAULT_TAX_CODES) -> list[TaxCodeDefinition]:
    """Enumerate the registry, generic code first."""
    return sorted(registry.values(), key=lambda d: (d.category != "" or d.label != "", d.category, d.label))
