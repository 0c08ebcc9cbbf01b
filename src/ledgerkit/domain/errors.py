"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class CurrencyError(DomainError):
    """Unknown currency code or malformed amount text."""


class TaxCodeError(DomainError):
    """Malformed tax code or tax rate."""


class MergeError(DomainError):
    """A desired element references an id that is not persisted.

    Indicates data corruption or a concurrent edit. Never retried.
    """


class BalanceError(AssertionError):
    """Debits and credits differ for at least one currency.

    This is an internal computation fault: balancing lines must be generated
    before a merge, so it never reaches persistence.
    """


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def element_not_found(element_id: int, transaction_id: int | None) -> str:
    """Return message for a desired element id missing from the persisted set."""
    return f"Element {element_id} not found in transaction {transaction_id}"


def unknown_currency(code: str) -> str:
    """Return message for an unregistered currency code."""
    return f"Unknown currency '{code}'"


def unbalanced(sums: dict[str, int]) -> str:
    """Return message listing currencies whose debits and credits differ."""
    parts = [f"{currency} off by {amount}" for currency, amount in sorted(sums.items())]
    return f"Transaction does not balance: {', '.join(parts)}"
