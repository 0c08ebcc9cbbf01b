"""Domain model entities for ledgerkit.

These are pure data classes representing bookkeeping concepts, independent of
the database schema. Elements are mutable because the transaction aggregate
reconciles them in place across edits; reference data (accounts, actors) is
frozen.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional

# parent_id value meaning "attach to the top-level line just merged"
PENDING_PARENT = -1


class DrCr(IntEnum):
    """Side of a ledger element. The value is the sign used when netting."""

    DEBIT = 1
    CREDIT = -1


class TransactionType(str, Enum):
    """Kinds of transactions produced by the form services."""

    SALE = "sale"
    INVOICE = "invoice"
    INVOICE_PAYMENT = "invoice_payment"

    @property
    def label(self) -> str:
        return {
            TransactionType.SALE: "Sale",
            TransactionType.INVOICE: "Invoice",
            TransactionType.INVOICE_PAYMENT: "Invoice payment",
        }[self]


class ReservedAccount(IntEnum):
    """Stable ids of the accounts the balancing logic posts to."""

    CASH = 1
    ACCOUNTS_RECEIVABLE = 2
    ACCOUNTS_PAYABLE = 3
    TAX_PAYABLE = 4


class ActorType(str, Enum):
    """Counterparty kinds."""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"


# Sentinel actor id: the form asks for a new customer to be created
NEW_CUSTOMER = -1


@dataclass(frozen=True)
class Account:
    """Ledger account domain entity."""

    id: int
    title: str
    type: str


@dataclass(frozen=True)
class Actor:
    """Counterparty domain entity."""

    id: int
    title: str
    type: ActorType
    created_at: datetime


@dataclass
class Element:
    """One debit or credit entry of a transaction.

    ``amount`` and ``gross_amount`` are integers in the currency's minor unit.
    ``parent_id`` is 0 for a top-level line, the id of the revenue line for a
    tax line, or PENDING_PARENT until that line has been persisted.
    """

    id: Optional[int] = None
    transaction_id: Optional[int] = None
    account_id: int = 0
    drcr: DrCr = DrCr.CREDIT
    amount: int = 0
    currency: str = ""
    use_gross: bool = False
    gross_amount: int = 0
    tax_code: str = ""
    parent_id: int = 0
    settle_id: int = 0
    description: str = ""
    # In-memory link to a parent that has no id yet
    parent: Optional["Element"] = field(default=None, repr=False, compare=False)

    @property
    def is_tax_line(self) -> bool:
        return self.parent_id != 0

    @property
    def is_drained(self) -> bool:
        """True when the element carries no amount, tax code or settlement."""
        return self.amount == 0 and not self.tax_code and not self.settle_id
