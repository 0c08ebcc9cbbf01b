"""Transaction aggregate.

A Transaction owns its elements. Elements only change through
``merge_elements`` so that the balance invariant is checked before anything
is replaced, and element ids stay stable across edits.
"""

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, fields, replace
from datetime import date as date_type
from typing import Optional

from ledgerkit.domain.balance import get_sums
from ledgerkit.domain.entities import PENDING_PARENT, DrCr, Element, TransactionType
from ledgerkit.domain.merge import condense_elements, merge_elements

logger = logging.getLogger(__name__)


@dataclass
class Transaction:
    """A dated, balanced set of ledger elements."""

    id: Optional[int] = None
    type: TransactionType = TransactionType.SALE
    date: Optional[date_type] = None
    description: str = ""
    actor_id: int = 0
    elements: list[Element] = field(default_factory=list)
    # Element ids tombstoned by the last merge, deleted on save
    removed_ids: list[int] = field(default_factory=list, repr=False, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.elements

    def merge_elements(self, desired: Iterable[Element]) -> None:
        """Reconcile the elements with a desired element list.

        On error the aggregate is left unchanged.

        Raises:
            MergeError: If a desired id is not one of this transaction's elements
            BalanceError: If the result would not balance
        """
        result = merge_elements(self.elements, desired, transaction_id=self.id)
        self.elements = result.elements
        self.removed_ids = sorted(set(self.removed_ids) | set(result.removed_ids))

    def snapshot(self) -> "Transaction":
        """Deep copy of the aggregate, for undoing a failed save."""
        return copy.deepcopy(self)

    def restore(self, snapshot: "Transaction") -> None:
        """Put back every field captured by ``snapshot``."""
        for f in fields(self):
            setattr(self, f.name, getattr(snapshot, f.name))

    def condense_elements(self) -> None:
        """Forget drained elements once they have been persisted."""
        self.elements = condense_elements(self.elements)

    def resolve_pending_parents(self) -> None:
        """Copy ids of newly persisted parent lines onto their tax lines."""
        for element in self.elements:
            if element.parent_id != PENDING_PARENT:
                continue
            if element.parent is not None and element.parent.id:
                element.parent_id = element.parent.id
                element.parent = None

    def dr_element_ids(self) -> list[int]:
        """Ids of persisted Debit elements, oldest first."""
        return sorted(e.id for e in self.elements if e.id and e.drcr == DrCr.DEBIT)

    def first_dr_element(self) -> Optional[Element]:
        return next((e for e in self.elements if e.drcr == DrCr.DEBIT), None)

    def first_cr_element(self) -> Optional[Element]:
        return next((e for e in self.elements if e.drcr == DrCr.CREDIT), None)

    def element(self, element_id: int) -> Optional[Element]:
        return next((e for e in self.elements if e.id == element_id), None)

    def balancing_elements(self, desired: Iterable[Element], account_id: int) -> list[Element]:
        """Generate the balancing lines for a desired element list.

        One line per unbalanced currency, posted to ``account_id``. Ids of this
        transaction's existing Debit elements are reused oldest first; ids left
        over are returned as zeroed copies so their rows are kept but carry no
        amount.
        """
        ids = self.dr_element_ids()
        lines: list[Element] = []
        for currency, amount in get_sums(desired).items():
            if amount == 0:
                continue
            lines.append(
                Element(
                    id=ids.pop(0) if ids else None,
                    account_id=account_id,
                    drcr=DrCr.DEBIT if amount > 0 else DrCr.CREDIT,
                    amount=abs(amount),
                    currency=currency,
                )
            )

        for leftover in ids:
            current = self.element(leftover)
            logger.debug("Zeroing leftover debit element %s", leftover)
            lines.append(replace(current, amount=0, currency="", parent=None))
        return lines
