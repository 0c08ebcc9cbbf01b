"""Element merge engine.

Reconciles the elements a form wants to persist (the desired list) with the
elements already persisted for a transaction, keeping element ids stable so
that anything referring to them survives an edit.

Rules:
- a desired element with an id replaces the persisted element with that id
- a desired element without an id is inserted, unless it is drained
- a persisted element whose id is not desired is tombstoned
- a tax line with parent_id PENDING_PARENT attaches to the last top-level
  line of the same pass
- a tax line whose explicit parent is not a top-level line of the pass is
  promoted to a top-level line
- the result lists top-level lines first, then tax lines
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, fields, replace
from typing import Optional

from ledgerkit.domain.balance import check_balanced
from ledgerkit.domain.entities import PENDING_PARENT, Element
from ledgerkit.domain.errors import MergeError, element_not_found

logger = logging.getLogger(__name__)

# Fields copied from a desired element onto the persisted one
_MERGED_FIELDS = tuple(f.name for f in fields(Element) if f.name not in ("id", "transaction_id", "parent"))


@dataclass
class MergeResult:
    """Elements to persist, in order, plus the ids to delete."""

    elements: list[Element] = field(default_factory=list)
    removed_ids: list[int] = field(default_factory=list)


def merge_elements(
    persisted: Sequence[Element],
    desired: Iterable[Element],
    transaction_id: Optional[int] = None,
) -> MergeResult:
    """Merge a desired element list into the persisted elements.

    Neither input is modified.

    Raises:
        MergeError: If a desired element carries an id that is not persisted
        BalanceError: If the merged set does not balance per currency
    """
    existing = {e.id: e for e in persisted if e.id}
    seen: set[int] = set()
    top_level: list[Element] = []
    tax_lines: list[Element] = []
    last_top: Optional[Element] = None

    for wanted in desired:
        if wanted.id:
            current = existing.get(wanted.id)
            if current is None:
                raise MergeError(element_not_found(wanted.id, transaction_id))
            element = replace(current, **{name: getattr(wanted, name) for name in _MERGED_FIELDS})
            element.parent = None
            seen.add(wanted.id)
        elif wanted.is_drained:
            if wanted.parent_id == 0:
                last_top = None
            continue
        else:
            element = replace(wanted, transaction_id=transaction_id, parent=None)

        promoted = False
        if element.parent_id == PENDING_PARENT:
            if last_top is None:
                logger.debug("Promoting tax line %r without a parent line", element.description)
                element.parent_id = 0
                promoted = True
            elif last_top.id:
                element.parent_id = last_top.id
            else:
                element.parent = last_top

        if element.parent_id == 0:
            top_level.append(element)
            if not promoted:
                last_top = element
        else:
            tax_lines.append(element)

    top_ids = {e.id for e in top_level if e.id}
    orphans = [e for e in tax_lines if e.parent is None and e.parent_id not in top_ids]
    for element in orphans:
        logger.debug("Promoting tax line %r with missing parent %s", element.description, element.parent_id)
        element.parent_id = 0
    if orphans:
        top_level += orphans
        tax_lines = [e for e in tax_lines if e.parent_id != 0]

    merged = top_level + tax_lines
    check_balanced(merged)

    removed = [e.id for e in persisted if e.id and e.id not in seen]
    if removed:
        logger.debug("Tombstoning elements %s of transaction %s", removed, transaction_id)
    return MergeResult(elements=merged, removed_ids=removed)


def condense_elements(elements: Iterable[Element]) -> list[Element]:
    """Drop drained elements from an in-memory element list."""
    return [e for e in elements if not e.is_drained]
