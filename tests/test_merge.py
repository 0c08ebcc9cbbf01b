"""Tests for the element merge engine."""

import pytest

from ledgerkit.domain.entities import PENDING_PARENT, DrCr, Element, ReservedAccount
from ledgerkit.domain.errors import BalanceError, MergeError
from ledgerkit.domain.merge import condense_elements, merge_elements


def line(amount, id=None, description="", **kwargs):
    return Element(
        id=id, account_id=400, drcr=DrCr.CREDIT, amount=amount, currency="USD", description=description, **kwargs
    )


def tax(amount, id=None, description="", parent_id=PENDING_PARENT, tax_code="::10"):
    return Element(
        id=id,
        account_id=ReservedAccount.TAX_PAYABLE,
        drcr=DrCr.CREDIT,
        amount=amount,
        currency="USD",
        tax_code=tax_code,
        parent_id=parent_id,
        description=description,
    )


def cash(amount, id=None):
    return Element(id=id, account_id=ReservedAccount.CASH, drcr=DrCr.DEBIT, amount=amount, currency="USD")


@pytest.fixture
def persisted():
    """A saved sale: one line with one tax line and its balancing entry."""
    return [
        line(1000, id=1, description="one", transaction_id=7),
        cash(1100, id=2),
        tax(100, id=3, description="one a", parent_id=1),
    ]


class TestNewElements:
    """Tests for merging into an empty transaction."""

    def test_order_is_top_level_then_tax(self):
        """Test top-level lines come first, tax lines after."""
        result = merge_elements([], [line(1000, description="one"), tax(100, description="one a"), cash(1100)])
        assert [e.description for e in result.elements] == ["one", "", "one a"]
        assert result.removed_ids == []

    def test_pending_parent_links_in_memory(self):
        """Test a new tax line is linked to the new line before it."""
        result = merge_elements([], [line(1000), tax(100), line(500), tax(50), cash(1650)])
        first, second = result.elements[0], result.elements[1]
        taxes = result.elements[3:]
        assert taxes[0].parent is first
        assert taxes[1].parent is second
        assert all(t.parent_id == PENDING_PARENT for t in taxes)

    def test_drained_new_elements_are_skipped(self):
        """Test new elements with nothing in them are not inserted."""
        blank_tax = tax(0, tax_code="")
        result = merge_elements([], [line(1000), blank_tax, line(0), cash(1000)])
        assert len(result.elements) == 2

    def test_zero_rate_tax_is_kept(self):
        """Test a tax line with a code but no amount is kept."""
        result = merge_elements([], [line(1000), tax(0, tax_code=":zero:0"), cash(1000)])
        assert len(result.elements) == 3

    def test_orphan_tax_is_promoted(self):
        """Test a tax line with no line before it becomes top-level."""
        result = merge_elements([], [tax(100, description="orphan"), line(1000, description="one"), cash(1100)])
        orphan = result.elements[0]
        assert orphan.description == "orphan"
        assert orphan.parent_id == 0
        assert orphan.parent is None

    def test_tax_after_drained_line_is_promoted(self):
        """Test a tax line does not attach to a line above a skipped one."""
        result = merge_elements([], [line(1000), line(0), tax(100, description="t"), cash(1100)])
        promoted = next(e for e in result.elements if e.description == "t")
        assert promoted.parent_id == 0

    def test_tax_with_unknown_parent_is_promoted(self):
        """Test a tax line whose declared parent is not in the pass becomes top-level."""
        result = merge_elements([], [line(1000), tax(100, description="t", parent_id=99), cash(1100)])
        assert [e.description for e in result.elements] == ["", "", "t"]
        assert result.elements[-1].parent_id == 0
        assert all(e.parent_id == 0 for e in result.elements)

    def test_inputs_are_not_modified(self):
        """Test merging does not mutate the desired elements."""
        desired = [line(1000), tax(100), cash(1100)]
        merge_elements([], desired, transaction_id=3)
        assert desired[0].transaction_id is None
        assert desired[1].parent is None

    def test_transaction_id_assigned(self):
        """Test new elements get the transaction id."""
        result = merge_elements([], [line(1000), cash(1000)], transaction_id=3)
        assert {e.transaction_id for e in result.elements} == {3}


class TestExistingElements:
    """Tests for merging into persisted elements."""

    def test_ids_are_stable(self, persisted):
        """Test updated elements keep their ids and take new values."""
        desired = [line(2000, id=1, description="one"), tax(200, id=3), cash(2200, id=2)]
        result = merge_elements(persisted, desired, transaction_id=7)
        assert [e.id for e in result.elements] == [1, 2, 3]
        assert [e.amount for e in result.elements] == [2000, 2200, 200]
        assert result.elements[2].parent_id == 1
        assert result.elements[0].transaction_id == 7
        assert result.removed_ids == []

    def test_new_tax_attaches_to_existing_line(self, persisted):
        """Test a new tax line under a persisted line gets its id directly."""
        desired = [line(1000, id=1), tax(100, id=3), tax(50), cash(1150, id=2)]
        result = merge_elements(persisted, desired, transaction_id=7)
        new_tax = result.elements[-1]
        assert new_tax.id is None
        assert new_tax.parent_id == 1
        assert new_tax.parent is None

    def test_omitted_elements_are_removed(self, persisted):
        """Test persisted elements missing from the desired list are tombstoned."""
        result = merge_elements(persisted, [line(1000, id=1), cash(1000, id=2)], transaction_id=7)
        assert result.removed_ids == [3]
        assert [e.id for e in result.elements] == [1, 2]

    def test_drained_existing_element_is_kept(self, persisted):
        """Test an existing element emptied by the form is kept, zeroed."""
        desired = [line(1000, id=1), tax(0, id=3, tax_code=""), cash(1000, id=2)]
        result = merge_elements(persisted, desired, transaction_id=7)
        assert len(result.elements) == 3
        assert result.elements[2].is_drained
        assert result.removed_ids == []

    def test_unknown_id_raises(self, persisted):
        """Test a desired id that is not persisted raises MergeError."""
        with pytest.raises(MergeError, match="Element 99 not found in transaction 7"):
            merge_elements(persisted, [line(1000, id=99), cash(1000)], transaction_id=7)

    def test_unbalanced_raises(self, persisted):
        """Test an unbalanced result raises and leaves the persisted list unchanged."""
        with pytest.raises(BalanceError):
            merge_elements(persisted, [line(5000, id=1), cash(1100, id=2)], transaction_id=7)
        assert persisted[0].amount == 1000

    def test_tax_of_removed_line_is_promoted(self, persisted):
        """Test a kept tax line whose parent line was removed becomes top-level."""
        desired = [tax(100, id=3, parent_id=1), cash(100, id=2)]
        result = merge_elements(persisted, desired, transaction_id=7)
        assert [e.id for e in result.elements] == [2, 3]
        assert result.elements[1].parent_id == 0
        assert result.removed_ids == [1]


def test_condense_elements():
    """Test drained elements are dropped."""
    elements = [line(1000, id=1), line(0, id=2), tax(0, id=3, tax_code=":zero:0"), cash(1000, id=4)]
    assert [e.id for e in condense_elements(elements)] == [1, 3, 4]
