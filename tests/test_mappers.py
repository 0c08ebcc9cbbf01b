"""Tests for database mappers."""

from datetime import datetime, date, UTC

from ledgerkit.database.models import (
    Account as ORMAccount,
    Actor as ORMActor,
    Element as ORMElement,
    Transaction as ORMTransaction,
)
from ledgerkit.database.mappers import (
    account_to_domain,
    actor_to_domain,
    element_to_domain,
    element_to_orm,
    transaction_to_domain,
)
from ledgerkit.domain.entities import Account, Actor, ActorType, DrCr, Element, TransactionType
from ledgerkit.domain.transaction import Transaction


def make_orm_element(**overrides):
    values = dict(
        id=7,
        transaction_id=3,
        account_id=4,
        drcr=-1,
        amount=100,
        currency="USD",
        use_gross=False,
        gross_amount=0,
        tax_code="::10",
        parent_id=6,
        settle_id=0,
        description="GST",
    )
    values.update(overrides)
    return ORMElement(**values)


class TestReferenceMappers:
    """Tests for account and actor mappers."""

    def test_account_to_domain(self):
        """Test converting ORM Account to domain Account."""
        domain_account = account_to_domain(ORMAccount(id=400, title="Sales", type="revenue"))
        assert domain_account == Account(id=400, title="Sales", type="revenue")

    def test_actor_to_domain(self):
        """Test converting ORM Actor to domain Actor."""
        created = datetime.now(UTC)
        domain_actor = actor_to_domain(ORMActor(id=1, title="Acme", type="customer", created_at=created))
        assert isinstance(domain_actor, Actor)
        assert domain_actor.type == ActorType.CUSTOMER
        assert domain_actor.created_at == created


class TestElementMappers:
    """Tests for element mappers."""

    def test_element_to_domain(self):
        """Test converting ORM Element to domain Element."""
        element = element_to_domain(make_orm_element())
        assert isinstance(element, Element)
        assert element.drcr is DrCr.CREDIT
        assert (element.id, element.transaction_id, element.parent_id) == (7, 3, 6)
        assert (element.amount, element.currency, element.tax_code) == (100, "USD", "::10")
        assert element.parent is None

    def test_element_to_orm(self):
        """Test copying a domain Element onto a row keeps the row identity."""
        row = make_orm_element()
        element_to_orm(
            Element(account_id=400, drcr=DrCr.DEBIT, amount=5, currency="JPY", use_gross=True, gross_amount=6),
            row,
        )
        assert (row.id, row.transaction_id) == (7, 3)
        assert (row.account_id, row.drcr, row.amount, row.currency) == (400, 1, 5, "JPY")
        assert (row.use_gross, row.gross_amount, row.tax_code, row.parent_id) == (True, 6, "", 0)


def test_transaction_to_domain():
    """Test converting an ORM Transaction with its elements."""
    orm_txn = ORMTransaction(id=3, type="invoice", date=date(2024, 1, 15), description="Big job", actor_id=None)
    txn = transaction_to_domain(orm_txn, [make_orm_element(), make_orm_element(id=8, parent_id=0)])
    assert isinstance(txn, Transaction)
    assert txn.type == TransactionType.INVOICE
    assert txn.actor_id == 0
    assert [e.id for e in txn.elements] == [7, 8]
    assert txn.removed_ids == []
