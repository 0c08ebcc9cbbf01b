"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the aggregate never sees ORM
objects and the merge engine never relies on lazy loading.
"""

from collections.abc import Iterable

from ledgerkit.domain import entities as domain
from ledgerkit.domain.transaction import Transaction as DomainTransaction
from ledgerkit.database.models import (
    Account as ORMAccount,
    Actor as ORMActor,
    Element as ORMElement,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        title=orm_account.title,
        type=orm_account.type,
    )


def actor_to_domain(orm_actor: ORMActor) -> domain.Actor:
    """Convert SQLAlchemy Actor model to domain Actor entity."""
    return domain.Actor(
        id=orm_actor.id,
        title=orm_actor.title,
        type=domain.ActorType(orm_actor.type),
        created_at=orm_actor.created_at,
    )


def element_to_domain(orm_element: ORMElement) -> domain.Element:
    """Convert SQLAlchemy Element model to domain Element entity."""
    return domain.Element(
        id=orm_element.id,
        transaction_id=orm_element.transaction_id,
        account_id=orm_element.account_id,
        drcr=domain.DrCr(orm_element.drcr),
        amount=orm_element.amount,
        currency=orm_element.currency,
        use_gross=bool(orm_element.use_gross),
        gross_amount=orm_element.gross_amount,
        tax_code=orm_element.tax_code,
        parent_id=orm_element.parent_id,
        settle_id=orm_element.settle_id,
        description=orm_element.description,
    )


def transaction_to_domain(
    orm_transaction: ORMTransaction, orm_elements: Iterable[ORMElement]
) -> DomainTransaction:
    """Convert a SQLAlchemy Transaction and its elements to the domain aggregate."""
    return DomainTransaction(
        id=orm_transaction.id,
        type=domain.TransactionType(orm_transaction.type),
        date=orm_transaction.date,
        description=orm_transaction.description,
        actor_id=orm_transaction.actor_id or 0,
        elements=[element_to_domain(e) for e in orm_elements],
    )


def element_to_orm(element: domain.Element, orm_element: ORMElement) -> None:
    """Copy domain Element fields onto a SQLAlchemy Element row."""
    orm_element.account_id = element.account_id
    orm_element.drcr = int(element.drcr)
    orm_element.amount = element.amount
    orm_element.currency = element.currency
    orm_element.use_gross = bool(element.use_gross)
    orm_element.gross_amount = element.gross_amount
    orm_element.tax_code = element.tax_code
    orm_element.parent_id = element.parent_id
    orm_element.settle_id = element.settle_id
    orm_element.description = element.description or ""
