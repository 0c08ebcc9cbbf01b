"""SQLAlchemy models for the ledgerkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Ledger account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)


class Actor(Base):
    """Customer or supplier model."""

    __tablename__ = "actors"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="actor")


class Transaction(Base):
    """Transaction header model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    type = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    actor_id = Column(Integer, ForeignKey("actors.id"), nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    actor = relationship("Actor", back_populates="transactions")
    elements = relationship(
        "Element", back_populates="transaction", cascade="all, delete-orphan", order_by="Element.id"
    )


class Element(Base):
    """Ledger element model. Amounts are integer minor units."""

    __tablename__ = "elements"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    account_id = Column(Integer, nullable=False)
    drcr = Column(Integer, nullable=False)
    amount = Column(Integer, nullable=False, default=0)
    currency = Column(String, nullable=False, default="")
    use_gross = Column(Boolean, nullable=False, default=False)
    gross_amount = Column(Integer, nullable=False, default=0)
    tax_code = Column(String, nullable=False, default="")
    parent_id = Column(Integer, nullable=False, default=0)
    settle_id = Column(Integer, nullable=False, default=0)
    description = Column(String, nullable=False, default="")

    __table_args__ = (Index("ix_elements_settle_id", "settle_id"),)

    # Relationships
    transaction = relationship("Transaction", back_populates="elements")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
