"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
import pytest

from ledgerkit.config import LedgerConfig
from ledgerkit.database import sqlalchemy_db
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.actor import ActorService
from ledgerkit.domain.entities import ActorType
from ledgerkit.domain.payment import InvoicePaymentService
from ledgerkit.domain.sale import SaleService
from ledgerkit.domain.transaction_service import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def config():
    """Built-in configuration (USD default, default registries)."""
    return LedgerConfig()


@pytest.fixture
def actor_service(temp_db):
    """Create an ActorService with a temporary database."""
    return ActorService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sale_service(temp_db, config):
    """Create a SaleService with a temporary database."""
    return SaleService(temp_db, config)


@pytest.fixture
def payment_service(temp_db, config):
    """Create an InvoicePaymentService with a temporary database."""
    return InvoicePaymentService(temp_db, config)


@pytest.fixture
def sample_customer(actor_service):
    """Create a sample customer for testing."""
    actor_id = actor_service.create_actor("Acme Pty Ltd", ActorType.CUSTOMER)
    return actor_service.get_actor(actor_id)


@pytest.fixture
def fail_on_write(monkeypatch):
    """Arm the database to fail while writing the n-th element.

    ``monkeypatch.undo()`` disarms it.
    """
    original = sqlalchemy_db.element_to_orm

    def arm(count):
        calls = []

        def element_to_orm(*args):
            calls.append(args)
            if len(calls) == count:
                raise RuntimeError("disk full")
            return original(*args)

        monkeypatch.setattr(sqlalchemy_db, "element_to_orm", element_to_orm)

    return arm


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
