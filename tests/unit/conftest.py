"""Fixtures for unit tests: an in-memory database per test."""
import pytest

from paperpile_navigate.database.connection import DatabaseConnection
from paperpile_navigate.database.schema import init_database


@pytest.fixture
def db():
    """DatabaseConnection bound to a fresh in-memory SQLite database."""
    conn = DatabaseConnection.configure("sqlite://")
    init_database(conn.engine)
    yield conn
    conn.engine.dispose()


@pytest.fixture
def session(db):
    """Session committed when the test ends."""
    with db.get_session() as s:
        yield s
