"""
Test configuration and fixtures for the cart store
"""

import pytest

from db import open_db


@pytest.fixture
def db_path(tmp_path):
    """Path to a fresh database file per test"""
    return str(tmp_path / "cart.db")


@pytest.fixture
def db(db_path):
    """Open database handle, closed after the test"""
    handle = open_db(db_path, write_retries=50, write_timeout=10.0)
    yield handle
    handle.close()
