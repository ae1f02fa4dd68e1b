from unittest.mock import MagicMock

import pytest

from sqlfixture.config import configure_logging
from sqlfixture.db import Driver


@pytest.fixture
def sqlite_driver():
    """In-memory SQLite driver with a small fixture table."""
    driver = Driver.create("sqlite::memory:")
    driver.load(
        [
            "CREATE TABLE users (",
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,",
            "  name VARCHAR(255),",
            "  email VARCHAR(255),",
            "  age INTEGER,",
            "  is_active BOOLEAN,",
            "  deleted_at VARCHAR(32)",
            ");",
        ]
    )
    yield driver
    driver.close()


@pytest.fixture
def fake_handle():
    """Handle double recording what the engine sends to the backend."""
    handle = MagicMock()
    handle.errors = (RuntimeError,)
    handle.in_transaction.return_value = False
    return handle


@pytest.fixture(scope="session", autouse=True)
def logging_configured():
    configure_logging()
