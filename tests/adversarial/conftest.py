"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and token
enumeration tests.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from tests.integration.conftest import open_test_pool


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests; skips without PostgreSQL."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def clean_pool(pool: ConnectionPool) -> ConnectionPool:
    """Pool with an empty accounts table."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    return pool
