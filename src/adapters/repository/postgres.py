"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Atomicity:
----------
1. **create_account** uses INSERT ... ON CONFLICT (email) DO NOTHING.
   The UNIQUE constraint on email decides concurrent registrations for
   the same address; the domain's pre-check alone is racy.

2. **activate** is a single UPDATE ... RETURNING filtered on
   ``enabled = FALSE``. Enabling and clearing the token happen in one
   statement, and a second call with the same token matches no row.

3. **delete_account** only removes disabled rows, so a compensating
   delete can never remove an activated account.

Database errors (connection loss, etc.) are not caught here and
propagate to the caller.
"""

import logging
from pathlib import Path
from typing import Any

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.ports import Account

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    id, username, email, password_hash, enabled, activation_token, created_at, activated_at
"""


def _to_account(row: dict[str, Any]) -> Account:
    return Account(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        enabled=row["enabled"],
        activation_token=row["activation_token"],
        created_at=row["created_at"],
        activated_at=row["activated_at"],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> Account | None:
        """Exact, case-sensitive match on email."""
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s"
        return self._fetch_one(sql, (email,))

    def find_by_activation_token(self, token: str) -> Account | None:
        """Disabled account holding the token, if any."""
        sql = f"""
            SELECT {_ACCOUNT_COLUMNS} FROM accounts
            WHERE activation_token = %s AND enabled = FALSE
        """
        return self._fetch_one(sql, (token,))

    def create_account(
        self, username: str, email: str, password_hash: str, activation_token: str
    ) -> Account | None:
        """
        Insert a disabled account.

        Returns:
            The created account, or None if the email already exists
        """
        sql = f"""
            INSERT INTO accounts (username, email, password_hash, enabled, activation_token)
            VALUES (%s, %s, %s, FALSE, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (username, email, password_hash, activation_token))
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row) if row is not None else None

    def delete_account(self, account_id: int) -> bool:
        """Delete a disabled account; activated accounts are never removed."""
        sql = "DELETE FROM accounts WHERE id = %s AND enabled = FALSE"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account_id,))
            conn.commit()
            return cursor.rowcount == 1

    def activate(self, token: str) -> Account | None:
        """
        Enable the disabled account holding the token and clear the token.

        Concurrent calls with the same token serialize on the row lock
        taken by UPDATE; the loser re-evaluates ``enabled = FALSE`` and
        matches nothing.
        """
        sql = f"""
            UPDATE accounts
            SET enabled = TRUE, activation_token = NULL, activated_at = NOW()
            WHERE activation_token = %s AND enabled = FALSE
            RETURNING {_ACCOUNT_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (token,))
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row) if row is not None else None

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> Account | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _to_account(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
