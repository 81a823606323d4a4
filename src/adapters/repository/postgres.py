"""
PostgreSQL repository adapter - Implements AccountStore protocol.

This module provides the PostgreSQL implementation of the domain's
store port using psycopg3 with raw SQL.

Atomicity:
----------
update_by_email / update_by_token lock the row with SELECT ... FOR UPDATE,
run the domain mutator, then write the row back inside the same
transaction. A mutator that raises rolls the transaction back, so a failed
verification leaves the record untouched and two concurrent resends can
never interleave an OTP with another request's expiry.

Uniqueness of email is enforced by the UNIQUE constraint; create() relies on
INSERT ... ON CONFLICT DO NOTHING rather than a read-then-write.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import StoreError
from src.domain.ports import Account, AccountMutator, Role

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, email, name, password_hash, role, phone, is_verified,
    verification_token, otp, otp_expires_at, created_at, updated_at
"""


def _row_to_account(row: dict[str, Any]) -> Account:
    return Account(
        id=str(row["id"]),
        email=row["email"],
        name=row["name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        phone=row["phone"],
        is_verified=row["is_verified"],
        verification_token=row["verification_token"],
        otp=row["otp"],
        otp_expires_at=row["otp_expires_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate driver and pool failures into the domain's StoreError."""
    try:
        yield
    except psycopg.Error as exc:
        logger.error("Account store %s failed: %s", operation, exc)
        raise StoreError() from exc


class PostgresAccountStore:
    """
    Implements AccountStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create(self, account: Account) -> bool:
        """
        Insert a new account row.

        Returns:
            True if inserted, False if the email already exists
        """
        sql = f"""
            INSERT INTO accounts ({_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
        """
        params = (
            account.id,
            account.email,
            account.name,
            account.password_hash,
            account.role.value,
            account.phone,
            account.is_verified,
            account.verification_token,
            account.otp,
            account.otp_expires_at,
            account.created_at,
            account.updated_at,
        )

        with _store_errors("create"), self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            conn.commit()
            return cursor.rowcount == 1

    def get_by_email(self, email: str) -> Account | None:
        sql = f"SELECT {_COLUMNS} FROM accounts WHERE email = %s"

        with (
            _store_errors("get_by_email"),
            self._pool.connection() as conn,
            conn.cursor(row_factory=dict_row) as cursor,
        ):
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
            return _row_to_account(row) if row is not None else None

    def update_by_email(self, email: str, mutate: AccountMutator) -> Account | None:
        return self._update("email", email, mutate)

    def update_by_token(self, token: str, mutate: AccountMutator) -> Account | None:
        return self._update("verification_token", token, mutate)

    def ping(self) -> None:
        with _store_errors("ping"), self._pool.connection() as conn:
            conn.execute("SELECT 1")

    def _update(self, key_column: str, key: str, mutate: AccountMutator) -> Account | None:
        """
        Locked read-modify-write of a single row.

        key_column is one of two internal literals, never caller input.
        """
        select_sql = f"SELECT {_COLUMNS} FROM accounts WHERE {key_column} = %s FOR UPDATE"
        update_sql = """
            UPDATE accounts
            SET is_verified = %s,
                verification_token = %s,
                otp = %s,
                otp_expires_at = %s,
                updated_at = %s
            WHERE id = %s
        """

        with (
            _store_errors(f"update_by_{key_column}"),
            self._pool.connection() as conn,
            conn.cursor(row_factory=dict_row) as cursor,
        ):
            cursor.execute(select_sql, (key,))
            row = cursor.fetchone()
            if row is None:
                conn.commit()
                return None

            account = _row_to_account(row)
            # Domain errors raised here propagate; the pool rolls back.
            mutate(account)

            cursor.execute(
                update_sql,
                (
                    account.is_verified,
                    account.verification_token,
                    account.otp,
                    account.otp_expires_at,
                    account.updated_at,
                    account.id,
                ),
            )
            conn.commit()
            return account


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
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
