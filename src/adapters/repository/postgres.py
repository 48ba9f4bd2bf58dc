"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
user repository port using psycopg3 with raw SQL.

Concurrency Design - Double Signup:
----------------------------------
Two verified signup sessions for the same email may race to create
the user. No application lock is taken: the UNIQUE constraint on
users.email makes the INSERT itself the arbiter. The losing INSERT
raises psycopg.errors.UniqueViolation, which is translated to the
domain's DuplicateUserEmail.
"""

import logging
import uuid
from pathlib import Path

from psycopg import errors as pg_errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import DuplicateUserEmail
from src.domain.ports import User

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, password_hash, first_name, last_name, created_at"


def _to_user(row: dict) -> User:
    return User(
        id=str(row["id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        created_at=row["created_at"],
    )


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

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

    def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """
        Insert a new user; the database generates its id.

        Raises:
            DuplicateUserEmail: If users.email already holds this address
        """
        sql = f"""
            INSERT INTO users (email, password_hash, first_name, last_name)
            VALUES (%s, %s, %s, %s)
            RETURNING {_USER_COLUMNS}
        """

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (email, password_hash, first_name, last_name))
                row = cursor.fetchone()
                conn.commit()
        except pg_errors.UniqueViolation:
            raise DuplicateUserEmail(email) from None
        return _to_user(row)

    def find_by_email(self, email: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s"

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _to_user(row) if row is not None else None

    def find_by_id(self, user_id: str) -> User | None:
        # Ids are UUIDs; anything else cannot match and must not reach SQL.
        try:
            parsed_id = uuid.UUID(user_id)
        except ValueError:
            return None

        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (parsed_id,))
            row = cursor.fetchone()
        return _to_user(row) if row is not None else None


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
