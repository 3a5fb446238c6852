"""Credential store implementations backing the authenticator."""

from __future__ import annotations

import asyncio
import itertools
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Protocol

from psycopg import errors as pg_errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .security.passwords import PasswordHasher

logger = logging.getLogger(__name__)

SCHEMA_SQL = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id BIGSERIAL PRIMARY KEY,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_accounts_email ON accounts (email)",
)


class StoreError(Exception):
    """Base class for failures the credential stores recognise."""


class DuplicateAccountError(StoreError):
    """Raised when creating an account whose email is already registered."""

    def __init__(self, email: str) -> None:
        super().__init__(f"account already exists: {email}")
        self.email = email


class AccountStore(Protocol):
    """Capability interface the authenticator and provisioning rely on."""

    async def find_by_email(self, email: str) -> Account | None:
        """Return the account stored under ``email`` (exact match) or ``None``."""
        ...

    async def create(self, email: str, password: str) -> Account:
        """Hash ``password`` and persist a new account under the trimmed ``email``."""
        ...


class InMemoryAccountStore:
    """Dict-backed store used for tests and local development.

    Reads take no lock; writes are serialised so email uniqueness holds.
    """

    def __init__(self, hasher: PasswordHasher) -> None:
        self._hasher = hasher
        self._accounts: dict[str, Account] = {}
        self._ids = itertools.count(1)
        self._lock = Lock()

    async def find_by_email(self, email: str) -> Account | None:
        return self._accounts.get(email)

    async def create(self, email: str, password: str) -> Account:
        email = email.strip()
        if email in self._accounts:
            raise DuplicateAccountError(email)
        password_hash = await self._hasher.hash(password)
        now = datetime.now(timezone.utc)
        with self._lock:
            if email in self._accounts:
                raise DuplicateAccountError(email)
            account = Account(
                id=next(self._ids),
                email=email,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self._accounts[email] = account
        logger.info("account %s created in memory store", account.id)
        return account

    def __len__(self) -> int:
        return len(self._accounts)


class PostgresAccountStore:
    """Postgres-backed account persistence.

    psycopg calls are blocking, so each public coroutine runs its query on a
    worker thread with its own pooled connection.
    """

    def __init__(self, pool: ConnectionPool, hasher: PasswordHasher) -> None:
        """Store the connection pool and hasher used for all interactions."""
        self._pool = pool
        self._hasher = hasher

    def ensure_schema(self) -> None:
        """Create the accounts table and email index when they are missing."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                for statement in SCHEMA_SQL:
                    cur.execute(statement)
                conn.commit()

    async def find_by_email(self, email: str) -> Account | None:
        return await asyncio.to_thread(self._find_by_email, email)

    async def create(self, email: str, password: str) -> Account:
        email = email.strip()
        password_hash = await self._hasher.hash(password)
        return await asyncio.to_thread(self._insert_account, email, password_hash)

    def _find_by_email(self, email: str) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT id, email, password_hash, created_at, updated_at
                    FROM accounts
                    WHERE email = %s
                    """,
                    (email,),
                )
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def _insert_account(self, email: str, password_hash: str) -> Account:
        now = datetime.now(timezone.utc)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    cur.execute(
                        """
                        INSERT INTO accounts (email, password_hash, created_at, updated_at)
                        VALUES (%s, %s, %s, %s)
                        RETURNING id, email, password_hash, created_at, updated_at
                        """,
                        (email, password_hash, now, now),
                    )
                except pg_errors.UniqueViolation as exc:
                    conn.rollback()
                    raise DuplicateAccountError(email) from exc
                record = cur.fetchone()
                conn.commit()
        account = self._map_record(record)
        logger.info("account %s created in postgres store", account.id)
        return account

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            id=row[0],
            email=row[1],
            password_hash=row[2],
            created_at=row[3],
            updated_at=row[4],
        )
