"""Provision the accounts table and seed demo credentials.

Run with ``python -m credential_service.seed`` against the configured Postgres
database. Existing accounts are left untouched.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from psycopg_pool import ConnectionPool

from .config import get_settings
from .domain.account import Account
from .repository import AccountStore, PostgresAccountStore
from .security.passwords import PasswordHasher

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS: tuple[tuple[str, str], ...] = (
    ("admin@example.com", "admin123"),
    ("user@example.com", "user123"),
    ("test@example.com", "test123"),
)


async def seed_accounts(
    store: AccountStore, accounts: tuple[tuple[str, str], ...] = DEMO_ACCOUNTS
) -> list[Account]:
    """Create each missing account and return the ones that were created."""
    created: list[Account] = []
    for email, password in accounts:
        if await store.find_by_email(email.strip()) is not None:
            logger.info("seed account %s already present, skipping", email)
            continue
        created.append(await store.create(email, password))
        logger.info("created seed account %s", email)
    return created


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    pool = ConnectionPool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        open=False,
    )
    try:
        pool.open()
        store = PostgresAccountStore(pool, PasswordHasher(settings.password_hash_rounds))
        store.ensure_schema()
        created = asyncio.run(seed_accounts(store))
    except Exception:
        logger.exception("seeding the credential store failed")
        return 1
    finally:
        pool.close()
    logger.info("seeded %d account(s)", len(created))
    return 0


if __name__ == "__main__":
    sys.exit(main())
