"""bcrypt password hashing with non-blocking async wrappers."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

import bcrypt

DEFAULT_ROUNDS = 10
# bcrypt only consumes the first 72 bytes of input.
BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]


@runtime_checkable
class PasswordVerifier(Protocol):
    """Capability the authenticator needs from a hasher."""

    async def verify(self, plaintext: str, digest: str) -> bool:
        ...


class PasswordHasher:
    """Salted, deliberately slow one-way hashing of account passwords.

    The async methods hand the bcrypt work to a worker thread. bcrypt drops
    the GIL while computing, so concurrent verifications do not queue behind
    each other or stall the event loop.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        """Store the bcrypt cost factor applied to newly generated salts."""
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash_sync(self, plaintext: str) -> str:
        """Return a ``$2b$`` digest embedding a freshly generated salt."""
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(plaintext), salt).decode("utf-8")

    def verify_sync(self, plaintext: str, digest: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``digest``.

        Malformed or empty digests count as a mismatch rather than an error.
        """
        if not isinstance(plaintext, str) or not isinstance(digest, str) or not digest:
            return False
        try:
            return bcrypt.checkpw(_encode(plaintext), digest.encode("utf-8"))
        except ValueError:
            return False

    async def hash(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash_sync, plaintext)

    async def verify(self, plaintext: str, digest: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, plaintext, digest)
