from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class PublicUser:
    """Account projection that is safe to return to callers."""

    id: int
    email: str
    created_at: datetime


@dataclass(slots=True)
class Account:
    """Stored credential record keyed by normalised email."""

    id: int
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    def to_public(self) -> PublicUser:
        """Drop the password hash and timestamps the caller has no use for."""
        return PublicUser(id=self.id, email=self.email, created_at=self.created_at)
