"""Authenticator orchestrating validation, credential lookup and hash verification."""

from __future__ import annotations

import logging
from typing import Any

from .contracts import LoginRequest
from .results import AuthFailure, AuthResult, AuthSuccess
from .validation import validate_login_input
from ..repository import AccountStore
from ..security.passwords import PasswordVerifier

logger = logging.getLogger(__name__)


class Authenticator:
    """Single entry point deciding whether an email/password pair is valid."""

    def __init__(self, store: AccountStore, hasher: PasswordVerifier) -> None:
        """Store the credential store and hasher used to check logins."""
        self._store = store
        self._hasher = hasher

    async def authenticate(self, email: Any, password: Any) -> AuthResult:
        """Verify the supplied credentials and return a tagged result.

        Validation failures return before the store is touched. Unknown
        accounts and wrong passwords share one message so callers cannot
        probe which emails are registered. Unexpected errors are converted to
        an internal-error failure; nothing is raised to the caller.
        """
        error = validate_login_input(LoginRequest(email=email, password=password))
        if error is not None:
            return AuthFailure.from_error(error)

        # Passwords may legitimately start or end with whitespace.
        normalized_email = email.strip()

        try:
            account = await self._store.find_by_email(normalized_email)
            if account is None:
                return AuthFailure.invalid_credentials()
            if not await self._hasher.verify(password, account.password_hash):
                return AuthFailure.invalid_credentials()
            return AuthSuccess(user=account.to_public())
        except Exception as exc:
            logger.warning("credential check failed unexpectedly", exc_info=exc)
            return AuthFailure.internal_error(exc)
