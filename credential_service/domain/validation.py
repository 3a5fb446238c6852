"""Shape checks applied to login input before any lookup happens."""

from __future__ import annotations

from .contracts import LoginRequest
from .results import AuthError, ErrorCode

REQUIRED_MESSAGE = "Email and password are required"
NOT_STRINGS_MESSAGE = "Email and password must be strings"
EMPTY_MESSAGE = "Email and password cannot be empty"


def validate_login_input(request: LoginRequest) -> AuthError | None:
    """Return the first failing rule as an :class:`AuthError`, or ``None`` when valid.

    Rules are checked in order: presence (non-``None`` and truthy), string
    type, then non-blank after trimming surrounding whitespace.
    """
    if not request.email or not request.password:
        return AuthError(ErrorCode.VALIDATION_ERROR, REQUIRED_MESSAGE)

    if not isinstance(request.email, str) or not isinstance(request.password, str):
        return AuthError(ErrorCode.VALIDATION_ERROR, NOT_STRINGS_MESSAGE)

    if not request.email.strip() or not request.password.strip():
        return AuthError(ErrorCode.VALIDATION_ERROR, EMPTY_MESSAGE)

    return None
