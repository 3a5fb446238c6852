"""Tagged authentication results returned by :class:`Authenticator`."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Literal, Union

from .account import PublicUser

LOGIN_SUCCESSFUL = "Login successful"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(slots=True, frozen=True)
class AuthError:
    """Categorised failure reason produced below the authenticator boundary."""

    code: ErrorCode
    message: str


@dataclass(slots=True, frozen=True)
class AuthSuccess:
    """Credentials matched a stored account."""

    user: PublicUser
    message: str = LOGIN_SUCCESSFUL
    success: ClassVar[Literal[True]] = True


@dataclass(slots=True, frozen=True)
class AuthFailure:
    """Authentication was refused; ``cause`` is kept for server-side logging only."""

    code: ErrorCode
    message: str
    cause: BaseException | None = field(default=None, compare=False, repr=False)
    success: ClassVar[Literal[False]] = False
    user: ClassVar[None] = None

    @classmethod
    def from_error(cls, error: AuthError) -> "AuthFailure":
        return cls(code=error.code, message=error.message)

    @classmethod
    def invalid_credentials(cls) -> "AuthFailure":
        return cls(code=ErrorCode.INVALID_CREDENTIALS, message=INVALID_CREDENTIALS_MESSAGE)

    @classmethod
    def internal_error(cls, cause: BaseException) -> "AuthFailure":
        return cls(code=ErrorCode.INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE, cause=cause)


AuthResult = Union[AuthSuccess, AuthFailure]
