"""HTTP route definitions for the credential service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from prometheus_client import Counter
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..domain.account import PublicUser
from ..domain.results import AuthFailure, AuthResult, ErrorCode
from ..domain.service import Authenticator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

INVALID_BODY_MESSAGE = "Invalid request body"

LOGIN_ATTEMPTS = Counter(
    "credential_login_attempts_total",
    "Login attempts handled by the credential service, by outcome.",
    ["outcome"],
)

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class UserResponse(BaseModel):
    """Serialised representation of a `PublicUser` projection."""

    id: int
    email: str
    created_at: datetime

    @classmethod
    def from_domain(cls, user: PublicUser) -> "UserResponse":
        """Build a response model from the domain projection."""
        return cls(id=user.id, email=user.email, created_at=user.created_at)


class LoginResponse(BaseModel):
    """Outcome of a login attempt; ``user`` is only set on success."""

    success: bool
    message: str
    user: UserResponse | None = None
    error: str | None = None

    @classmethod
    def from_result(cls, result: AuthResult) -> "LoginResponse":
        user = UserResponse.from_domain(result.user) if result.user is not None else None
        return cls(success=result.success, message=result.message, user=user)

    def render(self, status_code: int) -> JSONResponse:
        return JSONResponse(
            self.model_dump(mode="json", exclude_none=True), status_code=status_code
        )


def get_authenticator(request: Request) -> Authenticator:
    """Resolve the `Authenticator` stored on the FastAPI application state."""
    authenticator: Authenticator = request.app.state.authenticator
    return authenticator


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
async def login(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Check an email/password pair and report the decision.

    The body is parsed by hand so that missing or mistyped fields reach the
    authenticator's own validation instead of a generic 422.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        LOGIN_ATTEMPTS.labels(outcome=ErrorCode.VALIDATION_ERROR.value).inc()
        return LoginResponse(success=False, message=INVALID_BODY_MESSAGE).render(
            status.HTTP_400_BAD_REQUEST
        )

    result = await authenticator.authenticate(body.get("email"), body.get("password"))
    return _to_response(result, settings)


def _to_response(result: AuthResult, settings: Settings) -> JSONResponse:
    response = LoginResponse.from_result(result)
    if not isinstance(result, AuthFailure):
        LOGIN_ATTEMPTS.labels(outcome="success").inc()
        return response.render(status.HTTP_200_OK)

    LOGIN_ATTEMPTS.labels(outcome=result.code.value).inc()
    if result.code is ErrorCode.INTERNAL_ERROR:
        logger.error("login failed with an internal error", exc_info=result.cause)
        if settings.is_development and result.cause is not None:
            response.error = str(result.cause)
    return response.render(_STATUS_BY_CODE[result.code])
