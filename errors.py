"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

Token errors never carry the presented secret or its stored hash. A missing
token and a wrong secret both surface as InvalidCredentialError so callers
cannot probe which token ids exist.

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"
    headers: Optional[dict[str, str]] = None

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


class ServiceUnavailableError(AppError):
    status_code = 503
    error_code = "service_unavailable"


# ── Token errors ─────────────────────────────────────────────────────────────


class MalformedCredentialError(AuthenticationError):
    """The presented string cannot be split into a token id and a secret."""

    error_code = "malformed_credential"


class InvalidCredentialError(AuthenticationError):
    """Unknown token id or wrong secret. Deliberately indistinguishable."""

    error_code = "invalid_credential"


class InsufficientScopeError(ForbiddenError):
    error_code = "insufficient_scope"


class TokenNotFoundError(NotFoundError):
    """No token with this id exists for the caller (including foreign tokens)."""

    error_code = "token_not_found"


class TokenBindingError(AppError):
    """A request tried to bind a second, different token."""

    error_code = "token_binding_conflict"


class GenerationFailureError(AppError):
    """Token material could not be generated; issuance aborted."""

    error_code = "generation_failure"


class DuplicateTokenIdError(ConflictError):
    """The store already holds a token with this id."""

    error_code = "duplicate_token_id"


class StoreUnavailableError(ServiceUnavailableError):
    error_code = "store_unavailable"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
