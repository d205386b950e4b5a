"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain async functions
used with FastAPI's Depends() system.

The token manager and identity provider live on app.state (set in
create_app); the RequestTokenBinding lives on request.state and is created
fresh for every request.
"""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable

import structlog
from fastapi import Depends, Request

from errors import AuthenticationError, InsufficientScopeError
from schemas.models.access_token import AccessTokenDoc
from services.token_binding import RequestTokenBinding
from services.token_manager import TokenManager
from shared.credentials import extract_bearer_token
from shared.logging import get_logger

log = get_logger(__name__)


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


async def get_token_binding(request: Request) -> AsyncIterator[RequestTokenBinding]:
    """Return this request's binding, creating it on first use."""
    binding = getattr(request.state, "token_binding", None)
    if binding is None:
        binding = RequestTokenBinding()
        request.state.token_binding = binding
    try:
        yield binding
    finally:
        structlog.contextvars.unbind_contextvars("token_id", "owner_id")


async def authenticate_request(
    request: Request,
    manager: TokenManager = Depends(get_token_manager),
    binding: RequestTokenBinding = Depends(get_token_binding),
) -> RequestTokenBinding:
    """Authenticate the bearer credential and bind its token to the request.

    Raises 401 when no credential is presented or it does not authenticate.
    """
    if binding.is_bound:
        return binding

    credential = extract_bearer_token(request.headers.get("Authorization"))
    if credential is None:
        raise AuthenticationError("missing bearer token")

    token = await manager.authenticate(credential)
    binding.bind(token)
    return binding


async def get_current_token(
    binding: RequestTokenBinding = Depends(authenticate_request),
) -> AccessTokenDoc:
    return binding.current()  # type: ignore[return-value]


def require_scope(scope: str) -> Callable[..., Awaitable[AccessTokenDoc]]:
    """Dependency factory: authenticate, then demand *scope* on the bound token.

    Example:
        >>> @router.post("/deploy", dependencies=[Depends(require_scope("deploy"))])
    """

    async def _require_scope(
        binding: RequestTokenBinding = Depends(authenticate_request),
    ) -> AccessTokenDoc:
        if binding.cant(scope):
            token = binding.current()
            log.warning(
                "token_scope_denied",
                token_id=token.id if token else None,
                required_scope=scope,
            )
            raise InsufficientScopeError(f"token lacks the '{scope}' scope")
        return binding.current()  # type: ignore[return-value]

    return _require_scope


async def get_owner_id(
    request: Request,
    binding: RequestTokenBinding = Depends(get_token_binding),
) -> str:
    """Resolve the owner whose tokens the request manages."""
    provider = request.app.state.identity_provider
    owner_id = await provider.resolve_owner(request, binding)
    if not owner_id:
        raise AuthenticationError("authentication required")
    return owner_id
