"""
Personal access token management endpoints.

POST   /tokens              — issue a token; the raw credential is returned once
GET    /tokens              — list the owner's tokens
GET    /tokens/current      — the token that authenticated this request
GET    /tokens/{token_id}   — one of the owner's tokens
PATCH  /tokens/{token_id}   — rename
DELETE /tokens/{token_id}   — revoke one token (hard delete)
DELETE /tokens              — revoke every token of the owner

The owner is resolved by the app's IdentityProvider. Tokens belonging to a
different owner behave exactly like tokens that do not exist (404).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_current_token, get_owner_id, get_token_manager
from errors import TokenNotFoundError
from schemas.dto.requests.access_token import (
    CreateAccessTokenRequest,
    RenameAccessTokenRequest,
)
from schemas.dto.responses.access_token import (
    AccessTokenActionResponse,
    AccessTokenCreatedResponse,
    AccessTokenResponse,
    AccessTokensListResponse,
)
from schemas.models.access_token import AccessTokenDoc
from services.token_manager import TokenManager

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.post("", status_code=201, response_model=AccessTokenCreatedResponse)
async def create_token(
    body: CreateAccessTokenRequest,
    owner_id: str = Depends(get_owner_id),
    manager: TokenManager = Depends(get_token_manager),
) -> AccessTokenCreatedResponse:
    """
    Issue a new personal access token.

    The response ``token`` field holds the raw credential (``<id>.<secret>``).
    It is shown ONLY here; the service stores an HMAC of the secret and cannot
    return it again. Send it as ``Authorization: Bearer <token>``.
    """
    issued = await manager.generate(owner_id, body.name, body.scopes)
    return AccessTokenCreatedResponse.from_issued(issued.token, issued.raw_credential)


@router.get("", response_model=AccessTokensListResponse)
async def list_tokens(
    owner_id: str = Depends(get_owner_id),
    manager: TokenManager = Depends(get_token_manager),
) -> AccessTokensListResponse:
    tokens = await manager.list_tokens(owner_id)
    return AccessTokensListResponse(
        tokens=[AccessTokenResponse.from_doc(t) for t in tokens]
    )


@router.get("/current", response_model=AccessTokenResponse)
async def current_token(
    token: AccessTokenDoc = Depends(get_current_token),
) -> AccessTokenResponse:
    return AccessTokenResponse.from_doc(token)


@router.get("/{token_id}", response_model=AccessTokenResponse)
async def get_token(
    token_id: str,
    owner_id: str = Depends(get_owner_id),
    manager: TokenManager = Depends(get_token_manager),
) -> AccessTokenResponse:
    token = await manager.find_by_id(token_id, owner_id)
    if token is None:
        raise TokenNotFoundError("token not found")
    return AccessTokenResponse.from_doc(token)


@router.patch("/{token_id}", response_model=AccessTokenResponse)
async def rename_token(
    token_id: str,
    body: RenameAccessTokenRequest,
    owner_id: str = Depends(get_owner_id),
    manager: TokenManager = Depends(get_token_manager),
) -> AccessTokenResponse:
    token = await manager.rename(owner_id, token_id, body.name)
    return AccessTokenResponse.from_doc(token)


@router.delete("/{token_id}", response_model=AccessTokenActionResponse)
async def revoke_token(
    token_id: str,
    owner_id: str = Depends(get_owner_id),
    manager: TokenManager = Depends(get_token_manager),
) -> AccessTokenActionResponse:
    """
    Revoke one token. The token stops authenticating immediately.

    Revocation is a hard delete; there is no restore.
    """
    await manager.revoke(owner_id, token_id)
    return AccessTokenActionResponse(success=True, action="revoked")


@router.delete("", response_model=AccessTokenActionResponse)
async def revoke_all_tokens(
    owner_id: str = Depends(get_owner_id),
    manager: TokenManager = Depends(get_token_manager),
) -> AccessTokenActionResponse:
    """
    Revoke every token of the owner, including the one used for this call.
    """
    count = await manager.revoke_all(owner_id)
    return AccessTokenActionResponse(success=True, action="revoked_all", count=count)
