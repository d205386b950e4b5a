"""
Response DTOs for token management endpoints.

AccessTokenResponse        — one token entry (list, lookup, rename, current)
AccessTokenCreatedResponse — POST /tokens (201), includes ``token`` once
AccessTokensListResponse   — GET /tokens (200)
AccessTokenActionResponse  — DELETE /tokens and DELETE /tokens/{token_id} (200)

``created_at`` and ``last_used_at`` are Unix timestamp integers. The secret
hash is never part of any response.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.models.access_token import AccessTokenDoc
from shared.datetime_utils import to_timestamp


class AccessTokenResponse(BaseModel):
    """A single token as returned by list/lookup endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    scopes: list[str]
    created_at: Optional[int] = None  # Unix timestamp
    last_used_at: Optional[int] = None  # Unix timestamp or null

    @classmethod
    def from_doc(cls, doc: AccessTokenDoc) -> "AccessTokenResponse":
        return cls(
            id=doc.id,
            name=doc.name,
            scopes=list(doc.scopes),
            created_at=to_timestamp(doc.created_at),
            last_used_at=to_timestamp(doc.last_used_at),
        )


class AccessTokenCreatedResponse(AccessTokenResponse):
    """Response for POST /tokens (201).

    Extends AccessTokenResponse by adding the raw ``token`` credential. This
    is the ONLY time it is returned.
    """

    token: str

    @classmethod
    def from_issued(cls, doc: AccessTokenDoc, raw_credential: str) -> "AccessTokenCreatedResponse":
        base = AccessTokenResponse.from_doc(doc)
        return cls(**base.model_dump(), token=raw_credential)


class AccessTokensListResponse(BaseModel):
    """Response body for GET /tokens."""

    model_config = ConfigDict(populate_by_name=True)

    tokens: list[AccessTokenResponse]


class AccessTokenActionResponse(BaseModel):
    """Response body for the revoke endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    action: str  # "revoked" or "revoked_all"
    count: int = 1
