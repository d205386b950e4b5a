"""
Access token document model.

Maps to the `access-tokens` MongoDB collection.

secret_hash stores HMAC-SHA256(secret); the raw secret is shown once at
issuance and never stored. The model is frozen: scopes and secret never
change after creation, and the store returns a fresh instance when the name
or last_used_at is updated.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import Field, field_validator

from schemas.models.base import MongoBaseModel
from shared.datetime_utils import ensure_utc
from shared.scopes import UNIVERSAL_SCOPE, scope_denies, scope_matches


class AccessTokenDoc(MongoBaseModel):
    """Document model for the `access-tokens` collection."""

    owner_id: str
    name: str
    scopes: tuple[str, ...] = (UNIVERSAL_SCOPE,)
    secret_hash: str = Field(repr=False)
    created_at: datetime
    last_used_at: Optional[datetime] = None

    @field_validator("scopes", mode="after")
    @classmethod
    def _scopes_not_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("scopes must not be empty")
        return v

    @field_validator("created_at", "last_used_at", mode="after")
    @classmethod
    def _as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def to_mongo(self) -> dict:
        data = super().to_mongo()
        data["scopes"] = list(self.scopes)
        return data

    def can(self, scope: str) -> bool:
        """Whether this token grants *scope*."""
        return scope_matches(self.scopes, scope)

    def cant(self, scope: str) -> bool:
        return scope_denies(self.scopes, scope)

    def is_unused_for(self, lifetime: timedelta, now: datetime) -> bool:
        """True when the token has not been used (or created) within *lifetime*."""
        reference = self.last_used_at or self.created_at
        return reference + lifetime < now
