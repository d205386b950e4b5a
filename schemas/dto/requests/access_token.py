"""
Request DTOs for token management endpoints.

CreateAccessTokenRequest — POST /tokens
RenameAccessTokenRequest — PATCH /tokens/{token_id}
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from errors import ValidationError as ScopeValidationError
from shared.scopes import normalize_scopes


class CreateAccessTokenRequest(BaseModel):
    """Request body for POST /tokens."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(max_length=120)
    # Omitted or empty means unrestricted ("*")
    scopes: Optional[list[str]] = None

    @field_validator("name", mode="after")
    @classmethod
    def _name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("scopes", mode="after")
    @classmethod
    def _clean_scopes(cls, v: Optional[list[str]]) -> list[str]:
        try:
            return normalize_scopes(v)
        except ScopeValidationError as e:
            raise ValueError(e.message) from e


class RenameAccessTokenRequest(BaseModel):
    """Request body for PATCH /tokens/{token_id}."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(max_length=120)

    @field_validator("name", mode="after")
    @classmethod
    def _name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v
