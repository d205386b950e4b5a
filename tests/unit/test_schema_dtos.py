"""Unit tests for request/response DTOs."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from schemas.dto.requests.access_token import (
    CreateAccessTokenRequest,
    RenameAccessTokenRequest,
)
from schemas.dto.responses.access_token import (
    AccessTokenActionResponse,
    AccessTokenCreatedResponse,
    AccessTokenResponse,
)
from schemas.models.access_token import AccessTokenDoc


def _doc(**overrides) -> AccessTokenDoc:
    base = dict(
        id="tok_abc",
        owner_id="u1",
        name="ci-bot",
        scopes=("deploy",),
        secret_hash="cd" * 32,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    base.update(overrides)
    return AccessTokenDoc(**base)


# ── Requests ──────────────────────────────────────────────────────────────────


class TestCreateAccessTokenRequest:
    def test_minimal(self):
        req = CreateAccessTokenRequest(name="ci-bot")
        assert req.name == "ci-bot"
        assert req.scopes is None

    def test_name_trimmed(self):
        assert CreateAccessTokenRequest(name="  ci  ").name == "ci"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 121])
    def test_bad_name(self, name):
        with pytest.raises(PydanticValidationError):
            CreateAccessTokenRequest(name=name)

    def test_scopes_normalised(self):
        req = CreateAccessTokenRequest(name="n", scopes=[" a ", "a", "b"])
        assert req.scopes == ["a", "b"]

    def test_empty_scope_list_becomes_universal(self):
        assert CreateAccessTokenRequest(name="n", scopes=[]).scopes == ["*"]

    def test_blank_scope_rejected(self):
        with pytest.raises(PydanticValidationError):
            CreateAccessTokenRequest(name="n", scopes=["ok", " "])


def test_rename_request_requires_name():
    with pytest.raises(PydanticValidationError):
        RenameAccessTokenRequest(name=" ")


# ── Responses ─────────────────────────────────────────────────────────────────


class TestAccessTokenResponse:
    def test_from_doc(self):
        resp = AccessTokenResponse.from_doc(_doc())
        assert resp.id == "tok_abc"
        assert resp.scopes == ["deploy"]
        assert resp.created_at == int(datetime(2026, 1, 1, tzinfo=timezone.utc).timestamp())
        assert resp.last_used_at is None

    def test_never_exposes_hash(self):
        dumped = AccessTokenResponse.from_doc(_doc()).model_dump()
        assert "secret_hash" not in dumped
        assert "cd" * 32 not in str(dumped)


def test_created_response_carries_token():
    resp = AccessTokenCreatedResponse.from_issued(_doc(), "tok_abc.secret")
    assert resp.token == "tok_abc.secret"
    assert resp.name == "ci-bot"


def test_action_response_default_count():
    assert AccessTokenActionResponse(success=True, action="revoked").count == 1
