"""
Unit tests for the shared/ utility modules.

Covers:
- shared.generators   (generate_secure_token, SecretGenerator)
- shared.crypto       (hash_token, TokenHasher)
- shared.scopes       (scope_matches, scope_denies, normalize_scopes)
- shared.credentials  (format/parse_credential, extract_token_id,
                       extract_bearer_token)
- shared.datetime_utils (ensure_utc, to_timestamp)
"""

from __future__ import annotations

import hashlib
import hmac
import re
from datetime import datetime, timedelta, timezone

import pytest

from errors import GenerationFailureError, MalformedCredentialError, ValidationError
from shared.credentials import (
    CREDENTIAL_SEPARATOR,
    extract_bearer_token,
    extract_token_id,
    format_credential,
    parse_credential,
)
from shared.crypto import TokenHasher, hash_token
from shared.datetime_utils import ensure_utc, to_timestamp
from shared.generators import SecretGenerator, generate_secure_token
from shared.scopes import normalize_scopes, scope_denies, scope_matches

_URLSAFE = re.compile(r"[A-Za-z0-9_\-]+")


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


class TestGenerateSecureToken:
    def test_url_safe_characters(self):
        assert _URLSAFE.fullmatch(generate_secure_token())

    def test_produces_variety(self):
        assert len({generate_secure_token() for _ in range(10)}) == 10

    def test_entropy_failure_raises(self, mocker):
        mocker.patch(
            "shared.generators.secrets.token_urlsafe",
            side_effect=NotImplementedError("no urandom"),
        )
        with pytest.raises(GenerationFailureError):
            generate_secure_token()


class TestSecretGenerator:
    def test_id_has_prefix(self):
        assert SecretGenerator().new_token_id().startswith("tok_")

    def test_custom_prefix(self):
        assert SecretGenerator(id_prefix="pat_").new_token_id().startswith("pat_")

    def test_secret_carries_256_bits(self):
        # 32 bytes -> 43 base64 characters without padding
        assert len(SecretGenerator().new_secret()) >= 43

    def test_components_never_contain_separator(self):
        gen = SecretGenerator()
        for _ in range(20):
            assert CREDENTIAL_SEPARATOR not in gen.new_token_id()
            assert CREDENTIAL_SEPARATOR not in gen.new_secret()

    def test_ids_unique(self):
        gen = SecretGenerator()
        assert len({gen.new_token_id() for _ in range(50)}) == 50

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"id_bytes": 4},
            {"secret_bytes": 16},
            {"id_prefix": "a.b"},
            {"id_prefix": "pat:"},
            {"id_prefix": "ghp/"},
            {"id_prefix": "my tok_"},
        ],
        ids=[
            "short_id",
            "short_secret",
            "dotted_prefix",
            "colon_prefix",
            "slash_prefix",
            "spaced_prefix",
        ],
    )
    def test_rejects_weak_configuration(self, kwargs):
        with pytest.raises(ValueError):
            SecretGenerator(**kwargs)


# ---------------------------------------------------------------------------
# shared.crypto
# ---------------------------------------------------------------------------


def test_hash_token_is_hex64():
    h = hash_token("secret", b"key")
    assert len(h) == 64
    assert all(c in "0123456789abcdef" for c in h)


def test_hash_token_known_value():
    expected = hmac.new(b"key", b"test", hashlib.sha256).hexdigest()
    assert hash_token("test", b"key") == expected


def test_hash_token_depends_on_key():
    assert hash_token("test", b"key-a") != hash_token("test", b"key-b")


class TestTokenHasher:
    def test_hash_is_not_the_secret(self):
        assert TokenHasher("k").hash("s3cret") != "s3cret"

    def test_hash_deterministic(self):
        hasher = TokenHasher("k")
        assert hasher.hash("abc") == hasher.hash("abc")

    @pytest.mark.parametrize(
        "candidate, expected",
        [("correct", True), ("wrong", False), ("correct ", False), ("", False)],
        ids=["correct", "wrong", "trailing_space", "empty"],
    )
    def test_verify(self, candidate, expected):
        hasher = TokenHasher("k")
        assert hasher.verify(candidate, hasher.hash("correct")) is expected

    def test_verify_uses_compare_digest(self, mocker):
        spy = mocker.spy(hmac, "compare_digest")
        hasher = TokenHasher("k")
        hasher.verify("abc", hasher.hash("abc"))
        spy.assert_called_once()

    @pytest.mark.parametrize("bad", [None, 123, b"bytes"], ids=["none", "int", "bytes"])
    def test_verify_non_string_fails_closed(self, bad):
        hasher = TokenHasher("k")
        assert hasher.verify(bad, hasher.hash("abc")) is False

    def test_verify_non_ascii_hash_fails_closed(self):
        assert TokenHasher("k").verify("abc", "ünicode") is False

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            TokenHasher("")


# ---------------------------------------------------------------------------
# shared.scopes
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "granted, requested, expected",
    [
        (["*"], "anything", True),
        (["*"], "posts.write", True),
        (["posts.read"], "posts.read", True),
        (["posts.read"], "posts.write", False),
        (["posts.*"], "posts.write", True),
        (["posts.*"], "comments.read", False),
        (["posts.*"], "posts", False),
        (["deploy", "admin"], "admin", True),
        (["posts.read"], "POSTS.READ", False),
        (["p[a]ths?"], "p[a]ths?", True),
        (["p[a]ths?"], "paths", False),
    ],
    ids=[
        "universal",
        "universal_dotted",
        "exact",
        "exact_other",
        "prefix_wildcard",
        "prefix_wildcard_other",
        "prefix_without_dot",
        "second_scope",
        "case_sensitive",
        "odd_syntax_is_literal",
        "odd_syntax_no_regex",
    ],
)
def test_scope_matches(granted, requested, expected):
    assert scope_matches(granted, requested) is expected


@pytest.mark.parametrize("requested", ["", None, 42, ["posts.read"]])
def test_scope_matches_bad_request_fails_closed(requested):
    assert scope_matches(["*"], requested) is False


def test_scope_matches_ignores_junk_grants():
    assert scope_matches([None, "", 5, "posts.read"], "posts.read") is True
    assert scope_matches([None, ""], "posts.read") is False


@pytest.mark.parametrize(
    "granted, requested",
    [(["*"], "x"), (["a"], "b"), ([], "a"), (["a.*"], "a.b"), (["a"], "")],
)
def test_scope_denies_is_negation(granted, requested):
    assert scope_denies(granted, requested) is (not scope_matches(granted, requested))


class TestNormalizeScopes:
    @pytest.mark.parametrize("value", [None, []], ids=["none", "empty"])
    def test_defaults_to_universal(self, value):
        assert normalize_scopes(value) == ["*"]

    def test_strips_and_dedupes_preserving_order(self):
        assert normalize_scopes([" b ", "a", "b"]) == ["b", "a"]

    @pytest.mark.parametrize(
        "value", [["ok", ""], ["  "], ["ok", 3], "posts.read"],
        ids=["empty_entry", "blank_entry", "non_string", "bare_string"],
    )
    def test_rejects_bad_entries(self, value):
        with pytest.raises(ValidationError):
            normalize_scopes(value)


# ---------------------------------------------------------------------------
# shared.credentials
# ---------------------------------------------------------------------------


class TestParseCredential:
    def test_round_trip(self):
        raw = format_credential("tok_abc123", "sEcr3t-_x")
        parsed = parse_credential(raw)
        assert parsed.token_id == "tok_abc123"
        assert parsed.secret == "sEcr3t-_x"

    @pytest.mark.parametrize(
        "raw",
        [
            "no-separator",
            ".secret",
            "tok_abc.",
            "tok_abc.sec.ret",
            "tok abc.secret",
            "tok_abc.secret\n",
            "",
            None,
            12,
        ],
        ids=[
            "missing_separator",
            "empty_id",
            "empty_secret",
            "second_separator",
            "space_in_id",
            "trailing_newline",
            "empty",
            "none",
            "int",
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedCredentialError):
            parse_credential(raw)


class TestExtractTokenId:
    def test_from_credential(self):
        assert extract_token_id("tok_abc.secret") == "tok_abc"

    def test_from_bare_id(self):
        assert extract_token_id("tok_abc") == "tok_abc"

    @pytest.mark.parametrize("value", ["", "tok abc", None])
    def test_malformed(self, value):
        with pytest.raises(MalformedCredentialError):
            extract_token_id(value)


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer tok_a.sec", "tok_a.sec"),
        ("bearer   tok_a.sec  ", "tok_a.sec"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer", None),
        ("Bearer   ", None),
        ("", None),
        (None, None),
    ],
    ids=["bearer", "lowercase_padded", "basic", "no_value", "blank_value", "empty", "none"],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


# ---------------------------------------------------------------------------
# shared.datetime_utils
# ---------------------------------------------------------------------------


def test_ensure_utc_naive_assumed_utc():
    assert ensure_utc(datetime(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_ensure_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    result = ensure_utc(datetime(2026, 1, 1, 14, tzinfo=plus_two))
    assert result == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
    assert result.tzinfo == timezone.utc


def test_to_timestamp():
    assert to_timestamp(None) is None
    assert to_timestamp(datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)) == 60
