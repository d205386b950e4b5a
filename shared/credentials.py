"""
Raw credential format: ``<token_id>.<secret>``.

Both parts use the URL-safe base64 alphabet, which never contains the ``.``
separator, so the credential splits unambiguously on the first dot.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple, Optional

from errors import MalformedCredentialError

CREDENTIAL_SEPARATOR = "."

_COMPONENT_RE = re.compile(r"[A-Za-z0-9_-]+")


class ParsedCredential(NamedTuple):
    token_id: str
    secret: str


def format_credential(token_id: str, secret: str) -> str:
    return f"{token_id}{CREDENTIAL_SEPARATOR}{secret}"


def is_valid_component(value: Any) -> bool:
    return isinstance(value, str) and _COMPONENT_RE.fullmatch(value) is not None


def parse_credential(raw: Any) -> ParsedCredential:
    """Split a raw credential into its token id and secret.

    Raises:
        MalformedCredentialError: separator missing, either part empty, or a
            part contains characters outside the URL-safe alphabet.
    """
    if not isinstance(raw, str):
        raise MalformedCredentialError("credential must be a string")

    token_id, sep, secret = raw.partition(CREDENTIAL_SEPARATOR)
    if not sep:
        raise MalformedCredentialError("credential is missing its separator")
    if not is_valid_component(token_id) or not is_valid_component(secret):
        raise MalformedCredentialError("credential is malformed")
    return ParsedCredential(token_id, secret)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential from an ``Authorization: Bearer <credential>`` value."""
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def extract_token_id(credential_or_id: Any) -> str:
    """Return the token id from either a raw credential or a bare id.

    Raises:
        MalformedCredentialError: the value is neither a valid id nor a
            parseable credential.
    """
    if isinstance(credential_or_id, str) and CREDENTIAL_SEPARATOR in credential_or_id:
        return parse_credential(credential_or_id).token_id
    if not is_valid_component(credential_or_id):
        raise MalformedCredentialError("token id is malformed")
    return credential_or_id
