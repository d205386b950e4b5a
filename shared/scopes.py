"""
Scope matching. Pure functions, no I/O.

A token grants a list of scope strings. A requested scope is allowed when:
- the token holds the universal scope ``*``
- a granted scope equals the requested one exactly
- a granted scope ends in ``*`` and the requested scope starts with the
  text before it (``posts.*`` covers ``posts.write``)

Anything else, including an empty or non-string request, is denied. These
functions never raise so they can sit directly in authorization checks.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from errors import ValidationError

UNIVERSAL_SCOPE = "*"
WILDCARD_SUFFIX = "*"


def _granted_covers(granted: str, requested: str) -> bool:
    if granted == requested:
        return True
    if granted.endswith(WILDCARD_SUFFIX):
        return requested.startswith(granted[: -len(WILDCARD_SUFFIX)])
    return False


def scope_matches(granted_scopes: Iterable[Any], requested: Any) -> bool:
    """Return ``True`` if *requested* is covered by *granted_scopes*."""
    if not isinstance(requested, str) or not requested:
        return False

    granted = [s for s in granted_scopes if isinstance(s, str) and s]
    if UNIVERSAL_SCOPE in granted:
        return True
    return any(_granted_covers(scope, requested) for scope in granted)


def scope_denies(granted_scopes: Iterable[Any], requested: Any) -> bool:
    """Strict negation of :func:`scope_matches`."""
    return not scope_matches(granted_scopes, requested)


def normalize_scopes(scopes: Optional[Iterable[str]]) -> list[str]:
    """Clean a scope list for issuance.

    - ``None`` or an empty list becomes ``["*"]``
    - entries are stripped; empty entries are rejected
    - duplicates are dropped, first occurrence wins

    Raises:
        ValidationError: a scope is not a string or is blank.
    """
    if scopes is None:
        return [UNIVERSAL_SCOPE]
    if isinstance(scopes, str):
        raise ValidationError("scopes must be a list of strings", field="scopes")

    result: list[str] = []
    for scope in scopes:
        if not isinstance(scope, str):
            raise ValidationError("scopes must be a list of strings", field="scopes")
        scope = scope.strip()
        if not scope:
            raise ValidationError("scopes must not contain empty entries", field="scopes")
        if scope not in result:
            result.append(scope)

    return result or [UNIVERSAL_SCOPE]
