"""
Unit test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during unit tests, and clears the token/database variables a developer shell
may export. Tests control config exclusively through monkeypatch.setenv().
"""

import pytest

_ISOLATED_ENV = (
    "SECRET_KEY",
    "TOKEN_HMAC_KEY",
    "TOKEN_ID_PREFIX",
    "TOKEN_UNUSED_LIFETIME_SECONDS",
    "TOKEN_MAX_PER_OWNER",
    "MONGODB_URI",
    "MONGODB_TRANSACTIONS",
)


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all unit tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
