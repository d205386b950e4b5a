"""
Token id and secret generators.

Both values come from the operating system CSPRNG (``secrets``). If the
entropy source is unavailable the generator raises GenerationFailureError;
there is no fallback to a weaker source.
"""

from __future__ import annotations

import secrets

from errors import GenerationFailureError
from shared.credentials import is_valid_component

DEFAULT_ID_PREFIX = "tok_"
DEFAULT_ID_BYTES = 16
DEFAULT_SECRET_BYTES = 32

# Below these sizes collisions or brute force stop being negligible
MIN_ID_BYTES = 12
MIN_SECRET_BYTES = 32


def generate_secure_token(length: int = DEFAULT_SECRET_BYTES) -> str:
    """Generate a cryptographically secure URL-safe random token.

    Args:
        length: Number of random bytes before base64 encoding.
            The resulting string will be longer than *length* characters.

    Returns:
        URL-safe base64-encoded token string (alphabet ``A-Za-z0-9-_``).

    Raises:
        GenerationFailureError: the OS randomness source is unavailable.
    """
    try:
        return secrets.token_urlsafe(length)
    except (NotImplementedError, OSError) as e:
        raise GenerationFailureError("secure random source unavailable") from e


class SecretGenerator:
    """Produces token ids and secrets for issuance."""

    def __init__(
        self,
        id_prefix: str = DEFAULT_ID_PREFIX,
        id_bytes: int = DEFAULT_ID_BYTES,
        secret_bytes: int = DEFAULT_SECRET_BYTES,
    ) -> None:
        if id_bytes < MIN_ID_BYTES:
            raise ValueError(f"id_bytes must be at least {MIN_ID_BYTES}")
        if secret_bytes < MIN_SECRET_BYTES:
            raise ValueError(f"secret_bytes must be at least {MIN_SECRET_BYTES}")
        if id_prefix and not is_valid_component(id_prefix):
            raise ValueError("id_prefix may only contain A-Z, a-z, 0-9, '_' and '-'")
        self._id_prefix = id_prefix
        self._id_bytes = id_bytes
        self._secret_bytes = secret_bytes

    def new_token_id(self) -> str:
        return f"{self._id_prefix}{generate_secure_token(self._id_bytes)}"

    def new_secret(self) -> str:
        return generate_secure_token(self._secret_bytes)
