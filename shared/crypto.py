"""
Cryptographic helpers for token secret hashing and verification.

Secrets are hashed with HMAC-SHA256 under a server-side key, so a leaked
token table cannot be used to check guesses offline without the key. The
secrets themselves carry 256 bits of entropy, so no per-token salt is needed.
"""

from __future__ import annotations

import hashlib
import hmac


def hash_token(token: str, key: bytes) -> str:
    """Return the hex-encoded HMAC-SHA256 of *token* under *key*.

    Args:
        token: The plaintext secret to hash.
        key: Server-side HMAC key.

    Returns:
        64-character lowercase hex string.
    """
    return hmac.new(key, token.encode("utf-8"), hashlib.sha256).hexdigest()


class TokenHasher:
    """Derives the at-rest form of a token secret and checks presented ones."""

    def __init__(self, key: str | bytes) -> None:
        if isinstance(key, str):
            key = key.encode("utf-8")
        if not key:
            raise ValueError("TokenHasher requires a non-empty HMAC key")
        self._key = key

    def hash(self, secret: str) -> str:
        return hash_token(secret, self._key)

    def verify(self, secret: str, secret_hash: str) -> bool:
        """Check *secret* against a stored *secret_hash*.

        The comparison runs in constant time with respect to where the two
        digests differ. Anything that is not a string fails closed.
        """
        if not isinstance(secret, str) or not isinstance(secret_hash, str):
            return False
        candidate = self.hash(secret)
        return hmac.compare_digest(
            candidate.encode("ascii"), secret_hash.encode("ascii", "replace")
        )
