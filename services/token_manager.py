"""
Token lifecycle: issuance, authentication, revocation, lookup.

TokenManager composes a SecretGenerator, a TokenHasher and a TokenStore.
The raw credential (``<id>.<secret>``) exists only in the value returned by
generate(); neither the secret nor its hash is ever logged.

Authentication failures are reported to callers as one kind,
InvalidCredentialError, whether the id is unknown or the secret is wrong.
The distinguishing reason only goes to the log.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, NoReturn, Optional

from errors import (
    DuplicateTokenIdError,
    GenerationFailureError,
    InvalidCredentialError,
    StoreUnavailableError,
    TokenNotFoundError,
    ValidationError,
)
from infrastructure.token_store.protocol import TokenStore
from schemas.models.access_token import AccessTokenDoc
from shared.credentials import (
    CREDENTIAL_SEPARATOR,
    extract_token_id,
    format_credential,
    parse_credential,
)
from shared.crypto import TokenHasher
from shared.datetime_utils import utc_now
from shared.generators import SecretGenerator
from shared.logging import get_logger, should_sample
from shared.scopes import normalize_scopes

log = get_logger(__name__)

MAX_NAME_LENGTH = 120

# With an unused-token lifetime, last_used_at may lag real use by at most
# lifetime / LAST_USED_LIFETIME_FRACTION
LAST_USED_LIFETIME_FRACTION = 10


@dataclass(frozen=True)
class IssuedToken:
    """Result of generate(): the stored token plus the one-time credential."""

    token: AccessTokenDoc
    raw_credential: str

    def __repr__(self) -> str:
        return f"IssuedToken(token={self.token!r}, raw_credential='***')"


def _clean_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required", field="name")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"name must be at most {MAX_NAME_LENGTH} characters", field="name"
        )
    return name


class TokenManager:
    def __init__(
        self,
        store: TokenStore,
        hasher: TokenHasher,
        generator: Optional[SecretGenerator] = None,
        *,
        last_used_update_interval: timedelta = timedelta(seconds=60),
        unused_token_lifetime: Optional[timedelta] = None,
        max_tokens_per_owner: int = 0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._generator = generator or SecretGenerator()
        if unused_token_lifetime is not None:
            last_used_update_interval = min(
                last_used_update_interval,
                unused_token_lifetime / LAST_USED_LIFETIME_FRACTION,
            )
        self._last_used_interval = last_used_update_interval
        self._unused_lifetime = unused_token_lifetime
        self._max_per_owner = max_tokens_per_owner
        self._clock = clock

    @property
    def store(self) -> TokenStore:
        return self._store

    # ── Issuance ─────────────────────────────────────────────────────────────

    async def generate(
        self,
        owner_id: str,
        name: str,
        scopes: Optional[Iterable[str]] = None,
    ) -> IssuedToken:
        """Issue a new token for *owner_id*.

        Scopes default to ``["*"]``. The returned ``raw_credential`` cannot be
        recovered later.

        Raises:
            ValidationError: bad name/scopes, or the owner is at the token cap.
            GenerationFailureError: randomness unavailable or id collision.
            StoreUnavailableError: the store rejected the write.
        """
        name = _clean_name(name)
        scopes = normalize_scopes(scopes)

        if self._max_per_owner:
            existing = await self._store.count_by_owner(owner_id)
            if existing >= self._max_per_owner:
                raise ValidationError(
                    f"maximum {self._max_per_owner} tokens allowed"
                )

        token_id = self._generator.new_token_id()
        secret = self._generator.new_secret()

        token = AccessTokenDoc(
            id=token_id,
            owner_id=owner_id,
            name=name,
            scopes=tuple(scopes),
            secret_hash=self._hasher.hash(secret),
            created_at=self._clock(),
        )

        try:
            await self._store.create(token)
        except DuplicateTokenIdError as e:
            log.error("token_issue_failed", owner_id=owner_id, reason="id_collision")
            raise GenerationFailureError("could not allocate a token id") from e

        # Concurrent issuance can pass the first check; undo if the cap was overrun
        if self._max_per_owner:
            if await self._store.count_by_owner(owner_id) > self._max_per_owner:
                await self._store.delete_by_id(token.id)
                log.warning(
                    "token_issue_failed",
                    owner_id=owner_id,
                    token_id=token.id,
                    reason="cap_exceeded_concurrently",
                )
                raise ValidationError(
                    f"maximum {self._max_per_owner} tokens allowed"
                )

        log.info(
            "token_issued",
            owner_id=owner_id,
            token_id=token.id,
            name=name,
            scopes=scopes,
        )
        return IssuedToken(token=token, raw_credential=format_credential(token_id, secret))

    # ── Authentication ───────────────────────────────────────────────────────

    async def authenticate(self, raw_credential: str) -> AccessTokenDoc:
        """Resolve a presented credential to its stored token.

        Raises:
            MalformedCredentialError: the credential cannot be parsed.
            InvalidCredentialError: unknown id, wrong secret, or unused too long.
            StoreUnavailableError: the lookup failed.
        """
        parsed = parse_credential(raw_credential)

        token = await self._store.find_by_id(parsed.token_id)
        if token is None:
            # Burn a hash so unknown ids cost the same as wrong secrets
            self._hasher.verify(parsed.secret, "0" * 64)
            self._reject(parsed.token_id, "not_found")

        if not self._hasher.verify(parsed.secret, token.secret_hash):
            self._reject(token.id, "secret_mismatch", owner_id=token.owner_id)

        now = self._clock()
        if self._unused_lifetime is not None and token.is_unused_for(
            self._unused_lifetime, now
        ):
            self._reject(token.id, "unused_expired", owner_id=token.owner_id)

        token = await self._record_use(token, now)

        if should_sample("token_authenticated"):
            log.info("token_authenticated", token_id=token.id, owner_id=token.owner_id)
        return token

    def _reject(self, token_id: str, reason: str, **context) -> NoReturn:
        log.warning(
            "token_authentication_failed", token_id=token_id, reason=reason, **context
        )
        raise InvalidCredentialError("invalid credential")

    async def _record_use(self, token: AccessTokenDoc, now: datetime) -> AccessTokenDoc:
        """Best-effort last_used_at bookkeeping, throttled by the update interval."""
        if (
            token.last_used_at is not None
            and now - token.last_used_at < self._last_used_interval
        ):
            return token
        try:
            await self._store.touch_last_used(token.id, now)
        except StoreUnavailableError:
            log.warning("token_last_used_update_failed", token_id=token.id)
            return token
        return token.model_copy(update={"last_used_at": now})

    # ── Revocation ───────────────────────────────────────────────────────────

    async def revoke(self, owner_id: str, credential_or_id: str) -> None:
        """Delete one of *owner_id*'s tokens, given its raw credential or id.

        A token owned by someone else is reported exactly like a missing one
        and is left untouched. When a full credential is given its secret
        must match; a wrong secret is also reported as not found.

        Raises:
            MalformedCredentialError: the argument is neither an id nor a credential.
            TokenNotFoundError: no such token for this owner.
        """
        token_id = extract_token_id(credential_or_id)

        token = await self._store.find_by_owner_and_id(owner_id, token_id)
        reason = "not_found_or_access_denied"
        if token is not None and CREDENTIAL_SEPARATOR in credential_or_id:
            secret = parse_credential(credential_or_id).secret
            if not self._hasher.verify(secret, token.secret_hash):
                token, reason = None, "secret_mismatch"

        if token is None or not await self._store.delete_by_id(token.id):
            log.warning(
                "token_revoke_failed",
                owner_id=owner_id,
                token_id=token_id,
                reason=reason,
            )
            raise TokenNotFoundError("token not found")

        log.info("token_revoked", owner_id=owner_id, token_id=token_id)

    async def revoke_all(self, owner_id: str) -> int:
        """Delete every token of *owner_id* in one atomic store operation."""
        deleted = await self._store.delete_all_by_owner(owner_id)
        log.info("tokens_revoked_all", owner_id=owner_id, count=deleted)
        return deleted

    # ── Lookup ───────────────────────────────────────────────────────────────

    async def list_tokens(self, owner_id: str) -> list[AccessTokenDoc]:
        """All live tokens of *owner_id*, oldest first."""
        return await self._store.list_by_owner(owner_id)

    async def find_by_id(self, token_id: str, owner_id: str) -> Optional[AccessTokenDoc]:
        return await self._store.find_by_owner_and_id(owner_id, token_id)

    async def rename(self, owner_id: str, token_id: str, name: str) -> AccessTokenDoc:
        name = _clean_name(name)
        token = await self._store.update_name(owner_id, token_id, name)
        if token is None:
            raise TokenNotFoundError("token not found")
        log.info("token_renamed", owner_id=owner_id, token_id=token_id, name=name)
        return token
