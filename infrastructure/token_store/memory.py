"""In-process TokenStore.

Used when no MONGODB_URI is configured and throughout the tests. Mutations
take a single asyncio.Lock, so revoke-all cannot interleave with a create for
the same owner. Reads are lock-free snapshots of the dict.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from errors import DuplicateTokenIdError
from schemas.models.access_token import AccessTokenDoc


class InMemoryTokenStore:
    def __init__(self) -> None:
        # dicts keep insertion order, which is creation order here
        self._tokens: dict[str, AccessTokenDoc] = {}
        self._lock = asyncio.Lock()

    async def create(self, token: AccessTokenDoc) -> None:
        async with self._lock:
            if token.id in self._tokens:
                raise DuplicateTokenIdError("token id already exists")
            self._tokens[token.id] = token

    async def find_by_id(self, token_id: str) -> Optional[AccessTokenDoc]:
        return self._tokens.get(token_id)

    async def find_by_owner_and_id(
        self, owner_id: str, token_id: str
    ) -> Optional[AccessTokenDoc]:
        token = self._tokens.get(token_id)
        if token is None or token.owner_id != owner_id:
            return None
        return token

    async def list_by_owner(self, owner_id: str) -> list[AccessTokenDoc]:
        tokens = [t for t in list(self._tokens.values()) if t.owner_id == owner_id]
        return sorted(tokens, key=lambda t: t.created_at)

    async def count_by_owner(self, owner_id: str) -> int:
        return sum(1 for t in list(self._tokens.values()) if t.owner_id == owner_id)

    async def delete_by_id(self, token_id: str) -> bool:
        async with self._lock:
            return self._tokens.pop(token_id, None) is not None

    async def delete_all_by_owner(self, owner_id: str) -> int:
        async with self._lock:
            doomed = [tid for tid, t in self._tokens.items() if t.owner_id == owner_id]
            for tid in doomed:
                del self._tokens[tid]
            return len(doomed)

    async def update_name(
        self, owner_id: str, token_id: str, name: str
    ) -> Optional[AccessTokenDoc]:
        async with self._lock:
            token = self._tokens.get(token_id)
            if token is None or token.owner_id != owner_id:
                return None
            renamed = token.model_copy(update={"name": name})
            self._tokens[token_id] = renamed
            return renamed

    async def touch_last_used(self, token_id: str, used_at: datetime) -> None:
        async with self._lock:
            token = self._tokens.get(token_id)
            # A revoke that won the race stays revoked
            if token is not None:
                self._tokens[token_id] = token.model_copy(
                    update={"last_used_at": used_at}
                )

    async def ping(self) -> bool:
        return True
