"""TokenStore protocol: the token manager depends on this, not on a concrete store.

Contract:
- create() fails rather than overwrite an existing id.
- delete_all_by_owner() is all-or-nothing: after it returns, no token that
  existed for the owner when it started is still stored.
- Deletes are visible to every lookup that starts after they return. A
  lookup already in flight may still see the pre-delete state.
- Failures of the backing storage raise StoreUnavailableError.
"""

from datetime import datetime
from typing import Optional, Protocol

from schemas.models.access_token import AccessTokenDoc


class TokenStore(Protocol):
    async def create(self, token: AccessTokenDoc) -> None: ...

    async def find_by_id(self, token_id: str) -> Optional[AccessTokenDoc]: ...

    async def find_by_owner_and_id(
        self, owner_id: str, token_id: str
    ) -> Optional[AccessTokenDoc]: ...

    async def list_by_owner(self, owner_id: str) -> list[AccessTokenDoc]: ...

    async def count_by_owner(self, owner_id: str) -> int: ...

    async def delete_by_id(self, token_id: str) -> bool: ...

    async def delete_all_by_owner(self, owner_id: str) -> int: ...

    async def update_name(
        self, owner_id: str, token_id: str, name: str
    ) -> Optional[AccessTokenDoc]: ...

    async def touch_last_used(self, token_id: str, used_at: datetime) -> None: ...

    async def ping(self) -> bool: ...
