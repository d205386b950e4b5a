"""IdentityProvider protocol: resolves the owner managing tokens on a request.

Host applications plug in their own provider (e.g. session based). The owner
id is opaque to the token service.
"""

from typing import Optional, Protocol

from fastapi import Request

from services.token_binding import RequestTokenBinding


class IdentityProvider(Protocol):
    async def resolve_owner(
        self, request: Request, binding: RequestTokenBinding
    ) -> Optional[str]: ...
