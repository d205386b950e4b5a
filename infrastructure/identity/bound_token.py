"""IdentityProvider that trusts a bearer token carrying the management scope.

Used when the host application does not supply its own provider: a client
holding a token with ``tokens:manage`` (or ``*``) can manage the tokens of
that token's owner.
"""

from typing import Optional

from fastapi import Request

from errors import InsufficientScopeError
from services.token_binding import RequestTokenBinding
from services.token_manager import TokenManager
from shared.credentials import extract_bearer_token
from shared.logging import get_logger

log = get_logger(__name__)

MANAGE_TOKENS_SCOPE = "tokens:manage"


class BoundTokenIdentityProvider:
    def __init__(self, manager: TokenManager, scope: str = MANAGE_TOKENS_SCOPE) -> None:
        self._manager = manager
        self._scope = scope

    async def resolve_owner(
        self, request: Request, binding: RequestTokenBinding
    ) -> Optional[str]:
        token = binding.current()
        if token is None:
            credential = extract_bearer_token(request.headers.get("Authorization"))
            if credential is None:
                return None
            token = await self._manager.authenticate(credential)
            binding.bind(token)

        if token.cant(self._scope):
            log.warning(
                "token_management_denied",
                token_id=token.id,
                owner_id=token.owner_id,
                required_scope=self._scope,
            )
            raise InsufficientScopeError(f"token lacks the '{self._scope}' scope")
        return token.owner_id
