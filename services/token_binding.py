"""
Per-request holder of the token that authenticated the request.

One RequestTokenBinding is created per request (stored on request.state) and
discarded with it, so it is never shared across concurrent requests.
Authorization checks fail closed while nothing is bound.
"""

from __future__ import annotations

from typing import Optional

import structlog

from errors import TokenBindingError
from schemas.models.access_token import AccessTokenDoc
from shared.logging import get_logger

log = get_logger(__name__)


class RequestTokenBinding:
    def __init__(self) -> None:
        self._token: Optional[AccessTokenDoc] = None

    def current(self) -> Optional[AccessTokenDoc]:
        return self._token

    @property
    def is_bound(self) -> bool:
        return self._token is not None

    def bind(self, token: AccessTokenDoc) -> None:
        """Attach *token* to this request.

        Binding the same token again is a no-op. Binding a different token
        raises TokenBindingError; the first binding stays in place.
        """
        if self._token is not None:
            if self._token.id == token.id:
                return
            log.error(
                "token_rebind_rejected",
                bound_token_id=self._token.id,
                attempted_token_id=token.id,
            )
            raise TokenBindingError("request is already bound to another token")

        self._token = token
        structlog.contextvars.bind_contextvars(
            token_id=token.id, owner_id=token.owner_id
        )

    def can(self, scope: str) -> bool:
        if self._token is None:
            return False
        return self._token.can(scope)

    def cant(self, scope: str) -> bool:
        if self._token is None:
            return True
        return self._token.cant(scope)
