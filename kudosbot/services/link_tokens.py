"""One-time tokens that carry a Discord user through the Strava consent page."""

from __future__ import annotations

import logging
import secrets
import string
import time
from collections import OrderedDict
from typing import Callable, NamedTuple, Optional

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_letters + string.digits


class LinkTokenInvalidError(Exception):
    """Raised when a callback presents a state that was never issued or is spent."""


class _PendingLink(NamedTuple):
    chat_user_id: str
    issued_at: float


class LinkTokenBroker:
    """Process-local, bounded mapping of link token to Discord user id.

    Tokens are single use. Entries older than ``ttl_seconds`` are treated as
    absent, and once ``capacity`` outstanding tokens exist the oldest is
    evicted to make room.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = 900,
        capacity: int = 1024,
        token_length: int = 32,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if token_length < 20:
            raise ValueError("link tokens must be at least 20 characters")
        if ttl_seconds < 1 or capacity < 1:
            raise ValueError("link token ttl and capacity must be positive")
        self._ttl = ttl_seconds
        self._capacity = capacity
        self._token_length = token_length
        self._clock = clock
        self._pending: "OrderedDict[str, _PendingLink]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._pending)

    def _purge_expired(self) -> None:
        cutoff = self._clock() - self._ttl
        while self._pending:
            token, pending = next(iter(self._pending.items()))
            if pending.issued_at >= cutoff:
                break
            del self._pending[token]

    def mint(self, chat_user_id: str) -> str:
        """Issue a fresh token for ``chat_user_id``."""
        self._purge_expired()
        while len(self._pending) >= self._capacity:
            self._pending.popitem(last=False)
        token = "".join(secrets.choice(_ALPHABET) for _ in range(self._token_length))
        self._pending[token] = _PendingLink(str(chat_user_id), self._clock())
        return token

    def consume(self, token: str) -> Optional[str]:
        """Return the Discord user id for ``token`` and forget it."""
        self._purge_expired()
        pending = self._pending.pop(token, None)
        if pending is None:
            logger.info("Link token not found or expired")
            return None
        return pending.chat_user_id

    def redeem(self, token: str) -> str:
        """Like :meth:`consume`, but a missing token is an error."""
        chat_user_id = self.consume(token)
        if chat_user_id is None:
            raise LinkTokenInvalidError("Invalid token")
        return chat_user_id


__all__ = ["LinkTokenBroker", "LinkTokenInvalidError"]
