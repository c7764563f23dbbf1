"""
Helpers for linking, refreshing, and using persisted Strava OAuth tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from fastapi import status

from kudosbot.clients.credential_store import CredentialStore
from kudosbot.clients.strava_auth import OAuthTokenRefreshError, StravaOAuthClient
from kudosbot.core.logging import redact_token

logger = logging.getLogger(__name__)


class StravaUnauthorizedError(Exception):
    """Raised when Strava still rejects the credential after any refresh."""


class AuthOutcome(str, Enum):
    OK = "ok"
    UNAUTHORIZED = "unauthorized"
    REFRESH_FAILED = "refresh_failed"


@dataclass
class AuthorizedResponse:
    """Result of an authenticated Strava call.

    ``response`` is set for ``OK`` and for ``UNAUTHORIZED`` (the final 401).
    """

    outcome: AuthOutcome
    response: Optional[httpx.Response] = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.outcome is AuthOutcome.OK

    def require(self) -> httpx.Response:
        """Return the response, raising if the call could not be authorized."""
        if self.outcome is AuthOutcome.REFRESH_FAILED:
            raise OAuthTokenRefreshError("Access token expired and refresh failed.")
        if self.outcome is AuthOutcome.UNAUTHORIZED or self.response is None:
            raise StravaUnauthorizedError("Strava rejected the stored credentials.")
        return self.response


@dataclass(frozen=True)
class LinkResult:
    athlete_id: str
    chat_user_id: str


class StravaTokenService:
    """Manages the credential lifecycle of linked Strava athletes."""

    def __init__(self, store: CredentialStore, oauth_client: StravaOAuthClient) -> None:
        self._store = store
        self._oauth = oauth_client

    async def complete_link(self, *, code: str, chat_user_id: str) -> LinkResult:
        """Exchange ``code`` and attach the athlete to ``chat_user_id``.

        A Discord user already linked to this athlete is kept; the result
        names whoever is linked after the merge.
        """
        token_payload = await self._oauth.exchange_authorization_code(code)
        athlete = token_payload.athlete
        athlete_id = str(athlete.id)

        existing = self._store.get(athlete_id)
        merged = existing.model_copy(
            update={
                "access_token": token_payload.access_token,
                "refresh_token": token_payload.refresh_token,
                "profile_image_url": athlete.profile or existing.profile_image_url,
                "chat_user_id": existing.chat_user_id or chat_user_id,
            }
        )
        self._store.upsert(athlete_id, merged)
        logger.info("Linked athlete %s to chat user %s", athlete_id, merged.chat_user_id)
        return LinkResult(athlete_id=athlete_id, chat_user_id=merged.chat_user_id)

    async def refresh(self, athlete_id: str) -> None:
        """Replace the stored token pair using the stored refresh token."""
        refresh_token = self._store.get(athlete_id).refresh_token
        logger.info("Refreshing token for athlete %s (%s)", athlete_id, redact_token(refresh_token))
        if not refresh_token:
            raise OAuthTokenRefreshError(f"No refresh token stored for athlete {athlete_id}.")

        try:
            token_payload = await self._oauth.refresh_token(refresh_token)
        except OAuthTokenRefreshError:
            logger.error(
                "Refresh rejected for athlete %s (%s)", athlete_id, redact_token(refresh_token)
            )
            raise

        current = self._store.get(athlete_id)
        self._store.upsert(
            athlete_id,
            current.model_copy(
                update={
                    "access_token": token_payload.access_token,
                    "refresh_token": token_payload.refresh_token,
                }
            ),
        )

    async def authorized_request(
        self,
        athlete_id: str,
        method: str,
        url: str,
        *,
        suppress_refresh: bool = False,
        **kwargs,
    ) -> AuthorizedResponse:
        """Call Strava as ``athlete_id``, refreshing once on a 401.

        Issues at most two requests and at most one refresh. With
        ``suppress_refresh`` a 401 is reported as ``UNAUTHORIZED`` right away.
        """
        response = await self._send(athlete_id, method, url, **kwargs)
        if response.status_code != status.HTTP_401_UNAUTHORIZED:
            return AuthorizedResponse(AuthOutcome.OK, response)
        if suppress_refresh:
            return AuthorizedResponse(AuthOutcome.UNAUTHORIZED, response)

        try:
            await self.refresh(athlete_id)
        except OAuthTokenRefreshError:
            return AuthorizedResponse(AuthOutcome.REFRESH_FAILED, attempts=1)

        response = await self._send(athlete_id, method, url, **kwargs)
        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            return AuthorizedResponse(AuthOutcome.UNAUTHORIZED, response, attempts=2)
        return AuthorizedResponse(AuthOutcome.OK, response, attempts=2)

    async def _send(self, athlete_id: str, method: str, url: str, **kwargs) -> httpx.Response:
        access_token = self._store.get(athlete_id).access_token
        return await self._oauth.send(method, url, access_token=access_token, **kwargs)

    async def deauthorize(self, athlete_id: str) -> bool:
        """Revoke the athlete's grant; never refreshes on a 401."""
        result = await self.authorized_request(
            athlete_id,
            "POST",
            StravaOAuthClient.DEAUTHORIZE_URL,
            suppress_refresh=True,
        )
        accepted = result.ok and result.response is not None and result.response.is_success
        if not accepted:
            logger.warning("Strava did not accept deauthorization for athlete %s", athlete_id)
        return accepted


__all__ = [
    "AuthOutcome",
    "AuthorizedResponse",
    "LinkResult",
    "StravaTokenService",
    "StravaUnauthorizedError",
]
