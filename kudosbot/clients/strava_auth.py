"""
Strava OAuth utilities.

These helpers build the consent URL and talk to the Strava token endpoints.
Token persistence and the refresh-on-401 policy live in
``kudosbot.services.strava_tokens``.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx

from fastapi import status

from kudosbot.core.config import StravaSettings
from kudosbot.schemas.strava import StravaTokenPayload


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint rejects an authorization code."""

    def __init__(self, body: str) -> None:
        super().__init__(body)
        self.body = body


class OAuthTokenRefreshError(Exception):
    """Raised when a stored refresh token cannot be exchanged for a new pair."""


class StravaOAuthClient:
    """Build Strava authorization URLs and exchange codes for tokens."""

    AUTH_BASE_URL = "https://www.strava.com/oauth/authorize"
    EXCHANGE_URL = "https://www.strava.com/api/v3/oauth/token"
    TOKEN_URL = "https://www.strava.com/oauth/token"
    DEAUTHORIZE_URL = "https://www.strava.com/oauth/deauthorize"

    def __init__(
        self,
        strava_settings: StravaSettings,
        redirect_uri: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._strava = strava_settings
        self._redirect_uri = redirect_uri
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=10.0, transport=self._transport)

    def build_authorization_url(self, state: str) -> str:
        """Construct the Strava consent URL carrying ``state`` back to us."""
        params = {
            "client_id": self._strava.client_id,
            "response_type": "code",
            "redirect_uri": self._redirect_uri,
            "approval_prompt": "auto",
            "scope": ",".join(self._strava.scopes),
            "state": state,
        }
        query = urlencode(params, safe=":,/")
        return f"{self.AUTH_BASE_URL}?{query}"

    async def exchange_authorization_code(self, code: str) -> StravaTokenPayload:
        """Exchange an authorization code for a token pair and athlete summary."""
        payload = {
            "client_id": self._strava.client_id,
            "client_secret": self._strava.client_secret,
            "code": code,
            "grant_type": "authorization_code",
        }

        async with self._client() as client:
            response = await client.post(
                self.EXCHANGE_URL,
                data=payload,
                headers={"Accept": "application/json"},
            )

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenExchangeError(response.text)

        token_payload = StravaTokenPayload.model_validate(response.json())
        if token_payload.athlete is None:
            raise OAuthTokenExchangeError("Token payload did not include the athlete.")
        return token_payload

    async def refresh_token(self, refresh_token: str) -> StravaTokenPayload:
        """Mint a new token pair from a refresh token."""
        payload = {
            "grant_type": "refresh_token",
            "client_id": self._strava.client_id,
            "client_secret": self._strava.client_secret,
            "refresh_token": refresh_token,
        }

        async with self._client() as client:
            response = await client.post(self.TOKEN_URL, data=payload)

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenRefreshError(f"Failed to refresh token: {response.text}")

        return StravaTokenPayload.model_validate(response.json())

    async def send(
        self, method: str, url: str, *, access_token: str | None, **kwargs
    ) -> httpx.Response:
        """Issue one request to the Strava API with a bearer credential."""
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {access_token}"
        async with self._client() as client:
            return await client.request(method, url, headers=headers, **kwargs)


__all__ = [
    "OAuthTokenExchangeError",
    "OAuthTokenRefreshError",
    "StravaOAuthClient",
]
