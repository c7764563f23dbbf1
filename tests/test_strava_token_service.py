try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest

from kudosbot.clients.credential_store import JsonCredentialStore
from kudosbot.clients.strava_auth import (
    OAuthTokenExchangeError,
    OAuthTokenRefreshError,
    StravaOAuthClient,
)
from kudosbot.core.config import StravaSettings
from kudosbot.models.account import LinkedAccount
from kudosbot.services.strava_tokens import (
    AuthOutcome,
    StravaTokenService,
    StravaUnauthorizedError,
)

pytestmark = pytest.mark.anyio

ACTIVITY_URL = "https://www.strava.com/api/v3/activities/77"


class FakeStravaAPI:
    """Scripted Strava endpoints recording every request they receive."""

    def __init__(self) -> None:
        self.api_statuses: list[int] = []
        self.refresh_status = 200
        self.exchange_status = 200
        self.api_requests: list[httpx.Request] = []
        self.refresh_requests: list[dict] = []
        self.exchange_requests: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == StravaOAuthClient.TOKEN_URL:
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.refresh_requests.append(form)
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"message": "Bad Request"})
            return httpx.Response(
                200, json={"access_token": "access-new", "refresh_token": "refresh-new"}
            )
        if url == StravaOAuthClient.EXCHANGE_URL:
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.exchange_requests.append(form)
            if self.exchange_status != 200:
                return httpx.Response(self.exchange_status, text='{"message":"Bad Request"}')
            return httpx.Response(
                200,
                json={
                    "access_token": "access-linked",
                    "refresh_token": "refresh-linked",
                    "athlete": {"id": 1001, "profile": "https://img.example/new.png"},
                },
            )
        self.api_requests.append(request)
        status = self.api_statuses.pop(0) if self.api_statuses else 200
        return httpx.Response(status, json={"id": 77})


@pytest.fixture()
def strava_api() -> FakeStravaAPI:
    return FakeStravaAPI()


@pytest.fixture()
def store(tmp_path: Path) -> JsonCredentialStore:
    return JsonCredentialStore(str(tmp_path / "config.json"))


@pytest.fixture()
def service(strava_api: FakeStravaAPI, store: JsonCredentialStore) -> StravaTokenService:
    settings = StravaSettings(
        STRAVA_CLIENT_ID="12345",
        STRAVA_CLIENT_SECRET="secret",
        STRAVA_VERIFY_TOKEN="verify",
    )
    oauth = StravaOAuthClient(
        settings,
        "https://relay.example.com/callback",
        transport=httpx.MockTransport(strava_api.handler),
    )
    return StravaTokenService(store, oauth)


def _seed(store: JsonCredentialStore, **overrides) -> None:
    fields = {
        "access_token": "access-old",
        "refresh_token": "refresh-old",
        "chat_user_id": "discord-1",
        "profile_image_url": "https://img.example/old.png",
    }
    fields.update(overrides)
    store.upsert("1001", LinkedAccount(**fields))


async def test_successful_request_sends_bearer_token(service, strava_api, store) -> None:
    _seed(store)

    result = await service.authorized_request("1001", "GET", ACTIVITY_URL)

    assert result.outcome is AuthOutcome.OK
    assert result.require().status_code == 200
    assert strava_api.api_requests[0].headers["Authorization"] == "Bearer access-old"
    assert strava_api.refresh_requests == []


async def test_401_refreshes_once_and_retries_with_new_token(service, strava_api, store) -> None:
    _seed(store)
    strava_api.api_statuses = [401, 200]

    result = await service.authorized_request("1001", "GET", ACTIVITY_URL)

    assert result.outcome is AuthOutcome.OK
    assert result.attempts == 2
    assert len(strava_api.refresh_requests) == 1
    assert strava_api.refresh_requests[0]["refresh_token"] == "refresh-old"
    assert strava_api.refresh_requests[0]["grant_type"] == "refresh_token"
    assert [r.headers["Authorization"] for r in strava_api.api_requests] == [
        "Bearer access-old",
        "Bearer access-new",
    ]
    stored = store.get("1001")
    assert stored.access_token == "access-new"
    assert stored.refresh_token == "refresh-new"
    assert stored.chat_user_id == "discord-1"


async def test_second_401_is_not_retried_again(service, strava_api, store) -> None:
    _seed(store)
    strava_api.api_statuses = [401, 401, 401]

    result = await service.authorized_request("1001", "GET", ACTIVITY_URL)

    assert result.outcome is AuthOutcome.UNAUTHORIZED
    assert len(strava_api.api_requests) == 2
    assert len(strava_api.refresh_requests) == 1
    with pytest.raises(StravaUnauthorizedError):
        result.require()


async def test_suppressed_refresh_reports_unauthorized(service, strava_api, store) -> None:
    _seed(store)
    strava_api.api_statuses = [401]

    result = await service.authorized_request(
        "1001", "POST", StravaOAuthClient.DEAUTHORIZE_URL, suppress_refresh=True
    )

    assert result.outcome is AuthOutcome.UNAUTHORIZED
    assert len(strava_api.api_requests) == 1
    assert strava_api.refresh_requests == []


async def test_refresh_failure_is_tagged_and_keeps_stale_tokens(service, strava_api, store) -> None:
    _seed(store)
    strava_api.api_statuses = [401]
    strava_api.refresh_status = 400

    result = await service.authorized_request("1001", "GET", ACTIVITY_URL)

    assert result.outcome is AuthOutcome.REFRESH_FAILED
    assert len(strava_api.api_requests) == 1
    assert store.get("1001").access_token == "access-old"
    with pytest.raises(OAuthTokenRefreshError):
        result.require()


async def test_non_401_errors_are_returned_as_is(service, strava_api, store) -> None:
    _seed(store)
    strava_api.api_statuses = [404]

    result = await service.authorized_request("1001", "GET", ACTIVITY_URL)

    assert result.outcome is AuthOutcome.OK
    assert result.require().status_code == 404
    assert strava_api.refresh_requests == []


async def test_refresh_without_stored_refresh_token(service, store) -> None:
    store.upsert("1001", LinkedAccount(access_token="access-old"))

    with pytest.raises(OAuthTokenRefreshError):
        await service.refresh("1001")


async def test_complete_link_stores_tokens_and_chat_user(service, strava_api, store) -> None:
    result = await service.complete_link(code="auth-code", chat_user_id="discord-7")

    assert (result.athlete_id, result.chat_user_id) == ("1001", "discord-7")
    assert strava_api.exchange_requests[0]["code"] == "auth-code"
    assert strava_api.exchange_requests[0]["grant_type"] == "authorization_code"
    assert store.get("1001") == LinkedAccount(
        access_token="access-linked",
        refresh_token="refresh-linked",
        chat_user_id="discord-7",
        profile_image_url="https://img.example/new.png",
    )


async def test_complete_link_keeps_existing_chat_user(service, store) -> None:
    _seed(store, chat_user_id="discord-1")

    result = await service.complete_link(code="auth-code", chat_user_id="discord-7")

    assert result.chat_user_id == "discord-1"
    stored = store.get("1001")
    assert stored.chat_user_id == "discord-1"
    assert stored.access_token == "access-linked"


async def test_complete_link_after_unlink_takes_new_chat_user(service, store) -> None:
    store.upsert("1001", LinkedAccount())

    await service.complete_link(code="auth-code", chat_user_id="discord-7")

    assert store.find_athlete_id("discord-7") == "1001"


async def test_exchange_failure_carries_body(service, strava_api, store) -> None:
    strava_api.exchange_status = 400

    with pytest.raises(OAuthTokenExchangeError) as excinfo:
        await service.complete_link(code="bad-code", chat_user_id="discord-7")

    assert "Bad Request" in excinfo.value.body
    assert store.all() == {}


async def test_deauthorize_never_refreshes(service, strava_api, store) -> None:
    _seed(store)
    strava_api.api_statuses = [401]

    accepted = await service.deauthorize("1001")

    assert accepted is False
    assert strava_api.refresh_requests == []
    assert str(strava_api.api_requests[0].url) == StravaOAuthClient.DEAUTHORIZE_URL


async def test_deauthorize_success(service, strava_api, store) -> None:
    _seed(store)

    assert await service.deauthorize("1001") is True
    assert strava_api.api_requests[0].method == "POST"
