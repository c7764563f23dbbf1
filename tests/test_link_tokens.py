try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import string

import pytest

from kudosbot.services.link_tokens import LinkTokenBroker, LinkTokenInvalidError


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_consume_returns_user_exactly_once() -> None:
    broker = LinkTokenBroker()
    token = broker.mint("discord-1")

    assert broker.consume(token) == "discord-1"
    assert broker.consume(token) is None
    assert broker.consume(token) is None


def test_consume_unknown_token_is_none() -> None:
    broker = LinkTokenBroker()
    assert broker.consume("never-issued") is None


def test_tokens_are_long_alphanumeric_and_distinct() -> None:
    broker = LinkTokenBroker()
    tokens = {broker.mint("discord-1") for _ in range(50)}

    assert len(tokens) == 50
    allowed = set(string.ascii_letters + string.digits)
    for token in tokens:
        assert len(token) >= 20
        assert set(token) <= allowed


def test_expired_token_is_rejected() -> None:
    clock = FakeClock()
    broker = LinkTokenBroker(ttl_seconds=60, clock=clock)
    token = broker.mint("discord-1")

    clock.now += 61

    assert broker.consume(token) is None
    assert len(broker) == 0


def test_token_within_ttl_is_accepted() -> None:
    clock = FakeClock()
    broker = LinkTokenBroker(ttl_seconds=60, clock=clock)
    token = broker.mint("discord-1")

    clock.now += 59

    assert broker.consume(token) == "discord-1"


def test_capacity_evicts_oldest_token() -> None:
    broker = LinkTokenBroker(capacity=2)
    first = broker.mint("discord-1")
    second = broker.mint("discord-2")
    third = broker.mint("discord-3")

    assert len(broker) == 2
    assert broker.consume(first) is None
    assert broker.consume(second) == "discord-2"
    assert broker.consume(third) == "discord-3"


def test_redeem_raises_for_spent_token() -> None:
    broker = LinkTokenBroker()
    token = broker.mint("discord-1")

    assert broker.redeem(token) == "discord-1"
    with pytest.raises(LinkTokenInvalidError):
        broker.redeem(token)


def test_short_tokens_are_refused() -> None:
    with pytest.raises(ValueError):
        LinkTokenBroker(token_length=8)


@pytest.mark.parametrize("kwargs", [{"capacity": 0}, {"ttl_seconds": 0}, {"ttl_seconds": -5}])
def test_non_positive_bounds_are_refused(kwargs) -> None:
    with pytest.raises(ValueError):
        LinkTokenBroker(**kwargs)


@pytest.mark.parametrize("env_name", ["LINK_TOKEN_CAPACITY", "LINK_TOKEN_TTL_SECONDS"])
def test_settings_reject_zero_link_token_bounds(
    monkeypatch: pytest.MonkeyPatch, env_name: str
) -> None:
    from pydantic import ValidationError

    from kudosbot.core.config import LinkTokenSettings

    monkeypatch.setenv(env_name, "0")

    with pytest.raises(ValidationError):
        LinkTokenSettings()
