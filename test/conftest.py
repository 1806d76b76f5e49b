"""
Shared fixtures: a fresh relay/store graph per test and a scripted transport
so delivery outcomes are deterministic.
"""
import pytest

from meetnow.chat import ChatLog
from meetnow.config import Settings
from meetnow.confirmation import ConfirmationProtocol
from meetnow.relay import NotificationRelay
from meetnow.store import OrderStore


class ScriptedTransport:
    """Delivers according to a fixed list of outcomes; records every call."""

    def __init__(self, outcomes: list[bool] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.calls: list[tuple[str, int]] = []

    async def deliver(self, message, attempt: int) -> bool:
        self.calls.append((message.id, attempt))
        if not self.outcomes:
            raise AssertionError("transport contacted more often than scripted")
        return self.outcomes.pop(0)


@pytest.fixture
def relay() -> NotificationRelay:
    return NotificationRelay()


@pytest.fixture
def events(relay: NotificationRelay) -> list:
    received: list = []
    relay.subscribe(received.append)
    return received


@pytest.fixture
def store(relay: NotificationRelay) -> OrderStore:
    return OrderStore(relay)


@pytest.fixture
def chat(store: OrderStore) -> ChatLog:
    return ChatLog(store)


@pytest.fixture
def protocol(store: OrderStore, chat: ChatLog, relay: NotificationRelay) -> ConfirmationProtocol:
    return ConfirmationProtocol(store, chat, relay, max_rejections=3)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        redis_url=None,
        seed_mock_orders=False,
        send_delay_ms=0,
        rating_delay_ms=0,
        max_send_retries=3,
        max_confirmation_rejections=3,
    )
