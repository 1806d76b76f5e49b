"""
Explicitly constructed object graph: one relay, one store, and everything wired to them.
Passed around by reference instead of a process-wide singleton.
"""
from dataclasses import dataclass

from meetnow.chat import ChatLog
from meetnow.config import Settings
from meetnow.confirmation import ConfirmationProtocol
from meetnow.messaging import MessageSender, SimulatedTransport
from meetnow.ratings import RatingBook
from meetnow.relay import NotificationRelay
from meetnow.seed import mock_orders
from meetnow.store import OrderStore


@dataclass
class Services:
    settings: Settings
    relay: NotificationRelay
    store: OrderStore
    chat: ChatLog
    sender: MessageSender
    confirmation: ConfirmationProtocol
    ratings: RatingBook


def build_services(cfg: Settings, transport=None) -> Services:
    relay = NotificationRelay()
    store = OrderStore(relay)
    if cfg.seed_mock_orders:
        store.seed(mock_orders())
    chat = ChatLog(store)
    sender = MessageSender(
        transport or SimulatedTransport.from_settings(cfg),
        max_retries=cfg.max_send_retries,
    )
    confirmation = ConfirmationProtocol(store, chat, relay, max_rejections=cfg.max_confirmation_rejections)
    ratings = RatingBook(store, delay_ms=cfg.rating_delay_ms)
    return Services(
        settings=cfg,
        relay=relay,
        store=store,
        chat=chat,
        sender=sender,
        confirmation=confirmation,
        ratings=ratings,
    )
