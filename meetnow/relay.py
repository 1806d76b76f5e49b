"""
Notification relay: broadcasts order status changes to subscribers.
Fire-and-forget, in order, no replay. A failing subscriber never rolls back the mutation.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from meetnow.metrics import relay_subscriber_errors_total
from meetnow.models import utcnow
from meetnow.order_state import OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusChanged:
    order_id: str
    previous_status: OrderStatus
    new_status: OrderStatus
    occurred_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "previous_status": self.previous_status.value,
            "new_status": self.new_status.value,
            "occurred_at": self.occurred_at.isoformat(),
        }


Subscriber = Callable[[StatusChanged], None]


class NotificationRelay:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that removes it again."""
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: StatusChanged) -> None:
        # copy: subscribers may unsubscribe while being notified
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                relay_subscriber_errors_total.inc()
                logger.exception(
                    "Subscriber %r failed on order_id=%s (%s -> %s)",
                    callback,
                    event.order_id,
                    event.previous_status.value,
                    event.new_status.value,
                )
