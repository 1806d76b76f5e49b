"""
Order store: single authoritative mapping order_id -> Order.
Every status change goes through is_valid_transition, then is published on the relay.
"""
import logging
import uuid
from datetime import datetime
from typing import Iterable, Literal

from meetnow.errors import DuplicateOrderError, InvalidTransitionError, NotAuthorizedError, OrderNotFoundError
from meetnow.metrics import order_status_transitions_total, order_transitions_rejected_total
from meetnow.models import ActivityType, Order, OrderType, ParticipantRole
from meetnow.order_state import OrderStatus, is_valid_transition
from meetnow.relay import NotificationRelay, StatusChanged

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"

StatusFilter = OrderStatus | Literal["all"] | None


class OrderStore:
    def __init__(self, relay: NotificationRelay) -> None:
        self.relay = relay
        self._orders: dict[str, Order] = {}

    def seed(self, orders: Iterable[Order]) -> None:
        """Load prepared records (e.g. mock data). No events are published."""
        for order in orders:
            if order.id in self._orders:
                raise DuplicateOrderError(order.id)
            self._orders[order.id] = order

    def create_order(
        self,
        creator_id: str,
        title: str = "",
        description: str = "",
        scheduled_time: datetime | None = None,
        location: str = "",
        amount: float = 0.0,
        activity_type: ActivityType = ActivityType.DINING,
        order_type: OrderType = OrderType.SCHEDULED,
        order_id: str | None = None,
    ) -> Order:
        order_id = order_id or uuid.uuid4().hex[:12]
        if order_id in self._orders:
            raise DuplicateOrderError(order_id)
        fields = {
            "id": order_id,
            "creator_id": creator_id,
            "title": title,
            "description": description,
            "location": location,
            "amount": amount,
            "activity_type": activity_type,
            "order_type": order_type,
        }
        if scheduled_time is not None:
            fields["scheduled_time"] = scheduled_time
        order = Order(**fields)
        self._orders[order_id] = order
        logger.info("Created order_id=%s by creator=%s", order_id, creator_id)
        return order

    def get_order(self, order_id: str) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(self, viewer_id: str, role: ParticipantRole, status: StatusFilter = None) -> list[Order]:
        """
        creator: orders the viewer posted.
        taker: orders the viewer took, plus every unclaimed (pending) order.
        status narrows further; None or "all" keeps every status.
        """
        if role == ParticipantRole.CREATOR:
            orders = [o for o in self._orders.values() if o.creator_id == viewer_id]
        else:
            orders = [
                o for o in self._orders.values()
                if o.taker_id == viewer_id or o.status == OrderStatus.PENDING
            ]
        if status is not None and status != ALL_STATUSES:
            orders = [o for o in orders if o.status == status]
        return orders

    def take_order(self, order_id: str, taker_id: str) -> Order:
        order = self.get_order(order_id)
        if order.status != OrderStatus.PENDING:
            self._reject(order, OrderStatus.IN_PROGRESS)
        if taker_id == order.creator_id:
            raise NotAuthorizedError("creator cannot take their own order")
        return self._transition(order, OrderStatus.IN_PROGRESS, taker_id=taker_id)

    def update_status(self, order_id: str, new_status: OrderStatus | str) -> Order:
        order = self.get_order(order_id)
        return self._transition(order, new_status)

    def _transition(self, order: Order, new_status: OrderStatus | str, **changes) -> Order:
        try:
            new_status = OrderStatus(new_status)
        except ValueError:
            self._reject(order, new_status)
        if not is_valid_transition(order.status, new_status):
            self._reject(order, new_status)
        updated = order.model_copy(update={"status": new_status, **changes})
        self._orders[order.id] = updated
        order_status_transitions_total.labels(
            from_status=order.status.value, to_status=new_status.value
        ).inc()
        logger.info("order_id=%s %s -> %s", order.id, order.status.value, new_status.value)
        self.relay.publish(StatusChanged(order.id, order.status, new_status))
        return updated

    def _reject(self, order: Order, attempted: OrderStatus) -> None:
        attempted_value = getattr(attempted, "value", str(attempted))
        order_transitions_rejected_total.labels(
            current_status=order.status.value, attempted_status=attempted_value
        ).inc()
        logger.warning(
            "Rejected transition order_id=%s %s -> %s", order.id, order.status.value, attempted_value
        )
        raise InvalidTransitionError(current_status=order.status, attempted_status=attempted)

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders
