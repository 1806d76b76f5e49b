"""
Order record and participant roles.
Orders are frozen: only OrderStore replaces them, after a validated transition.
"""
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from meetnow.order_state import OrderStatus


class ActivityType(str, Enum):
    DINING = "dining"
    SPORTS = "sports"
    EXHIBITION = "exhibition"
    DRINKING = "drinking"
    STUDY = "study"
    COMPANION = "companion"


class OrderType(str, Enum):
    INSTANT = "instant"
    SCHEDULED = "scheduled"


class ParticipantRole(str, Enum):
    CREATOR = "creator"
    TAKER = "taker"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: OrderStatus = OrderStatus.PENDING
    creator_id: str
    taker_id: str | None = None
    title: str = ""
    description: str = ""
    scheduled_time: datetime = Field(default_factory=utcnow)
    location: str = ""
    amount: float = 0.0
    activity_type: ActivityType = ActivityType.DINING
    order_type: OrderType = OrderType.SCHEDULED
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _unclaimed_while_pending(self) -> "Order":
        if self.status == OrderStatus.PENDING and self.taker_id is not None:
            raise ValueError(f"pending order {self.id} cannot have a taker")
        return self


def participant_role(order: Order, viewer_id: str) -> ParticipantRole | None:
    """creator if viewer posted the order, taker if viewer took it, else None."""
    if viewer_id == order.creator_id:
        return ParticipantRole.CREATOR
    if order.taker_id is not None and viewer_id == order.taker_id:
        return ParticipantRole.TAKER
    return None


class HandshakeState(str, Enum):
    NONE = "none"
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
