"""
Order lifecycle state machine. Valid transitions enforce business rules.
"""
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Current status -> allowed next status
VALID_TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED],
    OrderStatus.IN_PROGRESS: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    OrderStatus.COMPLETED: [],  # terminal
    OrderStatus.CANCELLED: [],  # terminal
}

TERMINAL_STATUSES = frozenset(s for s, allowed in VALID_TRANSITIONS.items() if not allowed)


def is_valid_transition(current_status: OrderStatus, new_status: OrderStatus) -> bool:
    """True if new_status is allowed after current_status."""
    allowed = VALID_TRANSITIONS.get(current_status, [])
    return new_status in allowed


def allowed_transitions(current_status: OrderStatus) -> list[OrderStatus]:
    return list(VALID_TRANSITIONS.get(current_status, []))


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES
