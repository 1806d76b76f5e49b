"""Order store: take/update legality, listing filters, events on every committed mutation."""
import pytest
from pydantic import ValidationError

from meetnow.errors import DuplicateOrderError, InvalidTransitionError, NotAuthorizedError, OrderNotFoundError
from meetnow.models import Order, ParticipantRole
from meetnow.order_state import OrderStatus
from meetnow.store import OrderStore


def test_created_order_is_pending_without_taker(store: OrderStore, events: list) -> None:
    order = store.create_order("poster", title="Coffee", order_id="O1")

    assert order.status == OrderStatus.PENDING
    assert order.taker_id is None
    assert store.get_order("O1") == order
    assert events == []


def test_duplicate_order_id_is_refused(store: OrderStore) -> None:
    store.create_order("poster", order_id="O1")
    with pytest.raises(DuplicateOrderError):
        store.create_order("someone-else", order_id="O1")


def test_get_unknown_order(store: OrderStore) -> None:
    with pytest.raises(OrderNotFoundError):
        store.get_order("missing")


def test_take_order_claims_pending_order(store: OrderStore, events: list) -> None:
    """Scenario 1: taker T claims O1 -> inProgress, taker set."""
    store.create_order("poster", order_id="O1")

    order = store.take_order("O1", "T")

    assert order.status == OrderStatus.IN_PROGRESS
    assert order.taker_id == "T"
    assert store.get_order("O1").taker_id == "T"
    assert len(events) == 1
    assert events[0].order_id == "O1"
    assert events[0].previous_status == OrderStatus.PENDING
    assert events[0].new_status == OrderStatus.IN_PROGRESS


@pytest.mark.parametrize("status", [OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED, OrderStatus.CANCELLED])
def test_take_order_requires_pending(store: OrderStore, status: OrderStatus) -> None:
    store.seed([Order(id="O1", creator_id="poster", taker_id="first", status=status)])

    with pytest.raises(InvalidTransitionError):
        store.take_order("O1", "second")
    assert store.get_order("O1").taker_id == "first"


def test_take_unknown_order(store: OrderStore) -> None:
    with pytest.raises(OrderNotFoundError):
        store.take_order("missing", "T")


def test_creator_cannot_take_own_order(store: OrderStore, events: list) -> None:
    store.create_order("poster", order_id="O1")
    with pytest.raises(NotAuthorizedError):
        store.take_order("O1", "poster")
    assert store.get_order("O1").status == OrderStatus.PENDING
    assert events == []


def test_skipping_in_progress_is_refused(store: OrderStore, events: list) -> None:
    """Scenario 3: pending -> completed directly fails and status stays pending."""
    store.create_order("poster", order_id="O3")

    with pytest.raises(InvalidTransitionError) as exc_info:
        store.update_status("O3", OrderStatus.COMPLETED)

    assert exc_info.value.current_status == OrderStatus.PENDING
    assert exc_info.value.attempted_status == OrderStatus.COMPLETED
    assert store.get_order("O3").status == OrderStatus.PENDING
    assert events == []


@pytest.mark.parametrize("terminal", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
@pytest.mark.parametrize("target", list(OrderStatus))
def test_terminal_orders_never_move(store: OrderStore, terminal: OrderStatus, target: OrderStatus) -> None:
    store.seed([Order(id="O1", creator_id="poster", taker_id="T", status=terminal)])
    with pytest.raises(InvalidTransitionError):
        store.update_status("O1", target)
    assert store.get_order("O1").status == terminal


def test_full_lifecycle_emits_one_event_per_mutation(store: OrderStore, events: list) -> None:
    store.create_order("poster", order_id="O1")
    store.take_order("O1", "T")
    store.update_status("O1", OrderStatus.COMPLETED)

    assert [(e.previous_status, e.new_status) for e in events] == [
        (OrderStatus.PENDING, OrderStatus.IN_PROGRESS),
        (OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED),
    ]


def test_plain_status_string_is_stored_as_enum(store: OrderStore, events: list) -> None:
    store.create_order("poster", order_id="O1")

    order = store.update_status("O1", "cancelled")

    assert order.status is OrderStatus.CANCELLED
    assert store.get_order("O1").status is OrderStatus.CANCELLED
    assert [(e.previous_status, e.new_status) for e in events] == [
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
    ]


def test_unknown_status_string_is_refused(store: OrderStore, events: list) -> None:
    store.create_order("poster", order_id="O1")

    with pytest.raises(InvalidTransitionError) as exc_info:
        store.update_status("O1", "archived")

    assert exc_info.value.attempted_status == "archived"
    assert store.get_order("O1").status is OrderStatus.PENDING
    assert events == []


def test_pending_order_with_taker_is_not_a_valid_record(store: OrderStore) -> None:
    with pytest.raises(ValidationError):
        store.seed([Order(id="O1", creator_id="poster", taker_id="T", status=OrderStatus.PENDING)])
    assert "O1" not in store


def test_update_unknown_order(store: OrderStore) -> None:
    with pytest.raises(OrderNotFoundError):
        store.update_status("missing", OrderStatus.CANCELLED)


def test_orders_are_frozen(store: OrderStore) -> None:
    order = store.create_order("poster", order_id="O1")
    with pytest.raises(ValidationError):
        order.status = OrderStatus.COMPLETED
    assert store.get_order("O1").status == OrderStatus.PENDING


def test_listing_by_role(store: OrderStore) -> None:
    store.seed([
        Order(id="A", creator_id="U1", status=OrderStatus.PENDING),
        Order(id="B", creator_id="U2", taker_id="U1", status=OrderStatus.IN_PROGRESS),
        Order(id="C", creator_id="U2", taker_id="U3", status=OrderStatus.IN_PROGRESS),
    ])

    as_taker = store.list_orders("U1", ParticipantRole.TAKER)
    as_creator = store.list_orders("U1", ParticipantRole.CREATOR)

    assert [o.id for o in as_taker] == ["A", "B"]
    assert [o.id for o in as_creator] == ["A"]


def test_listing_status_filter(store: OrderStore) -> None:
    store.seed([
        Order(id="A", creator_id="U1", status=OrderStatus.PENDING),
        Order(id="B", creator_id="U1", taker_id="U2", status=OrderStatus.COMPLETED),
        Order(id="C", creator_id="U1", taker_id="U2", status=OrderStatus.CANCELLED),
    ])

    assert [o.id for o in store.list_orders("U1", ParticipantRole.CREATOR, OrderStatus.COMPLETED)] == ["B"]
    assert [o.id for o in store.list_orders("U1", ParticipantRole.CREATOR, "all")] == ["A", "B", "C"]
    assert [o.id for o in store.list_orders("U1", ParticipantRole.CREATOR, None)] == ["A", "B", "C"]
    assert [o.id for o in store.list_orders("U2", ParticipantRole.TAKER, OrderStatus.PENDING)] == ["A"]
