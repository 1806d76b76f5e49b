"""Chat log: who may write, closed chats, rendering of tagged confirmation messages."""
import pytest

from meetnow.chat import ACCEPTED_TEXT, ChatLog, DeliveryStatus, MessageKind
from meetnow.errors import ChatClosedError, EmptyMessageError, MessageNotFoundError, NotAuthorizedError
from meetnow.models import HandshakeState, Order, ParticipantRole
from meetnow.order_state import OrderStatus
from meetnow.store import OrderStore


def test_prospective_taker_can_chat_on_pending_order(store: OrderStore, chat: ChatLog) -> None:
    store.create_order("creator", order_id="O1")
    message = chat.post_text("O1", "visitor", "Still free on Saturday?")

    assert message.delivery == DeliveryStatus.SENDING
    assert chat.messages("O1") == [message]
    assert chat.get_message("O1", message.id) is message


def test_only_participants_chat_once_claimed(store: OrderStore, chat: ChatLog) -> None:
    store.seed([Order(id="O1", creator_id="creator", taker_id="T", status=OrderStatus.IN_PROGRESS)])

    chat.post_text("O1", "T", "On my way")
    with pytest.raises(NotAuthorizedError):
        chat.post_text("O1", "visitor", "me too?")


@pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
def test_chat_closed_for_finished_orders(store: OrderStore, chat: ChatLog, status: OrderStatus) -> None:
    store.seed([Order(id="O1", creator_id="creator", taker_id="T", status=status)])
    with pytest.raises(ChatClosedError):
        chat.post_text("O1", "creator", "thanks!")


def test_empty_message_refused(store: OrderStore, chat: ChatLog) -> None:
    store.create_order("creator", order_id="O1")
    with pytest.raises(EmptyMessageError):
        chat.post_text("O1", "creator", "   ")


def test_unknown_message(store: OrderStore, chat: ChatLog) -> None:
    store.create_order("creator", order_id="O1")
    with pytest.raises(MessageNotFoundError):
        chat.get_message("O1", "nope")


def test_render_pending_request_per_viewer(store: OrderStore, chat: ChatLog) -> None:
    store.create_order("creator", order_id="O1")
    request = chat.post_confirmation("O1", "creator", ParticipantRole.CREATOR, HandshakeState.PENDING)

    own = chat.render(request, "creator")
    other = chat.render(request, "T")

    assert request.kind == MessageKind.CONFIRMATION
    assert own.title == "Meetup request sent"
    assert not own.actionable
    assert other.title == "Meetup request received"
    assert other.actionable


def test_render_result_and_notice(store: OrderStore, chat: ChatLog) -> None:
    store.create_order("creator", order_id="O1")
    result = chat.post_confirmation("O1", "T", ParticipantRole.CREATOR, HandshakeState.ACCEPTED)
    notice = chat.post_notice("O1", "Order status updated to in progress")

    rendered = chat.render(result, "creator")
    assert rendered.title == "Meetup confirmation result"
    assert rendered.body == ACCEPTED_TEXT

    rendered_notice = chat.render(notice, "creator")
    assert rendered_notice.body == "Order status updated to in progress"
    assert not rendered_notice.from_viewer
