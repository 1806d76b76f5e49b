"""
Per-order chat log. Meetup confirmation signals travel as tagged messages here,
next to plain text and system notices.
"""
import logging
import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from meetnow.errors import ChatClosedError, EmptyMessageError, MessageNotFoundError, NotAuthorizedError
from meetnow.models import HandshakeState, ParticipantRole, participant_role, utcnow
from meetnow.order_state import OrderStatus, is_terminal
from meetnow.store import OrderStore

logger = logging.getLogger(__name__)

ACCEPTED_TEXT = (
    "Meetup confirmed. Have a great time together, "
    "and may it live up to both of your courage and trust."
)
REJECTED_TEXT = (
    "Unfortunately the other side declined your meetup request. "
    "Try another meetup or post your own to find someone who fits."
)
ACCEPTED_NOTICE = "Order status updated to in progress"


class MessageKind(str, Enum):
    TEXT = "text"
    CONFIRMATION = "confirmation"
    NOTICE = "notice"


class DeliveryStatus(str, Enum):
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    PERMANENTLY_FAILED = "permanentlyFailed"


class ConfirmationTag(BaseModel):
    initiator_role: ParticipantRole
    state: HandshakeState


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    order_id: str
    sender_id: str | None = None  # None for system notices
    content: str = ""
    kind: MessageKind = MessageKind.TEXT
    confirmation: ConfirmationTag | None = None
    sent_at: datetime = Field(default_factory=utcnow)
    delivery: DeliveryStatus = DeliveryStatus.SENDING
    retry_count: int = 0


class RenderedMessage(BaseModel):
    id: str
    kind: MessageKind
    title: str
    body: str
    from_viewer: bool
    delivery: DeliveryStatus
    sent_at: datetime
    actionable: bool = False  # viewer may accept / decline this request


class ChatLog:
    def __init__(self, store: OrderStore) -> None:
        self.store = store
        self._messages: dict[str, list[ChatMessage]] = {}

    def messages(self, order_id: str) -> list[ChatMessage]:
        self.store.get_order(order_id)
        return list(self._messages.get(order_id, []))

    def get_message(self, order_id: str, message_id: str) -> ChatMessage:
        for message in self._messages.get(order_id, []):
            if message.id == message_id:
                return message
        raise MessageNotFoundError(f"message {message_id} not found in order {order_id}")

    def post_text(self, order_id: str, sender_id: str, content: str) -> ChatMessage:
        order = self.store.get_order(order_id)
        if not content or not content.strip():
            raise EmptyMessageError()
        if is_terminal(order.status):
            raise ChatClosedError(f"chat for order {order_id} is closed ({order.status.value})")
        if participant_role(order, sender_id) is None and order.status != OrderStatus.PENDING:
            raise NotAuthorizedError(f"{sender_id} is not a participant of order {order_id}")
        return self._append(ChatMessage(order_id=order_id, sender_id=sender_id, content=content))

    def post_confirmation(
        self,
        order_id: str,
        sender_id: str,
        initiator_role: ParticipantRole,
        state: HandshakeState,
    ) -> ChatMessage:
        message = ChatMessage(
            order_id=order_id,
            sender_id=sender_id,
            kind=MessageKind.CONFIRMATION,
            confirmation=ConfirmationTag(initiator_role=initiator_role, state=state),
            delivery=DeliveryStatus.SENT,
        )
        return self._append(message)

    def post_notice(self, order_id: str, text: str) -> ChatMessage:
        message = ChatMessage(
            order_id=order_id,
            content=text,
            kind=MessageKind.NOTICE,
            delivery=DeliveryStatus.SENT,
        )
        return self._append(message)

    def _append(self, message: ChatMessage) -> ChatMessage:
        self._messages.setdefault(message.order_id, []).append(message)
        logger.debug("Chat order_id=%s kind=%s id=%s", message.order_id, message.kind.value, message.id)
        return message

    def render(self, message: ChatMessage, viewer_id: str) -> RenderedMessage:
        from_viewer = message.sender_id is not None and message.sender_id == viewer_id
        title, body, actionable = "", message.content, False
        if message.kind == MessageKind.CONFIRMATION and message.confirmation is not None:
            state = message.confirmation.state
            if state == HandshakeState.PENDING:
                if from_viewer:
                    title, body = "Meetup request sent", "Waiting for the other side to confirm"
                else:
                    title, body = "Meetup request received", "Accept or decline the meetup"
                    actionable = True
            else:
                title = "Meetup confirmation result"
                body = ACCEPTED_TEXT if state == HandshakeState.ACCEPTED else REJECTED_TEXT
        return RenderedMessage(
            id=message.id,
            kind=message.kind,
            title=title,
            body=body,
            from_viewer=from_viewer,
            delivery=message.delivery,
            sent_at=message.sent_at,
            actionable=actionable,
        )
