"""
Meetup confirmation handshake, one per order:

    none -> pending            either side asks, only while the order is pending
    pending -> accepted        the counterpart agrees; drives pending -> inProgress in the store
    pending -> rejected        the counterpart declines; order untouched
    accepted | rejected -> none

The taker side of a pending order is the "candidate": the non-creator in the chat.
The store transition to inProgress only ever happens as a consequence of an accept
(or of a direct take_order claim, which withdraws any outstanding request).
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from meetnow.chat import ACCEPTED_NOTICE, ChatLog, REJECTED_TEXT
from meetnow.config import settings as default_settings
from meetnow.errors import ConfirmationLimitError, InvalidStateError, NoActiveRequestError, NotAuthorizedError
from meetnow.metrics import confirmation_handshakes_total
from meetnow.models import HandshakeState, Order, ParticipantRole, utcnow
from meetnow.order_state import OrderStatus
from meetnow.relay import NotificationRelay, StatusChanged
from meetnow.store import OrderStore

logger = logging.getLogger(__name__)

WITHDRAWN_NOTICE = "Meetup request withdrawn: the order is no longer open"


@dataclass
class Handshake:
    order_id: str
    initiator_id: str
    initiator_role: ParticipantRole
    counterpart_id: str
    state: HandshakeState = HandshakeState.PENDING
    request_message_id: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def candidate_id(self) -> str:
        """The participant who becomes taker when the request is accepted."""
        if self.initiator_role == ParticipantRole.CREATOR:
            return self.counterpart_id
        return self.initiator_id


class ConfirmationProtocol:
    def __init__(
        self,
        store: OrderStore,
        chat: ChatLog,
        relay: NotificationRelay,
        max_rejections: int | None = None,
    ) -> None:
        self.store = store
        self.chat = chat
        self.max_rejections = (
            default_settings.max_confirmation_rejections if max_rejections is None else max_rejections
        )
        self._active: dict[str, Handshake] = {}
        self._rejections: dict[str, int] = {}
        self._unsubscribe = relay.subscribe(self._on_status_changed)

    def current(self, order_id: str) -> Handshake | None:
        return self._active.get(order_id)

    def state(self, order_id: str) -> HandshakeState:
        handshake = self._active.get(order_id)
        return handshake.state if handshake else HandshakeState.NONE

    def rejections(self, order_id: str) -> int:
        return self._rejections.get(order_id, 0)

    def initiate(self, order_id: str, viewer_id: str, counterpart_id: str | None = None) -> Handshake:
        order = self.store.get_order(order_id)
        if order.status != OrderStatus.PENDING:
            self._desync(order_id, f"cannot request confirmation while order is {order.status.value}")
        if order_id in self._active:
            self._desync(order_id, "a confirmation request is already pending")
        if self.rejections(order_id) >= self.max_rejections:
            logger.warning("Confirmation limit reached for order_id=%s", order_id)
            raise ConfirmationLimitError(
                f"order {order_id} reached {self.max_rejections} rejected confirmation requests"
            )

        if viewer_id == order.creator_id:
            if not counterpart_id or counterpart_id == viewer_id:
                self._desync(order_id, "creator must name the candidate to confirm with")
            role = ParticipantRole.CREATOR
        else:
            if counterpart_id is not None and counterpart_id != order.creator_id:
                raise NotAuthorizedError("a candidate can only ask the order's creator")
            counterpart_id = order.creator_id
            role = ParticipantRole.TAKER

        handshake = Handshake(
            order_id=order_id,
            initiator_id=viewer_id,
            initiator_role=role,
            counterpart_id=counterpart_id,
        )
        message = self.chat.post_confirmation(order_id, viewer_id, role, HandshakeState.PENDING)
        handshake.request_message_id = message.id
        self._active[order_id] = handshake
        confirmation_handshakes_total.labels(outcome="initiated").inc()
        logger.info(
            "Confirmation requested order_id=%s by %s (%s) -> %s",
            order_id,
            viewer_id,
            role.value,
            counterpart_id,
        )
        return handshake

    def accept(self, order_id: str, viewer_id: str) -> Order:
        handshake = self._responding(order_id, viewer_id)
        # drop first: the store event below must not withdraw this handshake
        del self._active[order_id]
        handshake.state = HandshakeState.ACCEPTED
        try:
            order = self.store.take_order(order_id, handshake.candidate_id)
        except Exception:
            self._active[order_id] = handshake
            handshake.state = HandshakeState.PENDING
            raise
        self.chat.post_confirmation(order_id, viewer_id, handshake.initiator_role, HandshakeState.ACCEPTED)
        self.chat.post_notice(order_id, ACCEPTED_NOTICE)
        confirmation_handshakes_total.labels(outcome="accepted").inc()
        logger.info("Confirmation accepted order_id=%s, taker=%s", order_id, order.taker_id)
        return order

    def reject(self, order_id: str, viewer_id: str) -> Handshake:
        handshake = self._responding(order_id, viewer_id)
        del self._active[order_id]
        handshake.state = HandshakeState.REJECTED
        self._rejections[order_id] = self.rejections(order_id) + 1
        self.chat.post_confirmation(order_id, viewer_id, handshake.initiator_role, HandshakeState.REJECTED)
        self.chat.post_notice(order_id, REJECTED_TEXT)
        confirmation_handshakes_total.labels(outcome="rejected").inc()
        logger.info(
            "Confirmation rejected order_id=%s (%d/%d)",
            order_id,
            self._rejections[order_id],
            self.max_rejections,
        )
        return handshake

    def close(self) -> None:
        self._unsubscribe()

    def _responding(self, order_id: str, viewer_id: str) -> Handshake:
        self.store.get_order(order_id)
        handshake = self._active.get(order_id)
        if handshake is None:
            logger.warning("No active confirmation request for order_id=%s", order_id)
            raise NoActiveRequestError(f"no confirmation request pending for order {order_id}")
        if viewer_id == handshake.initiator_id:
            raise NotAuthorizedError("only the counterpart can respond to a confirmation request")
        if viewer_id != handshake.counterpart_id:
            raise NotAuthorizedError(f"{viewer_id} is not part of this confirmation request")
        return handshake

    def _desync(self, order_id: str, reason: str) -> None:
        logger.warning("Out-of-sequence confirmation call for order_id=%s: %s", order_id, reason)
        raise InvalidStateError(reason)

    def _on_status_changed(self, event: StatusChanged) -> None:
        if event.new_status == OrderStatus.PENDING:
            return
        handshake = self._active.pop(event.order_id, None)
        if handshake is None:
            return
        self.chat.post_notice(event.order_id, WITHDRAWN_NOTICE)
        confirmation_handshakes_total.labels(outcome="withdrawn").inc()
        logger.info(
            "Withdrew confirmation request on order_id=%s after %s",
            event.order_id,
            event.new_status.value,
        )
