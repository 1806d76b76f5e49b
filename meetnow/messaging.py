"""
Simulated chat delivery.
- SimulatedTransport: asyncio delay + success probability that grows with each retry.
- MessageSender: first send, then user-initiated retries up to max_send_retries;
  after the last failed retry the message is permanently failed and further
  retries are refused without touching the transport.
Cancelling the awaiting task (user left the screen) only stops the wait: the
delivery itself is shielded and its outcome is still recorded on the message.
"""
import asyncio
import logging
import random

from meetnow.chat import ChatMessage, DeliveryStatus
from meetnow.config import Settings, settings as default_settings
from meetnow.errors import MessageNotRetryableError, RetryLimitExceededError, SendFailedError
from meetnow.metrics import (
    chat_messages_failed_total,
    chat_messages_permanently_failed_total,
    chat_messages_sent_total,
)

logger = logging.getLogger(__name__)


class SimulatedTransport:
    def __init__(
        self,
        delay_ms: int = 800,
        success_rate: float = 0.8,
        retry_success_bonus: float = 0.1,
        rng: random.Random | None = None,
    ) -> None:
        self.delay_ms = delay_ms
        self.success_rate = success_rate
        self.retry_success_bonus = retry_success_bonus
        self.rng = rng or random.Random()
        self.attempts = 0  # deliveries attempted, for observability

    @classmethod
    def from_settings(cls, cfg: Settings) -> "SimulatedTransport":
        return cls(
            delay_ms=cfg.send_delay_ms,
            success_rate=cfg.send_success_rate,
            retry_success_bonus=cfg.retry_success_bonus,
        )

    async def deliver(self, message: ChatMessage, attempt: int) -> bool:
        """attempt 0 is the first send, n the n-th retry."""
        self.attempts += 1
        if self.delay_ms > 0:
            await asyncio.sleep(self.delay_ms / 1000)
        rate = min(1.0, self.success_rate + self.retry_success_bonus * attempt)
        return self.rng.random() < rate


class MessageSender:
    def __init__(self, transport, max_retries: int | None = None) -> None:
        self.transport = transport
        self.max_retries = default_settings.max_send_retries if max_retries is None else max_retries
        self._in_flight: set[asyncio.Task] = set()

    def retries_left(self, message: ChatMessage) -> int:
        return max(0, self.max_retries - message.retry_count)

    async def send(self, message: ChatMessage) -> ChatMessage:
        message.delivery = DeliveryStatus.SENDING
        return await self._attempt(message, attempt=0)

    async def retry(self, message: ChatMessage) -> ChatMessage:
        if message.delivery == DeliveryStatus.PERMANENTLY_FAILED or message.retry_count >= self.max_retries:
            logger.warning(
                "Retry refused for message_id=%s: %d/%d retries used",
                message.id,
                message.retry_count,
                self.max_retries,
            )
            raise RetryLimitExceededError(f"message {message.id} has no retries left")
        if message.delivery != DeliveryStatus.FAILED:
            raise MessageNotRetryableError(f"message {message.id} is {message.delivery.value}")
        message.retry_count += 1
        message.delivery = DeliveryStatus.SENDING
        return await self._attempt(message, attempt=message.retry_count)

    async def drain(self) -> None:
        """Wait for deliveries whose callers went away."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def _attempt(self, message: ChatMessage, attempt: int) -> ChatMessage:
        t = asyncio.ensure_future(self._deliver(message, attempt))
        self._in_flight.add(t)
        t.add_done_callback(self._in_flight.discard)
        try:
            await asyncio.shield(t)
        except asyncio.CancelledError:
            logger.info("Caller of message_id=%s went away; delivery continues in background", message.id)
            raise
        if message.delivery == DeliveryStatus.SENT:
            return message
        raise SendFailedError(
            message.id,
            retries_left=self.retries_left(message),
            permanent=message.delivery == DeliveryStatus.PERMANENTLY_FAILED,
        )

    async def _deliver(self, message: ChatMessage, attempt: int) -> None:
        delivered = await self.transport.deliver(message, attempt)
        if delivered:
            message.delivery = DeliveryStatus.SENT
            chat_messages_sent_total.inc()
            logger.info("Delivered message_id=%s (attempt %d)", message.id, attempt + 1)
            return

        chat_messages_failed_total.inc()
        left = self.retries_left(message)
        if left == 0:
            message.delivery = DeliveryStatus.PERMANENTLY_FAILED
            chat_messages_permanently_failed_total.inc()
            logger.warning("Message_id=%s permanently failed after %d retries", message.id, message.retry_count)
            return
        message.delivery = DeliveryStatus.FAILED
        logger.info("Delivery failed for message_id=%s (attempt %d, %d retries left)", message.id, attempt + 1, left)
