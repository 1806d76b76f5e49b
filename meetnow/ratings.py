"""
Star ratings for completed meetups. Submission is simulated with an asyncio delay.
"""
import asyncio
import logging
from datetime import datetime

from pydantic import BaseModel, Field

from meetnow.errors import DuplicateRatingError, InvalidRatingError, InvalidStateError, NotAuthorizedError
from meetnow.models import participant_role, utcnow
from meetnow.order_state import OrderStatus
from meetnow.store import OrderStore

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


class Rating(BaseModel):
    order_id: str
    rater_id: str
    stars: int
    comment: str = ""
    submitted_at: datetime = Field(default_factory=utcnow)


class RatingBook:
    def __init__(self, store: OrderStore, delay_ms: int = 0) -> None:
        self.store = store
        self.delay_ms = delay_ms
        self._ratings: dict[str, dict[str, Rating]] = {}

    def ratings_for(self, order_id: str) -> list[Rating]:
        self.store.get_order(order_id)
        return list(self._ratings.get(order_id, {}).values())

    async def submit(self, order_id: str, rater_id: str, stars: int, comment: str = "") -> Rating:
        order = self.store.get_order(order_id)
        if order.status != OrderStatus.COMPLETED:
            raise InvalidStateError(f"order {order_id} is {order.status.value}; only completed meetups can be rated")
        if participant_role(order, rater_id) is None:
            raise NotAuthorizedError(f"{rater_id} did not take part in order {order_id}")
        if not MIN_STARS <= stars <= MAX_STARS:
            raise InvalidRatingError(f"stars must be between {MIN_STARS} and {MAX_STARS}, got {stars}")
        if rater_id in self._ratings.get(order_id, {}):
            raise DuplicateRatingError(f"{rater_id} already rated order {order_id}")

        if self.delay_ms > 0:
            await asyncio.sleep(self.delay_ms / 1000)
        rating = Rating(order_id=order_id, rater_id=rater_id, stars=stars, comment=comment)
        # re-check after the await: the same rater may have submitted twice concurrently
        book = self._ratings.setdefault(order_id, {})
        if rater_id in book:
            raise DuplicateRatingError(f"{rater_id} already rated order {order_id}")
        book[rater_id] = rating
        logger.info("Rated order_id=%s by %s: %d stars", order_id, rater_id, stars)
        return rating
