"""
Mock orders the prototype starts with (no persistence layer exists).
"""
from datetime import datetime, timedelta, timezone

from meetnow.models import ActivityType, Order, OrderType
from meetnow.order_state import OrderStatus


def mock_orders(now: datetime | None = None) -> list[Order]:
    now = now or datetime.now(timezone.utc)
    hour = timedelta(hours=1)
    return [
        Order(
            id="1",
            title="Study buddy wanted",
            description="Looking for someone to study with at the library",
            creator_id="zhangsan",
            taker_id="lisi",
            status=OrderStatus.IN_PROGRESS,
            scheduled_time=now,
            location="City Central Library",
            amount=50.0,
            activity_type=ActivityType.STUDY,
            order_type=OrderType.SCHEDULED,
        ),
        Order(
            id="2",
            title="Dinner and a chat",
            description="Weekend dinner, happy to talk about anything",
            creator_id="wangwu",
            scheduled_time=now + 24 * hour,
            location="Hot pot restaurant",
            amount=100.0,
            activity_type=ActivityType.DINING,
            order_type=OrderType.SCHEDULED,
        ),
        Order(
            id="3",
            title="Exhibition companion",
            description="Van Gogh exhibition this weekend, looking for someone who enjoys art",
            creator_id="xiaohong",
            scheduled_time=now + 48 * hour,
            location="City Art Museum",
            amount=150.0,
            activity_type=ActivityType.EXHIBITION,
            order_type=OrderType.SCHEDULED,
        ),
        Order(
            id="4",
            title="Lunch right now",
            description="Lunch near the office",
            creator_id="xiaoli",
            scheduled_time=now + hour,
            location="Financial Center food court",
            amount=80.0,
            activity_type=ActivityType.DINING,
            order_type=OrderType.INSTANT,
        ),
        Order(
            id="5",
            title="Badminton partner",
            description="Anyone up for a game of badminton?",
            creator_id="xiaomei",
            scheduled_time=now + 2 * hour,
            location="Starlight Sports Hall",
            amount=60.0,
            activity_type=ActivityType.SPORTS,
            order_type=OrderType.INSTANT,
        ),
        Order(
            id="6",
            title="Coffee chat",
            description="Weekend afternoon coffee",
            creator_id="xiaoting",
            scheduled_time=now + 72 * hour,
            location="Coffee house",
            amount=70.0,
            activity_type=ActivityType.COMPANION,
            order_type=OrderType.SCHEDULED,
        ),
        Order(
            id="7",
            title="Shopping trip",
            description="Mall walk to brighten the week",
            creator_id="xiaoyu",
            scheduled_time=now + 96 * hour,
            location="Global Shopping Center",
            amount=200.0,
            activity_type=ActivityType.COMPANION,
            order_type=OrderType.SCHEDULED,
        ),
    ]
