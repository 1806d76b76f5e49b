"""
Optional Redis bridge: republishes relay status changes on a Pub/Sub channel
so views outside this process can refresh. Fire-and-forget, like the relay itself.
"""
import asyncio
import json
import logging

import redis.asyncio as redis

from meetnow.relay import StatusChanged

logger = logging.getLogger(__name__)


def create_redis(redis_url: str) -> redis.Redis:
    return redis.from_url(redis_url, decode_responses=True)


class RedisStatusBridge:
    """Relay subscriber. Needs a running event loop (FastAPI request handlers provide one)."""

    def __init__(self, client: redis.Redis, channel: str) -> None:
        self.client = client
        self.channel = channel
        self._tasks: set[asyncio.Task] = set()

    def __call__(self, event: StatusChanged) -> None:
        body = json.dumps({"event_type": "OrderStatusChanged", "data": event.to_dict()})
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, status change of order_id=%s not bridged", event.order_id)
            return
        t = loop.create_task(self._publish(body, event.order_id))
        self._tasks.add(t)
        t.add_done_callback(self._tasks.discard)

    async def _publish(self, body: str, order_id: str) -> None:
        try:
            await self.client.publish(self.channel, body)
        except Exception:
            logger.exception("Failed to publish status change of order_id=%s to %s", order_id, self.channel)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        await self.client.aclose()
