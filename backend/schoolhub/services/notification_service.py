"""
Cross-process notification relay backed by Redis pub/sub.

When the API runs as several worker processes, a WebSocket client is attached
to exactly one of them while the request that triggers a notification may be
served by any other. Every process publishes to one Redis channel and runs a
listener that re-broadcasts channel messages to its own subscribers.

Failure behaviour:
  Redis pub/sub is itself at-most-once, which matches the relay contract.
  If Redis is unreachable, publish raises and the caller's ``notify_safely``
  logs and drops the message; the request that triggered it still succeeds.
  A listener that loses its connection re-subscribes after
  ``reconnect_delay`` seconds; messages sent in between are missed.
"""

import asyncio
import contextlib
import json
from typing import Any, Optional

from redis.exceptions import RedisError

from schoolhub.services.interfaces.notifier import NotificationRelay, Subscription
from schoolhub.services.interfaces.memory_notifier import InMemoryRelay
from schoolhub.infrastructure.redis_client import get_redis
from schoolhub.core.metrics import record_notification
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)


class RedisRelay(NotificationRelay):
    """
    Redis pub/sub relay.

    Use when:
    - The API is replicated across processes or hosts
    - WebSocket clients must see updates produced by any replica
    """

    def __init__(self, channel: str, queue_size: int = 100, reconnect_delay: float = 1.0):
        self.channel = channel
        self.reconnect_delay = reconnect_delay
        self._local = InMemoryRelay(queue_size=queue_size)
        self._listener: Optional[asyncio.Task] = None

    async def publish(self, event: str, payload: dict[str, Any]) -> None:
        client = await get_redis()
        if client is None:
            raise RuntimeError("Redis is not available for notifications")
        await client.publish(self.channel, json.dumps({"event": event, "data": payload}, default=str))

    def subscribe(self) -> Subscription:
        return self._local.subscribe()

    async def start(self) -> None:
        if self._listener is None:
            self._listener = asyncio.create_task(self._listen(), name="notification-listener")

    async def close(self) -> None:
        if self._listener is None:
            return
        self._listener.cancel()
        try:
            await self._listener
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("notification_listener_failed", error=str(e))
        finally:
            self._listener = None

    async def _listen(self) -> None:
        client = await get_redis()
        if client is None:
            logger.warning("notification_listener_disabled", reason="redis_unavailable")
            return

        while True:
            try:
                await self._consume(client)
            except (RedisError, OSError) as e:
                logger.warning(
                    "notification_listener_disconnected",
                    channel=self.channel,
                    error=str(e),
                    retry_in=self.reconnect_delay,
                )
                await asyncio.sleep(self.reconnect_delay)

    async def _consume(self, client) -> None:
        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(self.channel)
            logger.info("notification_listener_started", channel=self.channel)
            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    continue
                try:
                    decoded = json.loads(message["data"])
                    await self._local.publish(decoded["event"], decoded["data"])
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning("notification_malformed", error=str(e))
        finally:
            # The connection may already be gone
            with contextlib.suppress(Exception):
                await pubsub.unsubscribe(self.channel)
            with contextlib.suppress(Exception):
                await pubsub.aclose()


async def notify_safely(relay: NotificationRelay, event: str, payload: dict[str, Any]) -> None:
    """Publish without ever failing the caller: errors are logged and counted."""
    try:
        await relay.publish(event, payload)
    except Exception as e:
        record_notification(event, sent=False)
        logger.error("notification_failed", notification=event, error=str(e))
        return
    record_notification(event, sent=True)
