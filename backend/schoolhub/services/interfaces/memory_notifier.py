"""
In-process notification relay.
Fans messages out to per-subscriber bounded queues.
"""

import asyncio
from typing import Any

from schoolhub.services.interfaces.notifier import NotificationRelay, Subscription
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)


class InMemoryRelay(NotificationRelay):
    """
    Broadcast to subscribers connected to this process.

    Use when:
    - A single worker process serves all WebSocket clients
    - Tests and local development

    A subscriber whose queue is full drops the message; publishers never wait.
    """

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, event: str, payload: dict[str, Any]) -> None:
        message = {"event": event, "data": payload}
        for subscription in list(self._subscribers):
            try:
                subscription.queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning("notification_dropped", notification=event, reason="subscriber_queue_full")

    def subscribe(self) -> Subscription:
        subscription = Subscription(asyncio.Queue(maxsize=self.queue_size), self._subscribers.discard)
        self._subscribers.add(subscription)
        return subscription
