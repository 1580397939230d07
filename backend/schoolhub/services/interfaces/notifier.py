"""
Notification relay interface.
Lets the application workflow and leaderboard engine publish live updates
without knowing how they reach connected clients.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable

NEW_APPLICATION = "new_application"
APPLICATION_UPDATED = "application_updated"
LEADERBOARD_UPDATE = "leaderboard_update"


class Subscription:
    """
    A single client's view of the relay.

    Messages arrive as ``{"event": name, "data": payload}``. Only messages
    published while the subscription is open are delivered.
    """

    def __init__(self, queue: asyncio.Queue, on_close: Callable[["Subscription"], None]):
        self.queue = queue
        self._on_close = on_close
        self.closed = False

    async def receive(self) -> dict[str, Any]:
        return await self.queue.get()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._on_close(self)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class NotificationRelay(ABC):
    """
    Interface for live notification delivery.

    Delivery is fire-and-forget and at-most-once: there is no persistence or
    replay, and a subscriber that is slow or absent simply misses messages.

    Implementations:
    - InMemoryRelay: fan-out to subscribers in this process
    - RedisRelay: fan-out across processes through Redis pub/sub
    """

    @abstractmethod
    async def publish(self, event: str, payload: dict[str, Any]) -> None:
        """
        Broadcast a message to every current subscriber.

        Args:
            event: Event name, e.g. ``new_application``
            payload: JSON-serializable message body
        """
        pass

    @abstractmethod
    def subscribe(self) -> Subscription:
        """Open a subscription that receives messages published from now on."""
        pass

    async def start(self) -> None:
        """Acquire background resources (called once at application startup)."""

    async def close(self) -> None:
        """Release background resources (called once at application shutdown)."""
