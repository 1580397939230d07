"""
Notification relay factory.
Configures which relay implementation the process uses.
"""

from typing import Optional

from schoolhub.services.interfaces.notifier import NotificationRelay
from schoolhub.services.interfaces.memory_notifier import InMemoryRelay
from schoolhub.services.notification_service import RedisRelay
from schoolhub.core.config import get_settings


def build_relay() -> NotificationRelay:
    """
    Build the configured relay.

    - memory: single process, no external dependency (default)
    - redis: replicated deployments sharing one Redis channel

    Selected with the NOTIFICATION_BACKEND env var.
    """
    settings = get_settings()

    if settings.NOTIFICATION_BACKEND == 'redis':
        return RedisRelay(settings.NOTIFICATION_CHANNEL, queue_size=settings.NOTIFICATION_QUEUE_SIZE)
    return InMemoryRelay(queue_size=settings.NOTIFICATION_QUEUE_SIZE)


# Process-wide instance, handed to services through get_relay()
_relay: Optional[NotificationRelay] = None


def get_relay() -> NotificationRelay:
    """FastAPI dependency returning the relay singleton."""
    global _relay
    if _relay is None:
        _relay = build_relay()
    return _relay
