"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .notifier import NotificationRelay, Subscription
from .memory_notifier import InMemoryRelay

__all__ = ['NotificationRelay', 'Subscription', 'InMemoryRelay']
