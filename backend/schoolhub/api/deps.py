"""
Service dependencies: each request gets services bound to its own session
and to the process-wide notification relay.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.db.session import get_db
from schoolhub.services.interfaces.notifier import NotificationRelay
from schoolhub.services.strategy_factory import get_relay
from schoolhub.services.application_service import ApplicationService
from schoolhub.services.performance_service import PerformanceService


def get_application_service(
    db: AsyncSession = Depends(get_db),
    relay: NotificationRelay = Depends(get_relay),
) -> ApplicationService:
    return ApplicationService(db, relay)


def get_performance_service(
    db: AsyncSession = Depends(get_db),
    relay: NotificationRelay = Depends(get_relay),
) -> PerformanceService:
    return PerformanceService(db, relay)
