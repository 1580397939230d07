"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from schoolhub.api.routes import events, applications, performance, admin, notifications

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events.router)
api_router.include_router(applications.router)
api_router.include_router(performance.router)
api_router.include_router(admin.router)
api_router.include_router(notifications.router)
