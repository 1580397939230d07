"""
WebSocket endpoint streaming live notifications to dashboards.

Each frame is ``{"event": name, "data": payload}``. There is no replay: a
client that reconnects should re-fetch the lists it displays.
"""

import asyncio
import contextlib

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from schoolhub.services.interfaces.notifier import NotificationRelay, Subscription
from schoolhub.services.strategy_factory import get_relay
from schoolhub.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Notifications"])


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        message = await subscription.receive()
        await websocket.send_json(message)


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, relay: NotificationRelay = Depends(get_relay)):
    await websocket.accept()
    logger.info("notification_client_connected", client=str(websocket.client))

    async with relay.subscribe() as subscription:
        forwarder = asyncio.create_task(_forward(websocket, subscription))
        try:
            # Inbound frames are ignored; reading only detects the disconnect
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            forwarder.cancel()
            # A send on a closed socket fails the forwarder; nothing left to deliver
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await forwarder

    logger.info("notification_client_disconnected", client=str(websocket.client))
