"""
Live feed over WebSocket.

Served at "/" (where the dashboard connects) and at "/ws". The server sends
one init message followed by one message per ingested event; anything the
client sends is read and discarded.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from store import get_hive
from tracking.broadcaster import CLOSE, Subscriber
from tracking.hive import Hive

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


async def _pump(websocket: WebSocket, subscriber: Subscriber):
    """Forward queued messages to the socket until evicted or the socket dies."""
    try:
        while True:
            message = await subscriber.next_message()
            if message is CLOSE:
                await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
                return
            await websocket.send_json(message)
    except (WebSocketDisconnect, RuntimeError, OSError) as exc:
        logger.warning("Send to client %d failed: %s", subscriber.id, exc or type(exc).__name__)


async def _drain(websocket: WebSocket):
    """Discard client messages; returns once the client disconnects."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/")
@router.websocket("/ws")
async def live_feed(websocket: WebSocket, hive: Hive = Depends(get_hive)):
    await websocket.accept()
    subscriber = hive.subscribe()

    tasks = {
        asyncio.create_task(_pump(websocket, subscriber)),
        asyncio.create_task(_drain(websocket)),
    }
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        # Deregister before awaiting anything: this block may itself be cancelled.
        hive.unsubscribe(subscriber)
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.warning("Client %d connection error: %s", subscriber.id, result)
