import asyncio
import functools
import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from todosync.config import settings
from todosync.core.errors import Unauthenticated
from todosync.core.pubsub import QueueChannel, hub
from todosync.services import sessions
from todosync.services import todos as todo_store

router = APIRouter(tags=["stream"])
logger = logging.getLogger("uvicorn.error")

KEEPALIVE_FRAME = ": ping\n\n"


async def load_snapshot(user_id: str) -> List[dict]:
    return [t.model_dump(mode="json") for t in await todo_store.list_for_user(user_id)]


async def open_channel(user_id: str) -> QueueChannel:
    """
    Subscribe a fresh channel for `user_id`. Its first frame is the `list`
    snapshot, followed by every event published after registration.
    """
    channel = QueueChannel(maxsize=settings.stream_queue_size)
    await hub.subscribe(user_id, channel, functools.partial(load_snapshot, user_id))
    logger.info("[stream] opened user id=%s (%s open)", user_id, hub.channel_count(user_id))
    return channel


async def event_stream(user_id: str, channel: QueueChannel) -> AsyncIterator[str]:
    """
    Body of one live-update connection.

    Relays frames from an already subscribed channel, emitting a comment line
    when idle so proxies keep the connection open. Ends when the hub closes
    the channel. Closing the generator, which Starlette does when the client
    disconnects or the server shuts down, unsubscribes the channel.
    """
    try:
        while True:
            try:
                frame = await asyncio.wait_for(channel.receive(), timeout=settings.stream_keepalive_seconds)
            except asyncio.TimeoutError:
                frame = KEEPALIVE_FRAME
            if frame is None:
                logger.info("[stream] channel closed by hub user id=%s", user_id)
                return
            yield frame
    finally:
        hub.unsubscribe(user_id, channel)
        logger.info("[stream] closed user id=%s (%s open)", user_id, hub.channel_count(user_id))


@router.get("/stream")
async def stream(token: str | None = Query(default=None)):
    """
    Server-Sent Events endpoint for live todo updates.

    EventSource cannot set headers, so the bearer token travels in the
    `token` query parameter and goes through the same session validation
    as the Authorization header.

    Message flow:
    1. Client opens GET /stream?token=...
    2. Server sends `event: list` with the full todo collection
    3. Server sends `created` / `updated` / `deleted` / `list` as the user's
       todos change from any device
    4. If the client falls too far behind, the server ends the stream;
       reconnecting starts again at step 2

    Errors:
        401: token missing, or its session was logged out
        403: token invalid, or its session expired
    """
    if not token:
        raise Unauthenticated("missing token")
    current = await sessions.validate(token)
    channel = await open_channel(current.user_id)
    return StreamingResponse(
        event_stream(current.user_id, channel),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
        # also runs when the client leaves before the body iterator starts
        background=BackgroundTask(hub.unsubscribe, current.user_id, channel),
    )
