# todosync/core/pubsub.py
"""
PubSub (Publish-Subscribe) module for live todo updates.
Fans each todo mutation out to every open Server-Sent Events stream of the
user who owns it.
"""
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union

logger = logging.getLogger("uvicorn.error")

# Event names pushed to clients
EVENT_LIST = "list"        # Full collection snapshot
EVENT_CREATED = "created"  # One new todo
EVENT_UPDATED = "updated"  # One modified todo
EVENT_DELETED = "deleted"  # {"id": ...}


def format_event(event: str, payload: Any) -> str:
    """
    Frame one event in text/event-stream format:
        event: <type>\\n
        data: <json>\\n\\n
    """
    return f"event: {event}\ndata: {json.dumps(payload, default=str)}\n\n"


class ChannelClosed(ConnectionError):
    """Raised by QueueChannel.send once the channel has been closed."""


class QueueChannel:
    """
    Delivery channel backing one open stream.

    `send` never suspends; frames wait in a bounded queue until the stream
    generator pulls them. A full queue means the client stopped reading:
    the channel closes itself and refuses the frame with asyncio.QueueFull.
    After close, `receive` returns None so the stream ends and the client
    reconnects for a fresh snapshot.
    """

    def __init__(self, maxsize: int = 256):
        self._queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def send(self, frame: str) -> None:
        if self.closed:
            raise ChannelClosed("channel is closed")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.close()
            raise

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        # pending frames are useless once the stream has a gap
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    async def receive(self) -> Optional[str]:
        return await self._queue.get()


class EventHub:
    """
    In-process map from user id to the set of that user's open channels.

    Architecture:
    - The stream router creates one channel per connection and owns its lifetime;
      this module only registers channels and routes frames
    - Apart from loading a snapshot, nothing here awaits, so on the event loop
      subscribe/unsubscribe/publish are atomic with respect to each other
    - A channel whose write fails is unsubscribed at once
    - State is not persisted; a channel that is closed at publish time misses the event

    Data structure:
    - _subscribers: Dict[user_id, Set[channel]]
      Example: {"user-1": {ch1, ch2}, "user-2": {ch3}}
    - _held: Dict[channel, List[frame]]
      Frames published to a channel while its snapshot is still loading
    """

    def __init__(self):
        self._subscribers: Dict[str, Set[Any]] = {}
        self._held: Dict[Any, List[str]] = {}

    # -------- subscribe / unsubscribe --------
    async def subscribe(
        self,
        user_id: str,
        channel,
        snapshot: Union[Iterable[Any], Callable[[], Awaitable[Iterable[Any]]]],
    ) -> None:
        """
        Register `channel` for `user_id` and send a `list` event carrying the
        user's full todo collection as its first frame.

        `snapshot` is either the collection itself or a coroutine function
        that loads it. In the second case the channel is registered before
        loading starts; events published meanwhile are held and delivered
        right after the `list` frame, so nothing committed after
        registration can be missed.
        """
        self._subscribers.setdefault(user_id, set()).add(channel)
        if callable(snapshot):
            self._held[channel] = []
            try:
                snapshot = await snapshot()
            except Exception:
                self._held.pop(channel, None)
                self.unsubscribe(user_id, channel)
                raise
        held = self._held.pop(channel, [])

        if not self._deliver(user_id, channel, format_event(EVENT_LIST, list(snapshot))):
            return
        for frame in held:
            if not self._deliver(user_id, channel, frame):
                return

    def unsubscribe(self, user_id: str, channel) -> None:
        """
        Remove `channel`. Unknown users and channels are ignored.
        """
        channels = self._subscribers.get(user_id)
        if channels is None:
            return
        channels.discard(channel)
        if not channels:
            self._subscribers.pop(user_id, None)

    def channel_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))

    # -------- publish --------
    async def publish(self, user_id: str, event: str, payload: Any) -> None:
        """
        Send one framed event to every channel of `user_id`.

        Each channel sees events in publish order. A channel that fails a
        write is dropped from the hub; the others still get the event.
        """
        channels = list(self._subscribers.get(user_id, ()))
        if not channels:
            return
        frame = format_event(event, payload)
        for channel in channels:
            self._deliver(user_id, channel, frame)

    def _deliver(self, user_id: str, channel, frame: str) -> bool:
        held = self._held.get(channel)
        if held is not None:
            held.append(frame)
            return True
        try:
            channel.send(frame)
        except Exception:
            logger.debug("[pubsub] dropping channel after failed write user id=%s", user_id, exc_info=True)
            self.unsubscribe(user_id, channel)
            return False
        return True


# Global hub instance (singleton pattern)
# Import this instance in routers to publish/subscribe
hub = EventHub()
