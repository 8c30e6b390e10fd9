"""
Tests for the Server-Sent Events endpoint.
Rejections are checked over HTTP. Open streams are driven through the
handler's response iterator, since the test transport buffers whole
response bodies.
"""
import datetime as dt
import json

import pytest

from todosync.api.v1.routers.stream import KEEPALIVE_FRAME, event_stream, open_channel, stream
from todosync.config import settings
from todosync.core.pubsub import hub
from todosync.models.session import Session


pytestmark = pytest.mark.asyncio


def _parse(frame: str):
    event_line, data_line = frame.rstrip("\n").split("\n")
    return event_line[len("event: "):], json.loads(data_line[len("data: "):])


async def test_stream_requires_token(client):
    resp = await client.get("/api/stream")
    assert resp.status_code == 401
    assert resp.json()["error"]


async def test_stream_rejects_invalid_token(client):
    resp = await client.get("/api/stream", params={"token": "not.a.token"})
    assert resp.status_code == 403


async def test_stream_rejects_logged_out_token(client, login_factory):
    headers, token, _ = await login_factory()
    await client.post("/api/auth/logout", headers=headers)

    resp = await client.get("/api/stream", params={"token": token})
    assert resp.status_code == 401


async def test_stream_rejects_expired_session(client, login_factory):
    _, token, _ = await login_factory()
    past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=1)
    await Session.filter(token=token).update(expires_at=past)

    resp = await client.get("/api/stream", params={"token": token})

    assert resp.status_code == 403
    assert not await Session.filter(token=token).exists()


async def test_stream_opens_with_current_todos(client, login_factory):
    headers, token, user = await login_factory()
    await client.post("/api/todos", headers=headers, json={"text": "first"})
    await client.post("/api/todos", headers=headers, json={"text": "second", "priority": "high"})
    listing = (await client.get("/api/todos", headers=headers)).json()

    response = await stream(token=token)

    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert hub.channel_count(user["id"]) == 1
    assert _parse(await response.body_iterator.__anext__()) == ("list", listing)
    await response.body_iterator.aclose()
    assert hub.channel_count(user["id"]) == 0


async def test_mutation_before_first_read_is_delivered(client, login_factory):
    headers, token, _ = await login_factory()
    response = await stream(token=token)

    # the todo is committed after the handler returned but before the
    # client has read anything
    created = (await client.post("/api/todos", headers=headers, json={"text": "buy milk"})).json()

    body = response.body_iterator
    assert _parse(await body.__anext__()) == ("list", [])
    assert _parse(await body.__anext__()) == ("created", created)
    await body.aclose()


async def test_stream_ends_when_client_falls_behind(client, login_factory, monkeypatch):
    monkeypatch.setattr(settings, "stream_queue_size", 2)
    headers, token, user = await login_factory()
    response = await stream(token=token)

    for text in ("one", "two", "three"):
        await client.post("/api/todos", headers=headers, json={"text": text})

    assert hub.channel_count(user["id"]) == 0
    frames = [frame async for frame in response.body_iterator]
    assert frames == []


async def test_event_stream_relays_updates(create_user):
    user, _ = await create_user()
    uid = str(user.id)
    body = event_stream(uid, await open_channel(uid))

    assert _parse(await body.__anext__()) == ("list", [])

    await hub.publish(uid, "created", {"id": "t2", "text": "buy milk"})
    await hub.publish(uid, "deleted", {"id": "t2"})

    assert _parse(await body.__anext__()) == ("created", {"id": "t2", "text": "buy milk"})
    assert _parse(await body.__anext__()) == ("deleted", {"id": "t2"})

    await body.aclose()
    assert hub.channel_count(uid) == 0


async def test_event_stream_keepalive(create_user, monkeypatch):
    monkeypatch.setattr(settings, "stream_keepalive_seconds", 0.01)
    user, _ = await create_user()
    uid = str(user.id)
    body = event_stream(uid, await open_channel(uid))
    await body.__anext__()  # snapshot

    assert await body.__anext__() == KEEPALIVE_FRAME
    await body.aclose()


async def test_two_streams_for_same_user_both_receive(create_user):
    user, _ = await create_user()
    uid = str(user.id)
    first = event_stream(uid, await open_channel(uid))
    second = event_stream(uid, await open_channel(uid))
    await first.__anext__()
    await second.__anext__()
    assert hub.channel_count(uid) == 2

    await hub.publish(uid, "created", {"id": "t1"})

    assert await first.__anext__() == await second.__anext__()
    await first.aclose()
    assert hub.channel_count(uid) == 1
    await second.aclose()
