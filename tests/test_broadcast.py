"""Live tally broadcaster tests."""

from __future__ import annotations

import asyncio
import json

import pytest

from app.services.broadcast import (
    KEEPALIVE_EVENT,
    InMemoryPubSub,
    SubscriberClosedError,
    TallyBroadcaster,
    format_stats_event,
)
from app.services.tally_service import TallyService


def _vote(fake_db, signature: str, election_id: int = 1, candidate_id: int = 10) -> None:
    fake_db.seed(
        "votes",
        signature=signature,
        election_id=election_id,
        candidate_id=candidate_id,
        candidate_name=f"Candidate {candidate_id}",
        matric=f"MAT-{signature}",
        wallet_address="W" * 44,
    )


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: ") : -2])


@pytest.fixture
def broadcaster(fake_db) -> TallyBroadcaster:
    return TallyBroadcaster(InMemoryPubSub(queue_size=2), TallyService(fake_db))


def test_format_stats_event_empty() -> None:
    assert _decode(format_stats_event([])) == {"type": "stats", "stats": []}


@pytest.mark.anyio
async def test_publish_reaches_only_the_matching_election() -> None:
    pubsub = InMemoryPubSub()
    first = pubsub.subscribe(1)
    second = pubsub.subscribe(1)
    other = pubsub.subscribe(2)

    assert pubsub.publish(1, "data: x\n\n") == 2
    assert await first.receive() == "data: x\n\n"
    assert await second.receive() == "data: x\n\n"
    assert other._queue.empty()


@pytest.mark.anyio
async def test_unsubscribe_is_idempotent() -> None:
    pubsub = InMemoryPubSub()
    subscriber = pubsub.subscribe(1)

    pubsub.unsubscribe(subscriber)
    pubsub.unsubscribe(subscriber)

    assert pubsub.subscriber_count(1) == 0
    assert pubsub.publish(1, "data: x\n\n") == 0
    with pytest.raises(SubscriberClosedError):
        subscriber.send("data: x\n\n")


@pytest.mark.anyio
async def test_broken_subscriber_is_dropped_without_stopping_delivery() -> None:
    pubsub = InMemoryPubSub(queue_size=1)
    stalled = pubsub.subscribe(1)
    healthy = pubsub.subscribe(1)
    stalled.send("data: backlog\n\n")

    delivered = pubsub.publish(1, "data: fresh\n\n")

    assert delivered == 1
    assert pubsub.subscriber_count(1) == 1
    assert stalled.closed
    assert await healthy.receive() == "data: fresh\n\n"


@pytest.mark.anyio
async def test_closed_subscriber_still_registered_is_dropped() -> None:
    pubsub = InMemoryPubSub()
    gone = pubsub.subscribe(1)
    alive = pubsub.subscribe(1)
    gone.close()

    assert pubsub.publish(1, "data: x\n\n") == 1
    assert pubsub.subscriber_count(1) == 1
    assert await alive.receive() == "data: x\n\n"


@pytest.mark.anyio
async def test_push_without_subscribers_skips_the_tally(broadcaster, fake_db) -> None:
    assert await broadcaster.push(1) == 0
    assert fake_db.queries == []


@pytest.mark.anyio
async def test_stream_sends_initial_snapshot_then_updates(broadcaster, fake_db) -> None:
    _vote(fake_db, "sig-1")
    stream = broadcaster.stream(1, keepalive_seconds=5)

    initial = _decode(await stream.__anext__())
    assert initial["stats"] == [{"candidateId": 10, "candidateName": "Candidate 10", "votes": 1}]
    assert broadcaster.pubsub.subscriber_count(1) == 1

    _vote(fake_db, "sig-2", candidate_id=11)
    await broadcaster.push(1)
    update = _decode(await stream.__anext__())
    assert sorted(item["candidateId"] for item in update["stats"]) == [10, 11]

    await stream.aclose()
    assert broadcaster.pubsub.subscriber_count(1) == 0


@pytest.mark.anyio
async def test_stream_emits_keepalive_when_idle(broadcaster) -> None:
    stream = broadcaster.stream(1, keepalive_seconds=0.01)

    await stream.__anext__()
    assert await stream.__anext__() == KEEPALIVE_EVENT
    await stream.aclose()


@pytest.mark.anyio
async def test_disconnect_stops_delivery_and_later_broadcasts_succeed(broadcaster, fake_db) -> None:
    stream = broadcaster.stream(1, keepalive_seconds=5)
    await stream.__anext__()

    await stream.aclose()
    _vote(fake_db, "sig-1")

    assert await broadcaster.push(1) == 0


@pytest.mark.anyio
async def test_cancelled_stream_unsubscribes(broadcaster) -> None:
    async def consume() -> None:
        async for _ in broadcaster.stream(1, keepalive_seconds=5):
            pass

    task = asyncio.create_task(consume())
    while broadcaster.pubsub.subscriber_count(1) == 0:
        await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.anyio
async def test_stream_survives_initial_tally_failure(broadcaster) -> None:
    async def broken_stats(election_id: int):
        raise RuntimeError("tally backend down")

    broadcaster.tallies.stats = broken_stats
    stream = broadcaster.stream(1, keepalive_seconds=0.01)

    assert await stream.__anext__() == KEEPALIVE_EVENT
    await stream.aclose()


@pytest.mark.anyio
async def test_shutdown_cancels_pending_pushes(broadcaster) -> None:
    started = asyncio.Event()

    async def slow_stats(election_id: int):
        started.set()
        await asyncio.sleep(60)
        return []

    broadcaster.pubsub.subscribe(1)
    broadcaster.tallies.stats = slow_stats
    task = broadcaster.notify(1)
    await started.wait()

    await broadcaster.shutdown()

    assert task.cancelled()


@pytest.mark.anyio
async def test_stream_route_serves_server_sent_events(fake_db) -> None:
    from app.main import app

    _vote(fake_db, "sig-a")
    broadcaster = TallyBroadcaster(InMemoryPubSub(), TallyService(fake_db))
    app.state.broadcaster = broadcaster
    disconnected = asyncio.Event()
    request_sent = False
    messages: list[dict] = []

    async def receive() -> dict:
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(message: dict) -> None:
        messages.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            disconnected.set()

    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/api/stream/1",
        "raw_path": b"/api/stream/1",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver")],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    # Endless streams cannot go through TestClient, which buffers the whole body.
    await asyncio.wait_for(app(scope, receive, send), timeout=5)

    start = messages[0]
    assert start["status"] == 200
    headers = {key.decode(): value.decode() for key, value in start["headers"]}
    assert headers["content-type"].startswith("text/event-stream")
    assert headers["cache-control"] == "no-cache"
    assert headers["x-accel-buffering"] == "no"

    first_frame = next(m["body"] for m in messages if m.get("body"))
    payload = _decode(first_frame.decode())
    assert payload["stats"] == [{"candidateId": 10, "candidateName": "Candidate 10", "votes": 1}]
