"""Live tally fan-out to server-sent event subscribers."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Protocol

from app.config import settings
from app.schemas.vote import CandidateTally
from app.services.tally_service import TallyService

logger = logging.getLogger(__name__)

KEEPALIVE_EVENT = ":\n\n"


def format_stats_event(stats: list[CandidateTally]) -> str:
    """Render a tally snapshot as one SSE ``data:`` frame."""
    payload = {"type": "stats", "stats": [item.model_dump(by_alias=True) for item in stats]}
    return f"data: {json.dumps(payload)}\n\n"


class SubscriberClosedError(Exception):
    """Raised when writing to a subscriber whose connection has gone away."""


class Subscriber:
    """One connected stream client, buffered through a bounded queue."""

    def __init__(self, election_id: int, queue_size: int | None = None) -> None:
        self.election_id = election_id
        self.closed = False
        self._queue: asyncio.Queue[str] = asyncio.Queue(
            maxsize=max(1, queue_size or settings.stream_queue_size)
        )

    def send(self, message: str) -> None:
        """Queue ``message``; raises if closed or if the client stopped reading."""
        if self.closed:
            raise SubscriberClosedError(f"subscriber for election {self.election_id} is closed")
        self._queue.put_nowait(message)

    async def receive(self) -> str:
        return await self._queue.get()

    def close(self) -> None:
        self.closed = True


class TallyPubSub(Protocol):
    """Election-keyed publish/subscribe channel used by the broadcaster."""

    def subscribe(self, election_id: int) -> Subscriber: ...

    def unsubscribe(self, subscriber: Subscriber) -> None: ...

    def publish(self, election_id: int, message: str) -> int: ...

    def subscriber_count(self, election_id: int) -> int: ...


class InMemoryPubSub:
    """Process-local subscriber registry.

    All access happens on the event loop thread, so no locking is needed.
    Only valid for a single backend process.
    """

    def __init__(self, queue_size: int | None = None) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[int, set[Subscriber]] = {}

    def subscribe(self, election_id: int) -> Subscriber:
        subscriber = Subscriber(election_id, self._queue_size)
        self._subscribers.setdefault(election_id, set()).add(subscriber)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove ``subscriber``; safe to call more than once."""
        subscriber.close()
        members = self._subscribers.get(subscriber.election_id)
        if members is None:
            return
        members.discard(subscriber)
        if not members:
            self._subscribers.pop(subscriber.election_id, None)

    def publish(self, election_id: int, message: str) -> int:
        """Deliver ``message`` to every subscriber of ``election_id``.

        Broken subscribers are dropped without interrupting delivery to
        the rest. Returns the number of successful deliveries.
        """
        delivered = 0
        for subscriber in list(self._subscribers.get(election_id, ())):
            try:
                subscriber.send(message)
            except (SubscriberClosedError, asyncio.QueueFull):
                logger.warning("Dropping stalled subscriber for election %s", election_id)
                self.unsubscribe(subscriber)
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, election_id: int) -> int:
        return len(self._subscribers.get(election_id, ()))


class TallyBroadcaster:
    """Compute tally snapshots and push them to live subscribers."""

    def __init__(self, pubsub: TallyPubSub, tallies: TallyService) -> None:
        self.pubsub = pubsub
        self.tallies = tallies
        self._pending: set[asyncio.Task] = set()

    async def push(self, election_id: int) -> int:
        """Publish a fresh snapshot for ``election_id`` if anyone is listening."""
        if self.pubsub.subscriber_count(election_id) == 0:
            return 0
        stats = await self.tallies.stats(election_id)
        return self.pubsub.publish(election_id, format_stats_event(stats))

    def notify(self, election_id: int) -> asyncio.Task:
        """Schedule a push without waiting for it; failures are only logged."""
        task = asyncio.create_task(self._push_logged(election_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _push_logged(self, election_id: int) -> None:
        try:
            await self.push(election_id)
        except Exception:
            logger.exception("Tally push failed for election %s", election_id)

    async def stream(
        self,
        election_id: int,
        keepalive_seconds: float | None = None,
    ) -> AsyncIterator[str]:
        """Yield SSE frames for one connection until it is cancelled or closed.

        The first frame is the current snapshot. A keep-alive comment is
        emitted whenever no snapshot arrives within ``keepalive_seconds``.
        """
        interval = keepalive_seconds or settings.stream_keepalive_seconds
        subscriber = self.pubsub.subscribe(election_id)
        try:
            try:
                stats = await self.tallies.stats(election_id)
            except Exception:
                logger.exception("Initial tally failed for election %s", election_id)
            else:
                yield format_stats_event(stats)

            while not subscriber.closed:
                try:
                    message = await asyncio.wait_for(subscriber.receive(), timeout=interval)
                except TimeoutError:
                    yield KEEPALIVE_EVENT
                    continue
                yield message
        finally:
            self.pubsub.unsubscribe(subscriber)

    async def drain(self) -> None:
        """Wait for every scheduled push to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel scheduled pushes that have not completed."""
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*list(self._pending), return_exceptions=True)
