"""
TransportController: request identity, in-flight bookkeeping and correlation.

This module is the single authority for RequestIds. It:
- Allocates a strictly increasing RequestId for every request sent
- Tracks each request in flight with its issue time until the matching
  response arrives, then removes it exactly once
- Forwards requests to the ApiDispatcher over a bounded queue; a full queue
  suspends send(), which is the admission control point for bursts
- Records every completed request in a bounded, newest-first history ring
  held by TransportStats, which the render path reads concurrently

Backend failures are data, not exceptions: they arrive as ApiFailure results,
are recorded in history as failed records and are returned to the caller
like any other response. Nothing is ever retried.

A response carrying an id that is not in flight is a correlation bug. It is
logged as UnknownRequestIdError and dropped; recv() keeps waiting.
"""

import asyncio
import logging
import threading
import time
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from clusterscope.api.dispatcher import ApiDispatcher
from clusterscope.api.elasticsearch import ElasticsearchApiHandler
from clusterscope.api.types import (
    ApiFailure,
    RequestEnvelope,
    RequestEvent,
    RequestId,
    ResponseEnvelope,
    ResponseEvent,
    describe_request,
)
from clusterscope.config import Config, Settings

logger = logging.getLogger(__name__)

HISTORY_SIZE = 100
CHANNEL_CAPACITY = 10


class UnknownRequestIdError(Exception):
    """
    A response arrived for an id that is not in flight.

    Attributes:
        request_id: The unmatched id
    """

    def __init__(self, request_id: RequestId) -> None:
        self.request_id = request_id
        super().__init__(
            f"Response for unknown request id {request_id} "
            f"(never sent or already completed); dropped"
        )


@dataclass(frozen=True)
class InFlightEntry:
    """
    A request that has been sent and not yet answered.

    Attributes:
        request: The original request
        issued_at: Wall clock time of send, for display
        started: time.monotonic() at send, for latency
    """

    request: RequestEvent
    issued_at: datetime
    started: float


@dataclass(frozen=True)
class TransportRecord:
    """
    Immutable record of one completed request.

    Attributes:
        request_id: Correlation id
        request: The original request
        outcome: Response on success, failure summary string otherwise
        ok: True if the backend call succeeded
        issued_at: When the request was sent
        completed_at: When the response was received
        latency: Seconds between send and receive (monotonic clock)
    """

    request_id: RequestId
    request: RequestEvent
    outcome: ResponseEvent | str
    ok: bool
    issued_at: datetime
    completed_at: datetime
    latency: float

    def summary(self) -> str:
        """One-line description, e.g. "#3 indices b ok 120ms"."""
        label = describe_request(self.request)
        status = "ok" if self.ok else f"failed ({self.outcome})"
        return f"#{self.request_id} {label} {status} {self.latency * 1000:.0f}ms"


@dataclass(frozen=True)
class StatsSnapshot:
    """Consistent copy of TransportStats at one point in time."""

    in_flight: int
    failed: int
    unmatched: int
    history: tuple[TransportRecord, ...]

    @property
    def latest(self) -> TransportRecord | None:
        return self.history[0] if self.history else None


class TransportStats:
    """
    Shared transport counters and history ring.

    Written by the transport controller, read by the render path. All state
    is guarded by one lock that callers never see; the interface is limited
    to counter updates, push-with-truncate and snapshot reads.

    The ring keeps newest records first. It may grow to 2 * history_size
    entries and is then truncated back to history_size.
    """

    def __init__(self, history_size: int = HISTORY_SIZE) -> None:
        """
        Args:
            history_size: Logical capacity N of the history ring
        """
        self.history_size = history_size
        self._lock = threading.Lock()
        self._in_flight = 0
        self._failed = 0
        self._unmatched = 0
        self._history: deque[TransportRecord] = deque()

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def unmatched(self) -> int:
        with self._lock:
            return self._unmatched

    def increment_in_flight(self) -> int:
        """Add one in-flight request and return the new count."""
        with self._lock:
            self._in_flight += 1
            return self._in_flight

    def decrement_in_flight(self) -> int:
        """
        Remove one in-flight request and return the new count.

        The count never goes below zero; an unbalanced decrement is logged.
        """
        with self._lock:
            if self._in_flight == 0:
                logger.error("In-flight count decremented below zero; kept at 0")
                return 0
            self._in_flight -= 1
            return self._in_flight

    def count_unmatched(self) -> None:
        with self._lock:
            self._unmatched += 1

    def push(self, record: TransportRecord) -> None:
        """
        Add a record at the front of the history ring.

        Failed records also bump the failure counter.
        """
        with self._lock:
            self._history.appendleft(record)
            if not record.ok:
                self._failed += 1
            if len(self._history) > self.history_size * 2:
                while len(self._history) > self.history_size:
                    self._history.pop()

    def latest(self) -> TransportRecord | None:
        """Most recent record, or None before the first response."""
        with self._lock:
            return self._history[0] if self._history else None

    def history(self) -> list[TransportRecord]:
        """Copy of the ring, newest first."""
        with self._lock:
            return list(self._history)

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                in_flight=self._in_flight,
                failed=self._failed,
                unmatched=self._unmatched,
                history=tuple(self._history),
            )


class TransportController:
    """
    Sends requests to the dispatcher and correlates the responses.

    Owned by the event loop; send() and recv() are only called from it.
    The stats handle may be read from anywhere.

    Example:
        transport = TransportController.init(config, settings)
        request_id = await transport.send(FetchIndices(cluster_name="b"))
        envelope = await transport.recv()  # any in-flight request, any order
        await transport.close()
    """

    def __init__(
        self,
        dispatcher: ApiDispatcher,
        history_size: int = HISTORY_SIZE,
        channel_capacity: int = CHANNEL_CAPACITY,
    ) -> None:
        """
        Create the controller and its bounded channels.

        The dispatcher is not started until start() is called.

        Args:
            dispatcher: Dispatcher that will serve the request channel
            history_size: Logical capacity of the history ring
            channel_capacity: Bound of the request and response queues
        """
        self._dispatcher = dispatcher
        self._requests: asyncio.Queue[RequestEnvelope] = asyncio.Queue(
            maxsize=channel_capacity
        )
        self._responses: asyncio.Queue[ResponseEnvelope] = asyncio.Queue(
            maxsize=channel_capacity
        )
        self._stats = TransportStats(history_size)
        self._in_flight: dict[RequestId, InFlightEntry] = {}
        self._last_id: RequestId = 0
        self._dispatcher_task: asyncio.Task | None = None

    @classmethod
    def init(cls, config: Config, settings: Settings) -> "TransportController":
        """
        Build handlers from the config and start the dispatcher.

        Must be called from a running event loop.

        Raises:
            ValueError: If a cluster endpoint cannot be resolved
        """
        handler = ElasticsearchApiHandler.from_configs(
            config.elasticsearch, timeout=settings.request_timeout
        )
        logger.info(f"Elasticsearch clients: {', '.join(handler.cluster_names) or 'none'}")
        controller = cls(
            ApiDispatcher(elasticsearch=handler),
            history_size=settings.history_size,
            channel_capacity=settings.channel_capacity,
        )
        controller.start()
        return controller

    def start(self) -> None:
        """Spawn the dispatcher task on the running loop."""
        if self._dispatcher_task is not None:
            return
        self._dispatcher_task = asyncio.create_task(
            self._dispatcher.run(self._requests, self._responses),
            name="api-dispatcher",
        )

    @property
    def accepting(self) -> bool:
        """True while a live dispatcher serves the request channel."""
        return self._dispatcher_task is not None and not self._dispatcher_task.done()

    async def send(self, request: RequestEvent) -> RequestId | None:
        """
        Send one request to the dispatcher.

        Suspends while the request channel is full.

        Args:
            request: Request to send

        Returns:
            The RequestId assigned, or None if the dispatcher is gone and the
            request was dropped
        """
        if not self.accepting:
            logger.debug(f"Dispatcher not running; dropped {describe_request(request)}")
            return None

        self._last_id += 1
        request_id = self._last_id
        if request_id in self._in_flight:
            raise RuntimeError(f"Request id {request_id} is already in flight")

        self._in_flight[request_id] = InFlightEntry(
            request=request,
            issued_at=datetime.now(),
            started=time.monotonic(),
        )
        self._stats.increment_in_flight()
        logger.debug(f"Send #{request_id} {describe_request(request)}")

        await self._requests.put(RequestEnvelope(request_id, request))
        return request_id

    async def send_requests(self, requests: Iterable[RequestEvent]) -> list[RequestId]:
        """Send requests in order; dropped requests are left out of the result."""
        ids = []
        for request in requests:
            request_id = await self.send(request)
            if request_id is not None:
                ids.append(request_id)
        return ids

    async def recv(self) -> ResponseEnvelope:
        """
        Wait for the next response and correlate it.

        Removes the in-flight entry, records the outcome with its latency in
        history and decrements the in-flight count. Responses with unknown
        ids are logged and skipped.

        Returns:
            The response envelope, for the caller to route to the view
        """
        while True:
            envelope = await self._responses.get()
            entry = self._in_flight.pop(envelope.request_id, None)
            if entry is None:
                self._stats.count_unmatched()
                logger.error(str(UnknownRequestIdError(envelope.request_id)))
                continue

            record = self._record(envelope, entry)
            self._stats.push(record)
            self._stats.decrement_in_flight()
            logger.debug(f"Receive {record.summary()}")
            return envelope

    def stats(self) -> TransportStats:
        """Shared handle for concurrent read-only use by the render path."""
        return self._stats

    def in_flight_ids(self) -> list[RequestId]:
        """Ids currently in flight, oldest first."""
        return sorted(self._in_flight)

    def in_flight_entry(self, request_id: RequestId) -> InFlightEntry | None:
        return self._in_flight.get(request_id)

    async def close(self) -> None:
        """Stop the dispatcher and close backend clients."""
        if self._dispatcher_task is not None:
            self._dispatcher_task.cancel()
            try:
                await self._dispatcher_task
            except asyncio.CancelledError:
                pass
        await self._dispatcher.elasticsearch.aclose()

    @staticmethod
    def _record(envelope: ResponseEnvelope, entry: InFlightEntry) -> TransportRecord:
        result = envelope.result
        outcome: ResponseEvent | str
        if isinstance(result, ApiFailure):
            outcome = str(result)
        else:
            outcome = result
        return TransportRecord(
            request_id=envelope.request_id,
            request=entry.request,
            outcome=outcome,
            ok=envelope.ok,
            issued_at=entry.issued_at,
            completed_at=datetime.now(),
            latency=time.monotonic() - entry.started,
        )
