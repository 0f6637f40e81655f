"""
ApiDispatcher: concurrent fan-out of requests to backend handlers.

The dispatcher reads RequestEnvelopes from the bounded request queue and
spawns one asyncio task per envelope. Each task routes the request to the
handler for its backend, awaits it, and puts a ResponseEnvelope carrying the
original RequestId on the shared response queue. The read loop never awaits
a dispatched task, so a slow request never holds up the ones behind it, and
responses come back in completion order rather than issue order.

Handler errors are caught per task and turned into ApiFailure values; they
never reach the read loop.
"""

import asyncio
import json
import logging

import httpx
import pydantic

from clusterscope.api.elasticsearch import ApiHandleError, ElasticsearchApiHandler
from clusterscope.api.types import (
    ELASTICSEARCH_REQUESTS,
    ApiFailure,
    FailureKind,
    RequestEnvelope,
    ResponseEnvelope,
    ResponseEvent,
    describe_request,
)

logger = logging.getLogger(__name__)


def classify_error(error: Exception) -> ApiFailure:
    """
    Map an exception raised by a handler to a typed failure.

    Args:
        error: Exception raised while handling a request

    Returns:
        ApiFailure with a category and a one-line message
    """
    if isinstance(error, ApiHandleError):
        return ApiFailure(FailureKind.UNKNOWN_CLUSTER, str(error))
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        kind = FailureKind.NOT_FOUND if status == 404 else FailureKind.HTTP_ERROR
        return ApiFailure(kind, f"HTTP {status} for {error.request.url.path}")
    if isinstance(error, httpx.TimeoutException):
        return ApiFailure(FailureKind.UNREACHABLE, f"timed out ({type(error).__name__})")
    if isinstance(error, httpx.TransportError):
        return ApiFailure(FailureKind.UNREACHABLE, f"{type(error).__name__}: {error}")
    if isinstance(error, pydantic.ValidationError):
        return ApiFailure(
            FailureKind.MALFORMED,
            f"unexpected payload ({error.error_count()} validation errors)",
        )
    if isinstance(error, json.JSONDecodeError):
        return ApiFailure(FailureKind.MALFORMED, f"invalid JSON: {error.msg}")
    return ApiFailure(FailureKind.INTERNAL, f"{type(error).__name__}: {error}")


class ApiDispatcher:
    """
    Routes request envelopes to backend handlers, one task per request.

    The handlers are held by reference and shared by every task.

    Example:
        dispatcher = ApiDispatcher(elasticsearch=handler)
        task = asyncio.create_task(dispatcher.run(req_queue, res_queue))
    """

    def __init__(self, elasticsearch: ElasticsearchApiHandler) -> None:
        """
        Args:
            elasticsearch: Handler for Elasticsearch requests
        """
        self.elasticsearch = elasticsearch
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of dispatched tasks that have not finished."""
        return len(self._tasks)

    async def run(
        self,
        requests: "asyncio.Queue[RequestEnvelope]",
        responses: "asyncio.Queue[ResponseEnvelope]",
    ) -> None:
        """
        Receive envelopes until cancelled.

        Spawns a task per envelope and immediately goes back to the queue.
        On cancellation, outstanding tasks are cancelled too.

        Args:
            requests: Bounded queue fed by the transport controller
            responses: Queue the transport controller reads results from
        """
        logger.info("ApiDispatcher running...")
        try:
            while True:
                envelope = await requests.get()
                logger.debug(f"Receive request {envelope.request_id}: {envelope.event!r}")
                self.dispatch(envelope, responses)
        finally:
            for task in list(self._tasks):
                task.cancel()
            logger.info("ApiDispatcher stopped")

    def dispatch(
        self,
        envelope: RequestEnvelope,
        responses: "asyncio.Queue[ResponseEnvelope]",
    ) -> asyncio.Task:
        """
        Spawn the task that handles one envelope.

        The task is tracked until done so it is not garbage collected
        mid-flight.

        Returns:
            The spawned task
        """
        task = asyncio.create_task(
            self._handle(envelope, responses),
            name=f"dispatch-{envelope.request_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _handle(
        self,
        envelope: RequestEnvelope,
        responses: "asyncio.Queue[ResponseEnvelope]",
    ) -> None:
        label = describe_request(envelope.event)
        try:
            result: ResponseEvent | ApiFailure = await self._route(envelope)
            logger.debug(f"Request {envelope.request_id} ({label}) succeeded")
        except Exception as e:
            result = classify_error(e)
            if result.kind == FailureKind.INTERNAL:
                logger.exception(f"Request {envelope.request_id} ({label}) crashed")
            else:
                logger.warning(f"Request {envelope.request_id} ({label}) failed: {result}")

        await responses.put(ResponseEnvelope(envelope.request_id, result))

    async def _route(self, envelope: RequestEnvelope) -> ResponseEvent:
        event = envelope.event
        if isinstance(event, ELASTICSEARCH_REQUESTS):
            return await self.elasticsearch.handle(event)
        raise TypeError(f"no backend for request {event!r}")
