"""Tests for TransportController and TransportStats."""

import asyncio
import logging
from datetime import datetime

import httpx
import pytest

from clusterscope.api.dispatcher import ApiDispatcher
from clusterscope.api.types import (
    ApiFailure,
    FailureKind,
    FetchCluster,
    FetchIndices,
    IndicesResponse,
    ResponseEnvelope,
)
from clusterscope.config import Settings
from clusterscope.transport import (
    TransportController,
    TransportRecord,
    TransportStats,
)

from conftest import make_config, make_index


def make_record(request_id: int, ok: bool = True) -> TransportRecord:
    now = datetime.now()
    return TransportRecord(
        request_id=request_id,
        request=FetchCluster("a"),
        outcome="unreachable: down" if not ok else "ok",
        ok=ok,
        issued_at=now,
        completed_at=now,
        latency=0.01,
    )


def make_controller(handler, history_size: int = 100) -> TransportController:
    controller = TransportController(ApiDispatcher(elasticsearch=handler), history_size)
    controller.start()
    return controller


async def indices_for(request):
    return IndicesResponse(request.cluster_name, [make_index(f"{request.cluster_name}-1")])


class TestTransportStats:
    """Tests for the counters and the history ring."""

    def test_push_keeps_newest_first(self):
        stats = TransportStats(history_size=3)
        for request_id in range(1, 4):
            stats.push(make_record(request_id))

        assert [r.request_id for r in stats.history()] == [3, 2, 1]
        assert stats.latest().request_id == 3

    def test_ring_grows_to_twice_capacity(self):
        """The ring may hold up to 2N records before truncation."""
        stats = TransportStats(history_size=3)
        for request_id in range(1, 7):
            stats.push(make_record(request_id))

        assert len(stats.history()) == 6

    def test_ring_truncates_to_capacity(self):
        stats = TransportStats(history_size=3)
        for request_id in range(1, 8):
            stats.push(make_record(request_id))

        assert [r.request_id for r in stats.history()] == [7, 6, 5]

    def test_ring_never_exceeds_twice_capacity(self):
        stats = TransportStats(history_size=5)
        for request_id in range(1, 200):
            stats.push(make_record(request_id))
            assert len(stats.history()) <= 10
        assert stats.latest().request_id == 199

    def test_failed_records_are_counted(self):
        stats = TransportStats()
        stats.push(make_record(1))
        stats.push(make_record(2, ok=False))

        assert stats.failed == 1

    def test_in_flight_never_negative(self):
        stats = TransportStats()
        assert stats.decrement_in_flight() == 0
        assert stats.in_flight == 0

        assert stats.increment_in_flight() == 1
        assert stats.decrement_in_flight() == 0

    def test_snapshot_is_a_copy(self):
        stats = TransportStats()
        stats.increment_in_flight()
        stats.push(make_record(1))

        snapshot = stats.snapshot()
        stats.push(make_record(2))

        assert snapshot.in_flight == 1
        assert [r.request_id for r in snapshot.history] == [1]
        assert snapshot.latest.request_id == 1

    def test_empty_snapshot_has_no_latest(self):
        assert TransportStats().snapshot().latest is None


class TestSend:
    """Tests for send()."""

    @pytest.mark.asyncio
    async def test_ids_strictly_increase(self, mock_handler):
        mock_handler.handle.side_effect = indices_for
        controller = make_controller(mock_handler)
        try:
            ids = await controller.send_requests(
                [FetchIndices("a"), FetchIndices("b"), FetchIndices("c")]
            )
            assert ids == sorted(ids)
            assert len(set(ids)) == 3
        finally:
            await controller.close()

    @pytest.mark.asyncio
    async def test_send_tracks_in_flight(self, mock_handler):
        gate = asyncio.Event()

        async def blocked(request):
            await gate.wait()
            return await indices_for(request)

        mock_handler.handle.side_effect = blocked
        controller = make_controller(mock_handler)
        try:
            request_id = await controller.send(FetchIndices("a"))

            assert controller.stats().in_flight == 1
            assert controller.in_flight_ids() == [request_id]
            assert controller.in_flight_entry(request_id).request == FetchIndices("a")

            gate.set()
            envelope = await controller.recv()

            assert envelope.request_id == request_id
            assert controller.stats().in_flight == 0
            assert controller.in_flight_ids() == []
        finally:
            await controller.close()

    @pytest.mark.asyncio
    async def test_send_after_close_is_dropped(self, mock_handler):
        controller = make_controller(mock_handler)
        await controller.close()

        assert not controller.accepting
        assert await controller.send(FetchIndices("a")) is None
        assert controller.stats().in_flight == 0

    @pytest.mark.asyncio
    async def test_send_before_start_is_dropped(self, mock_handler):
        controller = TransportController(ApiDispatcher(elasticsearch=mock_handler))

        assert await controller.send_requests([FetchIndices("a")]) == []


class TestRecv:
    """Tests for recv() correlation."""

    @pytest.mark.asyncio
    async def test_responses_arrive_in_completion_order(self, mock_handler):
        slow = asyncio.Event()

        async def handle(request):
            if request.cluster_name == "a":
                await slow.wait()
            return await indices_for(request)

        mock_handler.handle.side_effect = handle
        controller = make_controller(mock_handler)
        try:
            first = await controller.send(FetchIndices("a"))
            second = await controller.send(FetchIndices("b"))

            envelope = await asyncio.wait_for(controller.recv(), timeout=1)
            assert envelope.request_id == second
            assert envelope.result.cluster_name == "b"

            slow.set()
            envelope = await asyncio.wait_for(controller.recv(), timeout=1)
            assert envelope.request_id == first
            assert envelope.result.cluster_name == "a"
        finally:
            await controller.close()

    @pytest.mark.asyncio
    async def test_unknown_id_is_dropped(self, mock_handler):
        mock_handler.handle.side_effect = indices_for
        controller = make_controller(mock_handler)
        try:
            await controller._responses.put(
                ResponseEnvelope(999, IndicesResponse("a", []))
            )
            request_id = await controller.send(FetchIndices("b"))

            envelope = await asyncio.wait_for(controller.recv(), timeout=1)

            assert envelope.request_id == request_id
            assert controller.stats().unmatched == 1
            assert [r.request_id for r in controller.stats().history()] == [request_id]
        finally:
            await controller.close()

    @pytest.mark.asyncio
    async def test_duplicate_response_is_dropped(self, mock_handler):
        """An id is removed from in-flight exactly once."""
        mock_handler.handle.side_effect = indices_for
        controller = make_controller(mock_handler)
        try:
            request_id = await controller.send(FetchIndices("a"))
            envelope = await asyncio.wait_for(controller.recv(), timeout=1)

            await controller._responses.put(envelope)
            second = await controller.send(FetchIndices("b"))
            envelope = await asyncio.wait_for(controller.recv(), timeout=1)

            assert envelope.request_id == second != request_id
            assert controller.stats().unmatched == 1
            assert controller.stats().in_flight == 0
        finally:
            await controller.close()

    @pytest.mark.asyncio
    async def test_failure_is_recorded(self, mock_handler):
        mock_handler.handle.side_effect = httpx.ConnectError("connection refused")
        controller = make_controller(mock_handler)
        try:
            await controller.send(FetchCluster("a"))
            envelope = await asyncio.wait_for(controller.recv(), timeout=1)

            assert not envelope.ok
            assert isinstance(envelope.result, ApiFailure)
            assert envelope.result.kind == FailureKind.UNREACHABLE

            stats = controller.stats()
            assert stats.failed == 1
            assert stats.in_flight == 0
            latest = stats.latest()
            assert not latest.ok
            assert "unreachable" in latest.summary()
        finally:
            await controller.close()

    @pytest.mark.asyncio
    async def test_history_bounded_under_load(self, mock_handler):
        mock_handler.handle.side_effect = indices_for
        controller = make_controller(mock_handler, history_size=4)
        try:
            for _ in range(25):
                await controller.send(FetchIndices("a"))
                await asyncio.wait_for(controller.recv(), timeout=1)
                assert len(controller.stats().history()) <= 8

            assert controller.stats().latest().request_id == 25
        finally:
            await controller.close()


class TestInit:
    @pytest.mark.asyncio
    async def test_init_builds_clients_and_starts(self, caplog):
        caplog.set_level(logging.INFO, logger="clusterscope.transport")

        controller = TransportController.init(make_config("a", "b"), Settings())
        try:
            assert controller.accepting
            assert "Elasticsearch clients: a, b" in caplog.text
        finally:
            await controller.close()


class TestClose:
    @pytest.mark.asyncio
    async def test_close_closes_handler(self, mock_handler):
        controller = make_controller(mock_handler)
        await controller.close()

        mock_handler.aclose.assert_awaited_once()
