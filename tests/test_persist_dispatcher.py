"""Tests del dispatcher de persistencia en background."""

import threading
from unittest.mock import MagicMock

from telemetry_ingest.errors import StoreError
from telemetry_ingest.ingest.persist_dispatcher import PersistDispatcher


class TestPersistDispatcher:

    def test_persists_submitted_packets(self, store, packet_factory):
        dispatcher = PersistDispatcher(store, num_workers=2)
        futures = [dispatcher.submit(packet_factory(i)) for i in range(10)]

        ids = [f.result(timeout=5) for f in futures]
        dispatcher.shutdown(wait=True)

        assert len(set(ids)) == 10
        assert store.count() == 10
        metrics = dispatcher.metrics
        assert metrics["submitted"] == 10
        assert metrics["persisted"] == 10
        assert metrics["errors"] == 0
        assert metrics["pending"] == 0

    def test_failures_are_absorbed(self, packet_factory):
        store = MagicMock()
        store.insert.side_effect = StoreError("connection refused")
        dispatcher = PersistDispatcher(store, num_workers=1)

        future = dispatcher.submit(packet_factory(0))
        dispatcher.shutdown(wait=True)

        assert isinstance(future.exception(), StoreError)
        assert dispatcher.metrics["errors"] == 1
        assert dispatcher.metrics["persisted"] == 0

    def test_backlog_limit_drops(self, packet_factory):
        release = threading.Event()
        store = MagicMock()
        store.insert.side_effect = lambda packet: release.wait(5) and 1
        dispatcher = PersistDispatcher(store, num_workers=1, max_pending=2)

        try:
            assert dispatcher.submit(packet_factory(0)) is not None
            assert dispatcher.submit(packet_factory(1)) is not None
            assert dispatcher.submit(packet_factory(2)) is None
            assert dispatcher.metrics["dropped"] == 1
        finally:
            release.set()
            dispatcher.shutdown(wait=True)

        assert dispatcher.metrics["persisted"] == 2

    def test_submit_after_shutdown_is_dropped(self, packet_factory):
        dispatcher = PersistDispatcher(MagicMock(), num_workers=1)
        dispatcher.shutdown(wait=True)

        assert dispatcher.submit(packet_factory(0)) is None
        assert dispatcher.metrics["dropped"] == 1
        assert dispatcher.metrics["pending"] == 0
