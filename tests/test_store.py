"""Tests for local collaborators: message store, endpoint source, activity log."""

import json
import pytest

from smssync.activity_log import FileLogSink, MemoryLogSink
from smssync.models import EndpointStatus, Message, MessageStatus, SyncEndpoint
from smssync.store import InMemoryMessageStore, StaticEndpointSource


class TestInMemoryMessageStore:
    """Tests for InMemoryMessageStore."""

    def test_fetch_known_and_unknown(self):
        store = InMemoryMessageStore([Message(uuid="a")])

        assert store.fetch_pending_by_uuid("a").uuid == "a"
        assert store.fetch_pending_by_uuid("b") is None

    def test_lookup_ignores_local_status(self):
        """Test sent and failed messages are still returned."""
        store = InMemoryMessageStore([
            Message(uuid="sent", status=MessageStatus.SENT),
            Message(uuid="failed", status=MessageStatus.FAILED),
        ])

        assert store.fetch_pending_by_uuid("sent") is not None
        assert store.fetch_pending_by_uuid("failed") is not None

    def test_add_replaces(self):
        store = InMemoryMessageStore()
        store.add(Message(uuid="a", body="first"))
        store.add(Message(uuid="a", body="second"))

        assert len(store) == 1
        assert store.fetch_pending_by_uuid("a").body == "second"

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "messages.yaml"
        path.write_text(
            """
messages:
  - uuid: m1
    body: hello
    status: sent
    sent_result_code: 0
  - uuid: m2
"""
        )
        store = InMemoryMessageStore()

        count = store.load_messages(path)

        assert count == 2
        assert store.fetch_pending_by_uuid("m1").sent_result_code == 0

    def test_load_json(self, tmp_path):
        path = tmp_path / "messages.json"
        path.write_text(json.dumps([{"uuid": "m1", "delivered_date": 1767225600000}]))
        store = InMemoryMessageStore()

        store.load_messages(path)

        assert store.fetch_pending_by_uuid("m1").delivered_date.year == 2026

    def test_load_rejects_non_list(self, tmp_path):
        path = tmp_path / "messages.yaml"
        path.write_text("just a string\n")

        with pytest.raises(ValueError):
            InMemoryMessageStore().load_messages(path)


class TestStaticEndpointSource:
    def test_filters_by_status(self):
        on = SyncEndpoint(url="http://on")
        off = SyncEndpoint(url="http://off", status=EndpointStatus.DISABLED)
        source = StaticEndpointSource([on, off])

        assert source.get(EndpointStatus.ENABLED) == [on]
        assert source.get(EndpointStatus.DISABLED) == [off]


class TestActivityLog:
    """Tests for log sinks."""

    def test_file_sink_appends(self, tmp_path):
        """Test lines are appended with a timestamp and parents created."""
        sink = FileLogSink(tmp_path / "logs" / "activity.log")

        sink.append("first")
        sink.append("second")

        lines = sink.read_lines()
        assert len(lines) == 2
        assert lines[0].endswith(" first")
        assert lines[1].endswith(" second")
        assert sink.read_lines(limit=1) == lines[1:]

    def test_file_sink_missing_file(self, tmp_path):
        assert FileLogSink(tmp_path / "none.log").read_lines() == []

    def test_memory_sink(self):
        sink = MemoryLogSink()
        sink.append("hello")
        assert sink.lines == ["hello"]
