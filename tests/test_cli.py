"""Tests for the command line interface."""

import json
import sys
import pytest
from unittest.mock import MagicMock, patch

from smssync.__main__ import JSONFormatter, main
from smssync.net import HttpResponse


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for key in ("ENDPOINT_URL", "ENDPOINT_SECRET", "ACTIVITY_LOG", "MESSAGES_PATH"):
        monkeypatch.delenv(f"SMSSYNC_{key}", raising=False)

    messages = tmp_path / "messages.yaml"
    messages.write_text("- uuid: uuid-a\n  sent_result_code: 0\n")

    path = tmp_path / "config.yaml"
    path.write_text(
        f"""
activity_log:
  path: {tmp_path / 'activity.log'}
store:
  messages_path: {messages}
endpoints:
  - url: http://example.com/sync
    secret: topsecret
    title: Main
"""
    )
    return path


def run_cli(monkeypatch, *argv) -> int:
    monkeypatch.setattr(sys, "argv", ["smssync", *argv])
    return main()


class TestCli:
    """Tests for CLI commands."""

    def test_no_command(self, monkeypatch):
        assert run_cli(monkeypatch) == 1

    def test_endpoints_masks_secret(self, monkeypatch, config_file, capsys):
        """Test the endpoint listing never prints the secret."""
        code = run_cli(monkeypatch, "-c", str(config_file), "endpoints", "--json")

        out = capsys.readouterr().out
        assert code == 0
        assert "topsecret" not in out
        assert json.loads(out)[0]["url"] == "http://example.com/sync"

    def test_sync(self, monkeypatch, config_file, capsys, tmp_path):
        """Test a sync pass posts the result for the locally-known UUID."""
        transport = MagicMock()
        transport.execute.side_effect = [
            HttpResponse(200, json.dumps({"message_uuids": ["uuid-a", "uuid-z"]}), "OK"),
            HttpResponse(200, "", "OK"),
        ]

        with patch("smssync.__main__.HttpxTransport", return_value=transport):
            code = run_cli(monkeypatch, "-c", str(config_file), "sync")

        out = capsys.readouterr().out
        assert code == 0
        assert "Local messages: 1" in out
        assert "Results posted: 1" in out
        assert "UUIDs not found locally: 1" in out
        transport.close.assert_called_once()
        assert (tmp_path / "activity.log").read_text().strip().endswith(
            "Messages processed successfully"
        )

    def test_send_queued_failure_exit_code(self, monkeypatch, config_file, capsys):
        """Test a failed queued-message report exits non-zero."""
        transport = MagicMock()
        transport.execute.return_value = HttpResponse(500, "", "Internal Server Error")

        with patch("smssync.__main__.HttpxTransport", return_value=transport):
            code = run_cli(monkeypatch, "-c", str(config_file), "send-queued", "q1")

        assert code == 1
        assert "failed (500)" in capsys.readouterr().out

    def test_no_enabled_endpoints(self, monkeypatch, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("endpoints: []\n")
        monkeypatch.delenv("SMSSYNC_ENDPOINT_URL", raising=False)

        assert run_cli(monkeypatch, "-c", str(path), "fetch") == 1

    def test_only_disabled_endpoints(self, monkeypatch, tmp_path):
        """Test disabled endpoints are not contacted."""
        path = tmp_path / "config.yaml"
        path.write_text("endpoints:\n  - url: http://x\n    status: disabled\n")
        monkeypatch.delenv("SMSSYNC_ENDPOINT_URL", raising=False)

        with patch("smssync.__main__.HttpxTransport") as transport_cls:
            assert run_cli(monkeypatch, "-c", str(path), "send-queued", "q1") == 1

        transport_cls.assert_not_called()

    def test_activity_shows_last_lines(self, monkeypatch, config_file, capsys, tmp_path):
        """Test the activity command prints the newest log lines."""
        (tmp_path / "activity.log").write_text("line one\nline two\nline three\n")

        code = run_cli(monkeypatch, "-c", str(config_file), "activity", "-n", "2")

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["line two", "line three"]

    def test_activity_empty(self, monkeypatch, config_file, capsys):
        assert run_cli(monkeypatch, "-c", str(config_file), "activity") == 0
        assert "No activity recorded" in capsys.readouterr().out

    def test_config_error_exit_code(self, monkeypatch, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("endpoints:\n  - secret: abc\n")

        assert run_cli(monkeypatch, "-c", str(path), "endpoints") == 2


def test_json_formatter():
    """Test log records are rendered as JSON lines."""
    import logging

    record = logging.LogRecord("smssync.sync", logging.INFO, __file__, 1, "hello %s", ("world",), None)

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["component"] == "smssync.sync"
    assert data["message"] == "hello world"


def test_bad_timeout_in_file_exit_code(monkeypatch, tmp_path):
    """Test a bad YAML value is reported as a configuration error."""
    path = tmp_path / "config.yaml"
    path.write_text("http:\n  timeout_seconds: abc\n")

    assert run_cli(monkeypatch, "-c", str(path), "endpoints") == 2
