"""Tests for task URL construction."""

import pytest

from smssync.activity_log import MemoryLogSink, Messages
from smssync.sync.urls import build_task_url, encode_secret, redact_secret


class TestBuildTaskUrl:
    """Tests for build_task_url."""

    @pytest.mark.parametrize("secret", [None, ""])
    def test_without_secret(self, secret):
        """Test no secret parameter is added without a secret."""
        url = build_task_url("http://example.com/sync", "result", secret)

        assert url == "http://example.com/sync?task=result"
        assert "secret=" not in url

    def test_with_secret(self):
        """Test exactly one encoded secret parameter is added."""
        url = build_task_url("http://example.com/sync", "result", "p@ss word&x=1")

        assert url == "http://example.com/sync?task=result&secret=p%40ss+word%26x%3D1"
        assert url.count("secret=") == 1

    def test_sent_task(self):
        url = build_task_url("http://example.com/sync", "sent", "abc")
        assert url == "http://example.com/sync?task=sent&secret=abc"

    def test_base_with_query(self):
        """Test a base URL that already has a query string."""
        url = build_task_url("http://example.com/sync?key=1", "result")
        assert url == "http://example.com/sync?key=1&task=result"

    def test_base_with_trailing_question_mark(self):
        url = build_task_url("http://example.com/sync?", "result")
        assert url == "http://example.com/sync?task=result"


class TestEncodeSecret:
    """Tests for encode_secret."""

    def test_unicode_is_utf8_encoded(self):
        assert encode_secret("café") == "caf%C3%A9"

    def test_form_encoding_of_star_and_tilde(self):
        """Test star stays literal and tilde is percent-encoded."""
        assert encode_secret("a*b~c") == "a*b%7Ec"

    def test_encoding_failure_falls_back_to_raw(self):
        """Test an unencodable secret is logged and used as-is."""
        sink = MemoryLogSink()
        secret = "bad\udc80"

        encoded = encode_secret(secret, sink)

        assert encoded == secret
        assert len(sink.lines) == 1
        assert sink.lines[0].startswith(Messages.SECRET_ENCODING_FAILED)


def test_redact_secret():
    url = "http://example.com/sync?task=result&secret=abc%20d"
    assert redact_secret(url) == "http://example.com/sync?task=result&secret=***"
