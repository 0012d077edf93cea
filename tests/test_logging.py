"""Tests for the logging adapter and the events clients emit."""

from __future__ import annotations

import logging

import pytest

from httptext import DataFetch
from httptext.exceptions import NotFoundError
from httptext.observability.logging import (
    configure_logging,
    get_httptext_logger,
    log_content_processing,
)

BASE = "http://test.local"


@pytest.fixture(autouse=True)
def reset_factory():
    yield
    configure_logging(None)


class RecordingAdapter(logging.LoggerAdapter):
    """Collects (level, event, extra) tuples instead of emitting records."""

    def __init__(self, sink: list) -> None:
        super().__init__(logging.getLogger("test.recording"), {})
        self.sink = sink

    def log(self, level, msg, *args, **kwargs):
        self.sink.append((level, msg, kwargs.get("extra", {})))


class TestAdapter:
    """Test HttptextLoggerAdapter with the default factory."""

    def test_bound_and_event_fields_reach_the_record(self, caplog):
        caplog.set_level(logging.DEBUG, logger="httptext.test")
        logger = get_httptext_logger("httptext.test", url="http://test.local/a", method="GET")

        logger.bind(attempt=2).info("request.started", mode="text")

        record = caplog.records[-1]
        assert record.getMessage() == "request.started"
        assert record.url == "http://test.local/a"
        assert record.method == "GET"
        assert record.attempt == 2
        assert record.mode == "text"

    def test_content_processing_event(self, caplog):
        caplog.set_level(logging.DEBUG, logger="httptext.test")
        logger = get_httptext_logger("httptext.test")

        log_content_processing(logger, operation="decode", charset="utf-8", size_bytes=10)

        record = caplog.records[-1]
        assert record.levelno == logging.DEBUG
        assert record.getMessage() == "content.decode"
        assert record.charset == "utf-8"

    def test_custom_factory(self):
        events = []
        configure_logging(lambda name, **context: RecordingAdapter(events))

        get_httptext_logger("anything").warning("content.unsupported_charset", charset="klingon")

        assert events == [(logging.WARNING, "content.unsupported_charset", {"charset": "klingon"})]


class TestClientEvents:
    """Test the events emitted around a request."""

    @pytest.mark.asyncio
    async def test_request_lifecycle(self, server, settings, caplog):
        caplog.set_level(logging.DEBUG, logger="httptext")
        server.respond("/page.txt", b"hello", {"Content-Type": "text/plain"})

        async with DataFetch(settings) as client:
            await client.fetch_text(f"{BASE}/page.txt")

        messages = [r.getMessage() for r in caplog.records]
        assert "client.initialized" in messages
        assert "request.started" in messages
        assert "content.decode" in messages
        assert "request.completed" in messages
        assert "client.closed" in messages

        completed = next(r for r in caplog.records if r.getMessage() == "request.completed")
        assert completed.status_code == 200
        assert completed.size_bytes == 5

    @pytest.mark.asyncio
    async def test_request_failure(self, settings, caplog):
        caplog.set_level(logging.DEBUG, logger="httptext")

        async with DataFetch(settings) as client:
            with pytest.raises(NotFoundError):
                await client.fetch_text(f"{BASE}/missing")

        failed = [r for r in caplog.records if r.getMessage() == "request.failed"]
        assert len(failed) == 1
        assert failed[0].levelno == logging.ERROR
        assert failed[0].error_type == "NotFoundError"
