"""Tests for the exception hierarchy and its helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import httpx
import pytest

from httptext import FetchOptions
from httptext.exceptions import (
    BadGatewayError,
    ClientError,
    ContentError,
    DecompressionError,
    FetchError,
    HTTPError,
    InvalidDestinationError,
    InvalidSettingsError,
    InvalidURLError,
    NetworkError,
    NotFoundError,
    PayloadSizeLimitError,
    RateLimitError,
    ServerError,
    TimeoutError as FetchTimeoutError,
    UnsupportedCharsetError,
    UnsupportedMediaTypeError,
    ValidationError,
    classify_http_error,
    retry_after_from_response,
)


class TestHierarchy:
    """Test base classes and default messages."""

    def test_everything_is_a_fetch_error(self):
        for exc in (
            InvalidURLError(message="", url=""),
            FetchTimeoutError(message="slow"),
            NotFoundError(message=""),
            DecompressionError(message=""),
            UnsupportedCharsetError(message="", charset="klingon"),
        ):
            assert isinstance(exc, FetchError)
            assert isinstance(exc, Exception)

    def test_branches(self):
        assert issubclass(InvalidDestinationError, ValidationError)
        assert issubclass(FetchTimeoutError, NetworkError)
        assert issubclass(UnsupportedMediaTypeError, ContentError)
        assert not issubclass(UnsupportedMediaTypeError, HTTPError)

    def test_default_messages(self):
        assert PayloadSizeLimitError(message="", actual_size=2048, max_size=1024).message == (
            "Payload size 2,048 bytes exceeds limit of 1,024 bytes"
        )
        assert "klingon" in UnsupportedCharsetError(message="", charset="klingon", source="header").message
        assert InvalidDestinationError(message="").message.startswith("A writable sink")

    def test_str_includes_url_and_context(self):
        exc = NotFoundError(message="", url="http://test.local/x", context={"attempt": 1})

        assert str(exc) == "HTTP 404 | url=http://test.local/x | context=(attempt=1)"

    def test_cause_is_chained(self):
        cause = ValueError("bad")
        exc = DecompressionError(message="", cause=cause)

        assert exc.__cause__ is cause

    def test_package_exports_match_module(self):
        import httptext
        from httptext import exceptions

        assert not hasattr(exceptions, "ContentTypeError")
        for name in exceptions.__all__:
            assert getattr(httptext, name) is getattr(exceptions, name)

    def test_content_errors(self):
        assert {cls.__name__ for cls in ContentError.__subclasses__()} == {
            "DecompressionError",
            "EncodingError",
            "InvalidJSONError",
            "UnsupportedMediaTypeError",
        }

    def test_can_be_raised_and_caught(self):
        with pytest.raises(ClientError) as exc_info:
            raise NotFoundError(message="", url="http://test.local/x")

        assert exc_info.value.status_code == 404


class TestOptionsValidation:
    """Test FetchOptions argument checks."""

    def test_non_positive_timeout(self):
        with pytest.raises(InvalidSettingsError) as exc_info:
            FetchOptions(timeout=0)

        assert exc_info.value.setting_name == "timeout"

    def test_blank_method(self):
        with pytest.raises(InvalidSettingsError):
            FetchOptions(method=" ")


class TestClassifyHttpError:
    """Test status code to exception mapping."""

    @pytest.mark.parametrize(
        ("status", "cls"),
        [
            (404, NotFoundError),
            (418, ClientError),
            (502, BadGatewayError),
            (599, ServerError),
            (304, HTTPError),
        ],
    )
    def test_mapping(self, status, cls):
        exc = classify_http_error(status, "http://test.local/x")

        assert type(exc) is cls
        assert exc.status_code == status
        assert exc.url == "http://test.local/x"

    def test_rate_limit_retry_after(self):
        response = httpx.Response(429, headers={"Retry-After": "7"})

        exc = classify_http_error(429, "http://test.local/x", response=response)

        assert isinstance(exc, RateLimitError)
        assert exc.retry_after == 7.0
        assert "Retry after 7.0s" in exc.message

    def test_service_unavailable_retry_after(self):
        response = httpx.Response(503, headers={"Retry-After": "30"})

        exc = classify_http_error(503, "http://test.local/x", response=response)

        assert isinstance(exc, ServerError)
        assert exc.retry_after == 30.0
        assert exc.message == "Service unavailable (HTTP 503), retry after 30.0s"


class TestRetryAfter:
    """Test Retry-After parsing."""

    def test_seconds(self):
        assert retry_after_from_response(httpx.Response(503, headers={"Retry-After": "120"})) == 120.0

    def test_http_date(self):
        when = datetime.now(timezone.utc) + timedelta(seconds=60)
        response = httpx.Response(503, headers={"Retry-After": format_datetime(when, usegmt=True)})

        assert 0.0 < retry_after_from_response(response) <= 60.0

    def test_missing_or_malformed(self):
        assert retry_after_from_response(None) is None
        assert retry_after_from_response(httpx.Response(503)) is None
        assert retry_after_from_response(httpx.Response(503, headers={"Retry-After": "soon"})) is None
