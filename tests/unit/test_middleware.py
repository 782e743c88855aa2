"""
Unit tests for the middleware pipeline and logging middleware.
"""

import json
import logging

import pytest

from tinyhttpd.middleware import Middleware, MiddlewarePipeline, LoggingMiddleware
from tinyhttpd.http.request import HTTPRequest
from tinyhttpd.http.response import text, not_found


def make_request(path: str = "/echo/hi") -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path=path,
        headers=["User-Agent: pytest"],
        client_address=("127.0.0.1", 5555),
    )


class RecordingMiddleware(Middleware):
    """Appends its tag before and after calling next."""

    def __init__(self, tag: str, calls: list):
        self.tag = tag
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.tag}:before")
        response = next(request)
        self.calls.append(f"{self.tag}:after")
        return response


class ShortCircuitMiddleware(Middleware):
    def __call__(self, request, next):
        return not_found()


class TestMiddlewarePipeline:
    """Tests for MiddlewarePipeline."""

    def test_empty_pipeline(self):
        """Test an empty pipeline returns the handler unchanged."""
        pipeline = MiddlewarePipeline()

        def handler(request):
            return text("ok")

        assert len(pipeline) == 0
        assert pipeline.wrap(handler) is handler

    def test_execution_order(self):
        """Test the first middleware added is the outermost."""
        calls = []
        pipeline = MiddlewarePipeline()
        pipeline.add(RecordingMiddleware("a", calls)).add(RecordingMiddleware("b", calls))

        def handler(request):
            calls.append("handler")
            return text("ok")

        pipeline.wrap(handler)(make_request())

        assert len(pipeline) == 2
        assert calls == ["a:before", "b:before", "handler", "b:after", "a:after"]

    def test_short_circuit(self):
        """Test a middleware can answer without calling next."""
        pipeline = MiddlewarePipeline().add(ShortCircuitMiddleware())

        def handler(request):
            raise AssertionError("handler must not run")

        response = pipeline.wrap(handler)(make_request())
        assert response.status == 404

    def test_middleware_name(self):
        """Test the default name is the class name."""
        assert ShortCircuitMiddleware().name == "ShortCircuitMiddleware"


class TestLoggingMiddleware:
    """Tests for LoggingMiddleware."""

    def test_text_access_log(self, caplog):
        """Test one access line with client, method, path, status and size."""
        middleware = LoggingMiddleware()

        with caplog.at_level(logging.INFO, logger="tinyhttpd.access"):
            response = middleware(make_request(), lambda request: text("hi"))

        assert response.body == b"hi"
        records = [r for r in caplog.records if r.name == "tinyhttpd.access"]
        assert len(records) == 1
        message = records[0].getMessage()
        assert message.startswith("127.0.0.1 - - [")
        assert '"GET /echo/hi" 200 2 ' in message
        assert message.endswith("ms")

    def test_json_access_log(self, caplog):
        """Test the JSON format is one parseable object."""
        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger="tinyhttpd.access"):
            middleware(make_request(), lambda request: not_found())

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["method"] == "GET"
        assert entry["path"] == "/echo/hi"
        assert entry["status_code"] == 404
        assert entry["content_length"] == 0
        assert entry["user_agent"] == "pytest"
        assert entry["duration_ms"] >= 0

    def test_skip_paths(self, caplog):
        """Test skipped paths produce no access line."""
        middleware = LoggingMiddleware(skip_paths=["/"])

        with caplog.at_level(logging.INFO, logger="tinyhttpd.access"):
            middleware(make_request("/"), lambda request: text(""))

        assert not [r for r in caplog.records if r.name == "tinyhttpd.access"]

    def test_exception_logged_and_reraised(self, caplog):
        """Test handler errors are logged and propagated."""
        middleware = LoggingMiddleware()

        def failing(request):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="tinyhttpd.access"):
            with pytest.raises(RuntimeError):
                middleware(make_request(), failing)

        assert "Request failed: GET /echo/hi - RuntimeError: boom" in caplog.text

    def test_unknown_format(self):
        """Test an unsupported format is rejected."""
        with pytest.raises(ValueError):
            LoggingMiddleware(log_format="xml")
