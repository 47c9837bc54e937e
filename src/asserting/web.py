"""HTTP and JSON helpers for testing WSGI applications."""

from __future__ import annotations

import json
import logging
import threading
from http import HTTPStatus
from typing import Any, Callable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import requests
from pydantic import BaseModel, ValidationError

from asserting.case import TestCase

logger = logging.getLogger("asserting.web")

WSGIApp = Callable[..., Any]


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} - {format % args}")


class TestServer:
    """A WSGI app served on a random local port from a daemon thread."""

    __test__ = False

    def __init__(self, app: WSGIApp, host: str = "127.0.0.1"):
        self._server: WSGIServer = make_server(
            host, 0, app, handler_class=_QuietHandler
        )
        self.url = f"http://{host}:{self._server.server_port}"
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="asserting-test-server", daemon=True
        )
        self._thread.start()
        logger.debug(f"Test server listening on {self.url}")

    def close(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()
        logger.debug(f"Test server on {self.url} stopped")


class WebTestCase(TestCase):
    """TestCase that keeps the last HTTP response for later assertions.

    Pass a WSGI application to start an ephemeral server for it. The server
    is released by ``close()`` or when the case is used as a context manager.
    """

    def __init__(self, app: WSGIApp | None = None, timeout: float = 10.0):
        self.server = TestServer(app) if app is not None else None
        self.timeout = timeout
        self.response: requests.Response | None = None
        self.response_body: bytes = b""

    def __enter__(self) -> WebTestCase:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self.server is not None:
            self.server.close()
            self.server = None

    def _request(self, method: str, path: str, **kwargs: Any) -> None:
        if self.server is None:
            self._fail_at("Uninitialized test server", None)
        url = self.server.url + path
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            self.response = None
            self.response_body = b""
            self._fail_at(f"Request error: {e}", None)
        self.response = response
        self.response_body = response.content

    def get(self, path: str) -> None:
        """Issue a GET request and keep the response."""
        self._request("GET", path)

    def post(self, path: str, content_type: str, body: bytes) -> None:
        """Issue a POST request and keep the response."""
        self._request("POST", path, data=body, headers={"Content-Type": content_type})

    def put(self, path: str, content_type: str, body: bytes) -> None:
        """Issue a PUT request and keep the response."""
        self._request("PUT", path, data=body, headers={"Content-Type": content_type})

    def _status_of(self, code: int | None, location: str | None) -> int:
        if code is not None:
            return code
        if self.response is None:
            self._fail_at("Response is None", location)
        return self.response.status_code

    def assert_ok(self, code: int | None = None, location: str | None = None) -> None:
        """Test for HTTP 200, on ``code`` or the last response."""
        actual = self._status_of(code, location)
        if actual != HTTPStatus.OK:
            self._fail_at(f"Expected 200, got {actual}", location)

    def assert_created(
        self, code: int | None = None, location: str | None = None
    ) -> None:
        actual = self._status_of(code, location)
        if actual != HTTPStatus.CREATED:
            self._fail_at(f"Expected 201, got {actual}", location)

    def assert_status(self, code: int, location: str | None = None) -> None:
        """Test the last response for a specific status code."""
        actual = self._status_of(None, location)
        if actual != code:
            self._fail_at(f"Expected {code}, got {actual}", location)

    def marshal(self, value: Any) -> bytes:
        """Convert value to JSON, an error makes the test fail."""
        if isinstance(value, BaseModel):
            return value.model_dump_json().encode()
        try:
            return json.dumps(value).encode()
        except (TypeError, ValueError) as e:
            self._fail_at(f"Failed to marshal data: {e}", None)

    def unmarshal(self, model: type[BaseModel] | None = None) -> Any:
        """Parse the last response body, into ``model`` when given."""
        if self.response is None:
            self._fail_at("Response is None", None)
        try:
            if model is not None:
                return model.model_validate_json(self.response_body)
            return json.loads(self.response_body)
        except (ValidationError, ValueError) as e:
            self._fail_at(f"Failed to unmarshal response body data: {e}", None)
