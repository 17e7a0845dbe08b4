"""Pytest configuration - loads .env and provides a local fake ClickUp API."""

import json
import sys
import threading
from dataclasses import dataclass, field
from email.message import Message
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest
from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

CLICKUP_ENV_VARS = (
    "CLICKUP_API_KEY",
    "CLICKUP_WORKSPACE_ID",
    "CLICKUP_TEAM_ID",
    "CLICKUP_BASE_URL",
    "CLICKUP_TIMEOUT",
    "CLICKUP_CLI_JSON",
    "CLICKUP_CLI_PLAIN",
)


# =============================================================================
# Fake API server
# =============================================================================


@dataclass
class RecordedRequest:
    """A request as the server saw it."""

    method: str
    target: str
    headers: Message
    body: bytes

    @property
    def path(self) -> str:
        return urlsplit(self.target).path

    @property
    def query(self) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.target).query)

    def json(self) -> Any:
        return json.loads(self.body)


@dataclass
class CannedResponse:
    status: int = 200
    body: bytes = b"{}"
    headers: dict[str, str] = field(default_factory=dict)


def _encode(body: Any) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


class FakeAPI:
    """
    In-process HTTP server standing in for the ClickUp API.

    Routes are keyed by (method, path); the query string is ignored when
    matching. Unrouted requests get 200 with an empty JSON object.
    """

    def __init__(self) -> None:
        self.requests: list[RecordedRequest] = []
        self.routes: dict[tuple[str, str], CannedResponse] = {}
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), self._handler_class())
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def last(self) -> RecordedRequest:
        assert self.requests, "no request reached the server"
        return self.requests[-1]

    def respond(
        self,
        method: str,
        path: str,
        body: Any = None,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Register the response for (method, path)."""
        content_type = {"Content-Type": "application/json"} if not isinstance(body, (bytes, str)) else {}
        self.routes[(method, path)] = CannedResponse(status, _encode(body), {**content_type, **(headers or {})})

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)

    def _handler_class(self) -> type[BaseHTTPRequestHandler]:
        api = self

        class Handler(BaseHTTPRequestHandler):
            def _handle(self) -> None:
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                api.requests.append(RecordedRequest(self.command, self.path, self.headers, body))

                canned = api.routes.get((self.command, urlsplit(self.path).path), CannedResponse())
                self.send_response(canned.status)
                for key, value in canned.headers.items():
                    self.send_header(key, value)
                self.send_header("Content-Length", str(len(canned.body)))
                self.end_headers()
                self.wfile.write(canned.body)

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _handle

            def log_message(self, format: str, *args: Any) -> None:
                pass

        return Handler


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def api():
    """A running fake API server."""
    server = FakeAPI()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every CLICKUP_* variable the CLI reads."""
    for name in CLICKUP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_home(tmp_path, monkeypatch, clean_env):
    """Point the config directory at a temp dir."""
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path / "clickup-cli"
