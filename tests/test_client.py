"""Tests for the core HTTP client against a local fake API."""

import io
import socket
import threading
import time

import pytest

from clickup_cli.core.client import (
    DEFAULT_USER_AGENT,
    APIClient,
    APIError,
    DecodeError,
    MultipartBody,
    Request,
    TransportError,
    ValidationError,
)
from clickup_cli.core.types import Attachment, Task, list_of

API_KEY = "pk_12345_TESTKEY"


@pytest.fixture
def client(api):
    return APIClient(api_key=API_KEY, base_url=api.url, timeout=5)


# =============================================================================
# Requests
# =============================================================================


class TestSend:
    """Request construction."""

    def test_url_is_base_plus_path(self, api):
        client = APIClient(api_key=API_KEY, base_url=api.url + "/api")
        client.get("/v2/user")
        assert api.last.target == "/api/v2/user"

    def test_query_string_passes_through(self, client, api):
        client.get("/v2/list/9/task?include_closed=true&page=2")
        assert api.last.path == "/v2/list/9/task"
        assert api.last.query == {"include_closed": ["true"], "page": ["2"]}

    def test_default_headers(self, client, api):
        client.get("/v2/user")
        headers = api.last.headers
        assert headers["Authorization"] == API_KEY
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"] == DEFAULT_USER_AGENT

    def test_credential_sent_verbatim(self, api):
        client = APIClient(api_key="Bearer oauth-token", base_url=api.url)
        client.get("/v2/user")
        assert api.last.headers["Authorization"] == "Bearer oauth-token"

    def test_empty_key_sends_no_authorization(self, api):
        client = APIClient(base_url=api.url)
        client.get("/v2/user")
        assert "Authorization" not in api.last.headers

    def test_header_overrides_win(self, client, api):
        client.send(Request("GET", "/v2/user", headers={"Content-Type": "text/plain", "X-Trace": "abc"}))
        headers = api.last.headers
        assert headers["Content-Type"] == "text/plain"
        assert headers["X-Trace"] == "abc"
        assert headers["Authorization"] == API_KEY

    def test_json_body(self, client, api):
        client.post("/v2/list/9/task", {"name": "Write docs", "priority": 2})
        assert api.last.method == "POST"
        assert api.last.json() == {"name": "Write docs", "priority": 2}

    def test_no_body_for_get(self, client, api):
        client.get("/v2/user")
        assert api.last.body == b""

    def test_send_returns_raw_response_for_errors(self, client, api):
        api.respond("GET", "/v2/task/x", {"err": "nope"}, status=404)
        response = client.send(Request("GET", "/v2/task/x"))
        assert response.status == 404
        assert not response.ok
        assert response.json() == {"err": "nope"}

    def test_unencodable_body_is_validation_error(self, client, api):
        with pytest.raises(ValidationError, match="marshal request body"):
            client.post("/v2/list/9/task", {"when": object()})
        assert api.requests == []

    def test_per_call_timeout(self):
        # A server that accepts but never answers.
        with socket.socket() as listener:
            listener.bind(("127.0.0.1", 0))
            listener.listen(1)
            host, port = listener.getsockname()
            client = APIClient(base_url=f"http://{host}:{port}", timeout=30)
            with pytest.raises(TransportError, match="execute request"):
                client.get("/v2/user", timeout=0.2)

    def test_connection_refused_is_transport_error(self):
        with socket.socket() as s:
            s.bind(("127.0.0.1", 0))
            host, port = s.getsockname()
        client = APIClient(base_url=f"http://{host}:{port}")
        with pytest.raises(TransportError) as exc_info:
            client.get("/v2/user")
        assert exc_info.value.exit_code == 3
        assert not hasattr(exc_info.value, "status")

    def test_malformed_base_url_is_transport_error(self):
        client = APIClient(base_url="not a url")
        with pytest.raises(TransportError, match="create request"):
            client.get("/v2/user")


# =============================================================================
# Decoding
# =============================================================================


class TestDecode:
    """Success-path decoding."""

    def test_decodes_into_type(self, client, api):
        api.respond("GET", "/v2/task/task-1", {"id": "task-1", "name": "Test task"})
        task = client.get("/v2/task/task-1", Task)
        assert isinstance(task, Task)
        assert task.id == "task-1"
        assert task.name == "Test task"

    def test_decodes_with_callable(self, client, api):
        api.respond("GET", "/v2/list/9/task", {"tasks": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}]})
        tasks = client.get("/v2/list/9/task", list_of(Task, "tasks"))
        assert [t.id for t in tasks] == ["a", "b"]

    def test_decodes_with_builtin(self, client, api):
        api.respond("GET", "/v2/team/1/plan", {"plan_id": 3, "plan_name": "Business"})
        assert client.get("/v2/team/1/plan", dict) == {"plan_id": 3, "plan_name": "Business"}

    def test_no_target_discards_body(self, client, api):
        api.respond("DELETE", "/v2/task/task-1", "this is not json")
        assert client.delete("/v2/task/task-1") is None

    def test_decode_with_body(self, client, api):
        api.respond("PUT", "/v2/task/task-1", {"id": "task-1", "name": "Renamed"})
        task = client.decode_with_body("PUT", "/v2/task/task-1", {"name": "Renamed"}, Task)
        assert task.name == "Renamed"
        assert api.last.json() == {"name": "Renamed"}

    def test_invalid_json_is_decode_error(self, client, api):
        api.respond("GET", "/v2/task/task-1", "<html>")
        with pytest.raises(DecodeError, match="decode response"):
            client.get("/v2/task/task-1", Task)

    def test_wrong_shape_is_decode_error(self, client, api):
        api.respond("GET", "/v2/task/task-1", {"name": "no id"})
        with pytest.raises(DecodeError):
            client.get("/v2/task/task-1", Task)

    def test_list_target_rejects_object(self, client, api):
        api.respond("GET", "/v2/list/9/task", {"tasks": {"id": "a"}})
        with pytest.raises(DecodeError):
            client.get("/v2/list/9/task", list_of(Task, "tasks"))

    @pytest.mark.parametrize("method", ["PATCH", "POST", "PUT"])
    def test_verbs_with_body(self, client, api, method):
        api.respond(method, "/v2/goal/g1", {"goal": {"id": "g1", "name": "Ship"}})
        result = client.decode_with_body(method, "/v2/goal/g1", {"name": "Ship"}, dict)
        assert api.last.method == method
        assert result["goal"]["id"] == "g1"


# =============================================================================
# Errors
# =============================================================================


class TestErrorResponses:
    """Status >= 400 becomes APIError and is never decoded."""

    def test_delete_forbidden(self, client, api):
        api.respond("DELETE", "/v2/task/task-1", {"error": "forbidden"}, status=403)
        with pytest.raises(APIError) as exc_info:
            client.delete("/v2/task/task-1")
        assert exc_info.value.status == 403
        assert exc_info.value.message == "forbidden"

    def test_bad_gateway_html(self, client, api):
        api.respond("GET", "/v2/task/task-1", "<html>upstream down</html>", status=502)
        with pytest.raises(APIError) as exc_info:
            client.get("/v2/task/task-1", Task)
        assert exc_info.value.status == 502
        assert exc_info.value.message == "Bad Gateway"

    def test_unrecognized_fields_fall_back(self, client, api):
        api.respond("GET", "/v2/task/x", {"err": "Task not found", "ECODE": "ITEM_013"}, status=404)
        with pytest.raises(APIError) as exc_info:
            client.get("/v2/task/x", Task)
        # ClickUp's own "err" key is not one of the recognized fields.
        assert exc_info.value.message == "Not Found"

    def test_message_field(self, client, api):
        api.respond("POST", "/v2/list/9/task", {"message": "name is required", "error": "bad"}, status=400)
        with pytest.raises(APIError) as exc_info:
            client.post("/v2/list/9/task", {}, Task)
        assert exc_info.value.message == "name is required"

    def test_empty_error_body(self, client, api):
        api.respond("GET", "/v2/user", b"", status=401)
        with pytest.raises(APIError) as exc_info:
            client.get("/v2/user")
        assert exc_info.value.message == "Unauthorized"

    def test_error_without_target_still_raises(self, client, api):
        api.respond("DELETE", "/v2/space/1", {"message": "nope"}, status=500)
        with pytest.raises(APIError, match="nope"):
            client.delete("/v2/space/1")


# =============================================================================
# Unauthenticated requests
# =============================================================================


class TestUnauthenticated:
    """send_unauthenticated never carries the credential."""

    def test_omits_authorization(self, client, api):
        api.respond("POST", "/v2/oauth/token", {"access_token": "tok", "token_type": "Bearer"})
        result = client.send_unauthenticated("/v2/oauth/token", {"code": "abc"}, dict)
        assert result == {"access_token": "tok", "token_type": "Bearer"}
        assert api.last.method == "POST"
        assert "Authorization" not in api.last.headers
        assert api.last.headers["Content-Type"] == "application/json"
        assert api.last.json() == {"code": "abc"}

    def test_original_client_keeps_credential(self, client, api):
        client.send_unauthenticated("/v2/oauth/token", {})
        client.get("/v2/user")
        assert api.last.headers["Authorization"] == API_KEY

    def test_without_auth_keeps_other_settings(self, client):
        clone = client.without_auth()
        assert clone.config.api_key == ""
        assert clone.config.base_url == client.config.base_url
        assert clone.config.timeout == client.config.timeout
        assert client.config.api_key == API_KEY

    def test_errors_are_classified(self, client, api):
        api.respond("POST", "/v2/oauth/token", {"err": "Code invalid", "error": "OAUTH_015"}, status=400)
        with pytest.raises(APIError) as exc_info:
            client.send_unauthenticated("/v2/oauth/token", {"code": "bad"}, dict)
        assert exc_info.value.message == "OAUTH_015"


# =============================================================================
# Multipart
# =============================================================================


class TestMultipart:
    """Single-file multipart/form-data uploads."""

    def test_upload(self, client, api):
        api.respond("POST", "/v2/task/task-1/attachment", {"id": "att-1", "title": "test.txt", "url": "https://x"})
        result = client.send_multipart(
            "/v2/task/task-1/attachment", "attachment", io.BytesIO(b"test file content"), "test.txt", Attachment
        )
        assert result.id == "att-1"

        request = api.last
        assert request.method == "POST"
        assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
        assert request.headers["Authorization"] == API_KEY
        assert b"test file content" in request.body
        assert b'name="attachment"; filename="test.txt"' in request.body
        assert b"Content-Type: application/octet-stream" in request.body

    def test_body_parses_as_form(self, client, api):
        client.send_multipart("/upload", "file", io.BytesIO(b"\x00\x01binary"), "data.bin")
        content_type = api.last.headers["Content-Type"]
        boundary = content_type.split("boundary=", 1)[1]
        body = api.last.body
        assert body.startswith(f"--{boundary}\r\n".encode())
        assert body.endswith(f"\r\n--{boundary}--\r\n".encode())
        assert b"\r\n\r\n\x00\x01binary\r\n" in body

    def test_content_length_matches_body(self, client, api):
        client.send_multipart("/upload", "file", io.BytesIO(b"x" * 200_000), "big.bin")
        assert int(api.last.headers["Content-Length"]) == len(api.last.body)
        assert api.last.body.count(b"x") >= 200_000

    def test_only_base_name_is_sent(self, client, api):
        client.send_multipart("/upload", "file", io.BytesIO(b"abc"), "/home/me/reports/q3.pdf")
        assert b'filename="q3.pdf"' in api.last.body
        assert b"/home/me" not in api.last.body

    def test_unseekable_stream(self, client, api):
        class Pipe(io.RawIOBase):
            def __init__(self, data: bytes):
                self._buf = io.BytesIO(data)

            def readable(self) -> bool:
                return True

            def readinto(self, b) -> int:
                chunk = self._buf.read(len(b))
                b[: len(chunk)] = chunk
                return len(chunk)

        client.send_multipart("/upload", "file", io.BufferedReader(Pipe(b"streamed")), "pipe.txt")
        assert b"streamed" in api.last.body

    def test_upload_error_is_classified(self, client, api):
        api.respond("POST", "/upload", {"message": "File too large"}, status=413)
        with pytest.raises(APIError) as exc_info:
            client.send_multipart("/upload", "file", io.BytesIO(b"abc"), "a.txt")
        assert exc_info.value.status == 413
        assert exc_info.value.message == "File too large"

    def test_stream_not_closed(self, client, api):
        stream = io.BytesIO(b"abc")
        client.send_multipart("/upload", "file", stream, "a.txt")
        assert not stream.closed


class TestMultipartBody:
    """Encoding without a server."""

    def test_seekable_length(self):
        body = MultipartBody("file", "a.txt", io.BytesIO(b"hello"), boundary="b0undary")
        data, length = body.encode()
        joined = b"".join(data)
        assert length == len(joined)
        assert joined == (
            b"--b0undary\r\n"
            b'Content-Disposition: form-data; name="file"; filename="a.txt"\r\n'
            b"Content-Type: application/octet-stream\r\n"
            b"\r\n"
            b"hello"
            b"\r\n--b0undary--\r\n"
        )

    def test_starts_from_current_position(self):
        stream = io.BytesIO(b"skipkeep")
        stream.seek(4)
        data, length = MultipartBody("file", "a.txt", stream, boundary="b").encode()
        joined = b"".join(data)
        assert b"keep" in joined
        assert b"skip" not in joined
        assert length == len(joined)

    def test_content_type(self):
        body = MultipartBody("file", "a.txt", io.BytesIO(b""), boundary="xyz")
        assert body.content_type == "multipart/form-data; boundary=xyz"

    def test_random_boundary(self):
        a = MultipartBody("file", "a.txt", io.BytesIO(b""))
        b = MultipartBody("file", "a.txt", io.BytesIO(b""))
        assert a.boundary != b.boundary


# =============================================================================
# Deadlines
# =============================================================================


class TrickleServer:
    """Accepts one connection and writes a canned response piece by piece."""

    def __init__(self, head: bytes, pieces: list[bytes], delay: float) -> None:
        self._head = head
        self._pieces = pieces
        self._delay = delay
        self._stop = threading.Event()
        self._listener = socket.socket()
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(1)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        host, port = self._listener.getsockname()
        return f"http://{host}:{port}"

    def _serve(self) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        with conn:
            request = b""
            while b"\r\n\r\n" not in request:
                chunk = conn.recv(4096)
                if not chunk:
                    return
                request += chunk
            try:
                conn.sendall(self._head)
                for piece in self._pieces:
                    if self._stop.wait(self._delay):
                        return
                    conn.sendall(piece)
                # Hold the connection open without finishing the body.
                self._stop.wait(10)
            except OSError:
                return

    def close(self) -> None:
        self._stop.set()
        self._listener.close()
        self._thread.join(timeout=5)


@pytest.fixture
def trickle():
    servers: list[TrickleServer] = []

    def start(head: bytes, pieces: list[bytes], delay: float = 0) -> TrickleServer:
        server = TrickleServer(head, pieces, delay)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


def _head(status: str, length: int) -> bytes:
    return f"HTTP/1.1 {status}\r\nContent-Type: application/json\r\nContent-Length: {length}\r\n\r\n".encode()


class TestDeadline:
    """The per-call timeout bounds the whole exchange, body included."""

    def test_stalled_error_body_is_transport_error(self, trickle):
        server = trickle(_head("500 Internal Server Error", 50), [b'{"mess'])
        client = APIClient(base_url=server.url)
        with pytest.raises(TransportError, match="execute request") as exc_info:
            client.get("/v2/user", timeout=0.5)
        assert exc_info.value.exit_code == 3

    def test_trickled_body_hits_deadline(self, trickle):
        body = b'{"a": "bcde"}'
        server = trickle(_head("200 OK", len(body)), [bytes([b]) for b in body], delay=0.3)
        client = APIClient(base_url=server.url)
        started = time.monotonic()
        with pytest.raises(TransportError, match="timed out"):
            client.get("/v2/user", dict, timeout=1.0)
        assert time.monotonic() - started < 2.0

    def test_trickled_body_within_deadline(self, trickle):
        body = b'{"a": "bcde"}'
        server = trickle(_head("200 OK", len(body)), [body[:5], body[5:]], delay=0.05)
        client = APIClient(base_url=server.url)
        assert client.get("/v2/user", dict, timeout=2.0) == {"a": "bcde"}

    def test_trickled_error_body_is_classified(self, trickle):
        body = b'{"err": "x", "message": "slow but complete"}'
        server = trickle(_head("403 Forbidden", len(body)), [body[:10], body[10:]], delay=0.05)
        client = APIClient(base_url=server.url)
        with pytest.raises(APIError) as exc_info:
            client.get("/v2/user", timeout=2.0)
        assert exc_info.value.status == 403
        assert exc_info.value.message == "slow but complete"
