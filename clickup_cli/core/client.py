"""
Core HTTP client for the ClickUp API.

Handles authentication, request/response, multipart uploads, and error
normalization. Nothing in this module logs or prints.
"""

import http
import http.client
import io
import json
import os
import time
import urllib.error
import urllib.request
import uuid
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO, TypeVar

# Configuration
DEFAULT_BASE_URL = "https://api.clickup.com/api"
DEFAULT_USER_AGENT = "clickup-cli/1.0"
DEFAULT_TIMEOUT = 30

# Error body fields, in order of preference
ERROR_MESSAGE_FIELDS = ("message", "error")

CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


class CLIError(Exception):
    """Base error class for CLI errors."""

    exit_code = 1

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CLIError):
    """API error with status code and normalized message."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def __str__(self) -> str:
        return f"API error ({self.status}): {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""

    exit_code = 2


class TransportError(CLIError):
    """The request could not be built or executed. Carries no status code."""

    exit_code = 3


class DecodeError(CLIError):
    """A successful response whose body does not match the expected shape."""


class OperationError(CLIError):
    """Labels a failed service operation while keeping the original error."""

    def __init__(self, operation: str, cause: CLIError):
        super().__init__(f"{operation}: {cause}", cause.details)
        self.operation = operation
        self.cause = cause
        self.__cause__ = cause

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.cause.exit_code

    def to_dict(self) -> dict[str, Any]:
        result = self.cause.to_dict()
        result["error"] = self.message
        return result


E = TypeVar("E", bound=BaseException)


def unwrap(err: BaseException | None, kind: type[E]) -> E | None:
    """Walk the cause chain of ``err`` and return the first ``kind`` found."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, kind):
            return err
        seen.add(id(err))
        err = err.__cause__
    return None


# =============================================================================
# Error classification
# =============================================================================


def status_text(status: int) -> str:
    """Standard reason phrase for an HTTP status code."""
    try:
        return http.HTTPStatus(status).phrase
    except ValueError:
        return f"HTTP {status}"


def _error_fields(body: bytes) -> dict[str, str] | None:
    """Parse an error body as {"message": str, "error": str}, both optional."""
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None

    fields: dict[str, str] = {}
    for name in ERROR_MESSAGE_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            return None
        fields[name] = value
    return fields


def classify_error(status: int, body: bytes) -> APIError:
    """
    Normalize an error response into an APIError.

    The first non-empty field from ERROR_MESSAGE_FIELDS wins. Bodies that are
    not a JSON object of string fields, or carry no usable message, fall back
    to the standard status text. Pure function of (status, body).
    """
    fields = _error_fields(body)
    if fields is not None:
        for name in ERROR_MESSAGE_FIELDS:
            if fields.get(name):
                return APIError(fields[name], status=status)
    return APIError(status_text(status), status=status)


# =============================================================================
# Request / Response
# =============================================================================


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration."""

    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class Request:
    """A single outbound call. ``path`` already carries any query string."""

    method: str
    path: str
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Response:
    """A fully-read HTTP response."""

    status: int
    headers: Mapping[str, str]
    body: bytes

    @property
    def ok(self) -> bool:
        return self.status < 400

    def json(self) -> Any:
        """Decode body as JSON."""
        return json.loads(self.body)


def _apply_result(payload: Any, result: Any) -> Any:
    """Convert decoded JSON into the caller's target type."""
    from_dict = getattr(result, "from_dict", None)
    if callable(from_dict):
        return from_dict(payload)
    return result(payload)


def _read_body(response: Any, deadline: float) -> bytes:
    """
    Read a whole response body, raising TimeoutError once ``deadline`` passes.

    The socket timeout is cut to the time left before every read, so a server
    that trickles bytes cannot stretch the call past the deadline.
    """
    if isinstance(response, urllib.error.HTTPError):
        response = response.fp
    if not isinstance(response, http.client.HTTPResponse):
        return response.read() if response is not None else b""

    sock = getattr(getattr(response.fp, "raw", None), "_sock", None)
    chunks: list[bytes] = []
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError("deadline exceeded while reading response body")
        if sock is not None and not response.isclosed():
            sock.settimeout(remaining)
        chunk = response.read1(CHUNK_SIZE)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def _stream_length(stream: BinaryIO) -> int | None:
    """Remaining bytes in a seekable stream, or None if it cannot seek."""
    try:
        if not stream.seekable():
            return None
        start = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(start)
    except (AttributeError, OSError):
        return None
    return end - start


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


@dataclass(frozen=True)
class MultipartBody:
    """A single-part multipart/form-data payload around a binary stream."""

    field_name: str
    file_name: str
    stream: BinaryIO
    boundary: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def head(self) -> bytes:
        name = os.path.basename(self.file_name)
        return (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{self.field_name}"; filename="{name}"\r\n'
            "Content-Type: application/octet-stream\r\n"
            "\r\n"
        ).encode("utf-8")

    def tail(self) -> bytes:
        return f"\r\n--{self.boundary}--\r\n".encode("utf-8")

    def encode(self) -> tuple[Any, int]:
        """
        Return (data, content_length) ready for urllib.

        Seekable streams are yielded chunk by chunk; anything else is read once
        into memory so the length is known.
        """
        head, tail = self.head(), self.tail()
        size = _stream_length(self.stream)
        if size is None:
            data = head + self.stream.read() + tail
            return data, len(data)

        def chunks() -> Iterator[bytes]:
            yield head
            yield from _iter_stream(self.stream)
            yield tail

        return chunks(), len(head) + size + len(tail)


# =============================================================================
# Client
# =============================================================================


class APIClient:
    """
    Low-level HTTP client for the ClickUp API.

    Handles:
    - Authentication via a verbatim Authorization header
    - JSON requests (GET, POST, PUT, PATCH, DELETE)
    - Multipart file uploads
    - Error classification into APIError / TransportError / DecodeError
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        config: ClientConfig | None = None,
    ):
        """
        Initialize the API client.

        Args:
            api_key: ClickUp API key or OAuth token. Empty means unauthenticated.
            base_url: API base URL, concatenated verbatim with request paths
            user_agent: User-Agent header value
            timeout: Default request timeout in seconds
            config: Prebuilt configuration; overrides the other arguments

        """
        self._config = config or ClientConfig(
            base_url=base_url,
            api_key=api_key or "",
            user_agent=user_agent,
            timeout=timeout,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def without_auth(self) -> "APIClient":
        """Return a clone of this client that never sends credentials."""
        return APIClient(config=replace(self._config, api_key=""))

    def _build_url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    def _base_headers(self, content_type: str) -> dict[str, str]:
        headers = {
            "Content-Type": content_type,
            "User-Agent": self._config.user_agent,
        }
        if self._config.api_key:
            headers["Authorization"] = self._config.api_key
        return headers

    def _execute(self, req: urllib.request.Request, timeout: float | None) -> Response:
        request_timeout = timeout if timeout is not None else self._config.timeout
        deadline = time.monotonic() + request_timeout
        try:
            try:
                response = urllib.request.urlopen(req, timeout=request_timeout)
                status = response.status
            except urllib.error.HTTPError as e:
                # A status >= 400 is still a response; classification happens later.
                response, status = e, e.code
            with response:
                headers = dict(response.headers.items()) if response.headers else {}
                return Response(status=status, headers=headers, body=_read_body(response, deadline))

        except urllib.error.URLError as e:
            raise TransportError(f"execute request: {e.reason}") from e

        except TimeoutError as e:
            raise TransportError(f"execute request: timed out after {request_timeout} seconds") from e

        except (http.client.HTTPException, OSError) as e:
            raise TransportError(f"execute request: {e}") from e

    def send(self, request: Request, timeout: float | None = None) -> Response:
        """
        Send a JSON request and return the raw response.

        Args:
            request: Method, path, optional body and header overrides
            timeout: Per-call deadline override in seconds

        Returns:
            The fully-read Response, whatever its status

        Raises:
            ValidationError: If the body cannot be JSON-encoded
            TransportError: If the request cannot be built or executed

        """
        data = None
        if request.body is not None:
            try:
                data = json.dumps(request.body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise ValidationError(f"marshal request body: {e}") from e

        try:
            req = urllib.request.Request(self._build_url(request.path), data=data, method=request.method)
        except ValueError as e:
            raise TransportError(f"create request: {e}") from e

        for key, value in self._base_headers("application/json").items():
            req.add_header(key, value)
        for key, value in request.headers.items():
            req.add_header(key, value)

        return self._execute(req, timeout)

    def _finish(self, response: Response, result: Any) -> Any:
        if not response.ok:
            raise classify_error(response.status, response.body)
        if result is None:
            return None
        try:
            payload = response.json()
        except (ValueError, UnicodeDecodeError) as e:
            raise DecodeError(f"decode response: {e}") from e
        try:
            return _apply_result(payload, result)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"decode response: {e!r}") from e

    def decode(
        self,
        method: str,
        path: str,
        result: Callable[[Any], T] | type[T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """
        Make a bodyless request (GET, DELETE) and decode the response.

        Args:
            method: HTTP method
            path: API path relative to the base URL
            result: Target type (with from_dict) or callable; None discards the body
            timeout: Per-call deadline override

        Returns:
            The decoded result, or None when no target was given

        Raises:
            APIError: On status >= 400
            TransportError: On network failure
            DecodeError: If the body does not match the target

        """
        return self._finish(self.send(Request(method, path), timeout), result)

    def decode_with_body(
        self,
        method: str,
        path: str,
        body: Any,
        result: Callable[[Any], T] | type[T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """Same as decode(), with ``body`` JSON-encoded as the payload."""
        return self._finish(self.send(Request(method, path, body), timeout), result)

    def send_unauthenticated(
        self,
        path: str,
        body: Any,
        result: Callable[[Any], T] | type[T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """POST without the Authorization header, even if a key is configured."""
        return self.without_auth().decode_with_body("POST", path, body, result, timeout)

    def send_multipart(
        self,
        path: str,
        field_name: str,
        stream: BinaryIO,
        file_name: str,
        result: Callable[[Any], T] | type[T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """
        POST a single file as multipart/form-data.

        Args:
            path: API path relative to the base URL
            field_name: Form field name for the file part
            stream: Open binary stream; read, never closed
            file_name: Original file name; only its base name is sent
            result: Target type or callable; None discards the body
            timeout: Per-call deadline override

        """
        multipart = MultipartBody(field_name=field_name, file_name=file_name, stream=stream)
        try:
            data, length = multipart.encode()
        except OSError as e:
            raise ValidationError(f"read upload stream: {e}") from e

        try:
            req = urllib.request.Request(self._build_url(path), data=data, method="POST")
        except ValueError as e:
            raise TransportError(f"create request: {e}") from e

        for key, value in self._base_headers(multipart.content_type).items():
            req.add_header(key, value)
        req.add_header("Content-Length", str(length))

        return self._finish(self._execute(req, timeout), result)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, result: Any = None, timeout: float | None = None) -> Any:
        """Make a GET request."""
        return self.decode("GET", path, result, timeout)

    def post(self, path: str, body: Any = None, result: Any = None, timeout: float | None = None) -> Any:
        """Make a POST request."""
        return self.decode_with_body("POST", path, body, result, timeout)

    def put(self, path: str, body: Any = None, result: Any = None, timeout: float | None = None) -> Any:
        """Make a PUT request."""
        return self.decode_with_body("PUT", path, body, result, timeout)

    def patch(self, path: str, body: Any = None, result: Any = None, timeout: float | None = None) -> Any:
        """Make a PATCH request."""
        return self.decode_with_body("PATCH", path, body, result, timeout)

    def delete(self, path: str, result: Any = None, timeout: float | None = None) -> Any:
        """Make a DELETE request."""
        return self.decode("DELETE", path, result, timeout)
