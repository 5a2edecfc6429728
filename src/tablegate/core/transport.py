"""Payload-agnostic request/response helper.

A :class:`RemoteCallClient` sends one GET or POST request per call and decodes
the response body with a caller-supplied :class:`Codec`. It knows nothing
about what the payload means; the identity resolver is one of its users.
"""

from __future__ import annotations

import codecs
import json
from typing import Any, Generic, Mapping, Protocol, Sequence, TypeVar

import httpx
import structlog

from tablegate.core.errors import (
    ConfigError,
    InvalidAddress,
    RemoteCallFailed,
    RemoteCallUnreachable,
    ResponseDecodeError,
    UnsupportedMethod,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SUPPORTED_METHODS = ("GET", "POST")
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_TIMEOUT = 30.0

HeaderValue = str | Sequence[str]


def normalize_method(method: object) -> object:
    """Upper-case and strip a method name; non-strings are returned as-is."""
    return method.strip().upper() if isinstance(method, str) else method


class Codec(Protocol[T]):
    """Converts payloads to and from their wire (string) form."""

    def to_wire(self, payload: T) -> str:
        ...

    def from_wire(self, data: str) -> T:
        ...


class TextCodec:
    """Identity codec: payloads are plain strings."""

    def to_wire(self, payload: str) -> str:
        return payload

    def from_wire(self, data: str) -> str:
        return data


class JSONCodec:
    """JSON codec: payloads are JSON-compatible Python values."""

    def to_wire(self, payload: Any) -> str:
        return json.dumps(payload)

    def from_wire(self, data: str) -> Any:
        return json.loads(data)


TEXT_CODEC = TextCodec()
JSON_CODEC = JSONCodec()


def validate_address(url: str) -> httpx.URL:
    """Parse ``url`` and require an absolute http(s) address."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidAddress(f"Invalid remote address {url!r}: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidAddress(f"Remote address must be an absolute http(s) URL, got {url!r}.")
    return parsed


def _header_items(headers: Mapping[str, HeaderValue] | None) -> list[tuple[str, str]]:
    """Flatten headers; sequence values become repeated headers."""
    items: list[tuple[str, str]] = []
    for name, value in (headers or {}).items():
        if isinstance(value, str):
            items.append((name, value))
        else:
            items.extend((name, v) for v in value)
    return items


class RemoteCallClient(Generic[T]):
    """
    Send requests to one remote address and decode the responses.

    Args:
        url: Absolute http(s) URL of the remote endpoint.
        method: "GET" or "POST" (case-insensitive).
        codec: Converts payloads to/from strings.
        encoding: Character encoding of request and response bodies.
        connect_timeout: Seconds allowed to establish the connection.
        timeout: Seconds allowed for the other phases (read, write, pool).
        transport: Optional httpx transport, mainly for tests.

    Raises:
        UnsupportedMethod: if ``method`` is not GET or POST.
        InvalidAddress: if ``url`` is not an absolute http(s) URL.
        ConfigError: if ``encoding`` is unknown.
    """

    def __init__(
        self,
        url: str,
        method: str = "GET",
        *,
        codec: Codec[T],
        encoding: str = "utf-8",
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        normalized = normalize_method(method)
        if normalized not in SUPPORTED_METHODS:
            raise UnsupportedMethod(method)
        try:
            codecs.lookup(encoding)
        except LookupError as exc:
            raise ConfigError(f"Unknown character encoding {encoding!r}.") from exc

        self.url = str(validate_address(url))
        self.method = normalized
        self.codec = codec
        self.encoding = encoding
        self.timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._transport = transport

    def call(self, headers: Mapping[str, HeaderValue] | None = None, payload: T | None = None) -> T:
        """
        Perform one request and return the decoded response body.

        ``payload`` is only sent for POST; a POST without payload sends an
        empty body.

        Raises:
            RemoteCallFailed: on a non-2xx status, with the raw body.
            RemoteCallUnreachable: if the request could not complete.
            ResponseDecodeError: if the codec rejects a 2xx body.
        """
        content: bytes | None = None
        if self.method == "POST":
            wire = "" if payload is None else self.codec.to_wire(payload)
            content = wire.encode(self.encoding)

        logger.debug("remote_call.request", method=self.method, url=self.url)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                with client.stream(
                    self.method,
                    self.url,
                    headers=_header_items(headers),
                    content=content,
                ) as response:
                    raw = response.read()
                    status = response.status_code
        except httpx.RequestError as exc:
            logger.warning("remote_call.unreachable", url=self.url, error=type(exc).__name__)
            raise RemoteCallUnreachable(f"Could not reach {self.url}: {exc}") from exc

        body = raw.decode(self.encoding, errors="replace")
        if not 200 <= status < 300:
            logger.warning("remote_call.failed", url=self.url, status=status)
            raise RemoteCallFailed(self.url, status, body)

        try:
            return self.codec.from_wire(body)
        except ValueError as exc:
            raise ResponseDecodeError(
                f"Could not decode response from {self.url}: {exc}", body
            ) from exc
