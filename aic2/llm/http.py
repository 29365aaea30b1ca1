"""
HTTP Invoker

One request per call, REST or line-streamed, over httpx.AsyncClient.
Connection problems come back as TransportError, HTTP error statuses as
BackendError. Nothing is retried here.
"""

import json
import logging
import socket
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional
from urllib.parse import urlsplit

import httpx

from aic2.errors import (
    BackendError, MalformedResponseError, TransportError,
    CONNECTION_REFUSED, NETWORK_UNREACHABLE, TIMEOUT,
)
from aic2.llm.parser import error_message_from_payload, extract_json_from_error, is_unknown_error

logger = logging.getLogger(__name__)

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "temporary failure in name resolution",
    "no address associated",
)
_REFUSED_MARKERS = ("connection refused", "errno 111", "actively refused")


@dataclass
class HttpRequest:
    """Method, URL, headers, JSON body, timeout (seconds) and proxy for one call."""
    method: str
    url: str
    timeout: float
    headers: dict = field(default_factory=dict)
    body: Optional[dict] = None
    proxy: Optional[str] = None

    def set_headers(self, headers: dict) -> 'HttpRequest':
        self.headers.update(headers)
        return self

    def set_body(self, body: dict) -> 'HttpRequest':
        self.body = dict(body)
        return self

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or self.url


@dataclass(frozen=True)
class HttpResponse:
    status: int
    text: str
    url: str = ""

    def json(self):
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Invalid JSON in response from {self.url or 'backend'}") from e


def _caused_by(exc: BaseException, kind: type) -> bool:
    seen = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, kind):
            return True
        seen.add(id(exc))
        exc = exc.__cause__ or exc.__context__
    return False


def transport_error(request: HttpRequest, exc: httpx.HTTPError) -> TransportError:
    """Map an httpx failure to a TransportError naming the target host."""
    host = request.host
    text = str(exc).lower()

    if isinstance(exc, httpx.TimeoutException):
        return TransportError(f"Request to {host} timed out after {request.timeout:g}s", host, TIMEOUT)
    if _caused_by(exc, ConnectionRefusedError) or any(m in text for m in _REFUSED_MARKERS):
        return TransportError(f"Error connecting to {host}. Connection refused", host, CONNECTION_REFUSED)
    if _caused_by(exc, socket.gaierror) or any(m in text for m in _DNS_MARKERS):
        return TransportError(f"Error connecting to {host} (getaddrinfo)", host, NETWORK_UNREACHABLE)
    return TransportError(f"Error connecting to {host}: {exc or exc.__class__.__name__}", host, NETWORK_UNREACHABLE)


def status_error(status: int, text: str) -> BackendError:
    """Build a BackendError from an error status and its (possibly messy) body."""
    fallback = f"Request failed with status code {status}"
    if not text or not text.strip():
        return BackendError(fallback, status)

    payload = extract_json_from_error(text)
    message = None if is_unknown_error(payload) else error_message_from_payload(payload)
    return BackendError(message or fallback, status, payload, malformed=message is None)


class HttpInvoker:
    """Executes HttpRequests. `transport` replaces the network (tests)."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client(self, request: HttpRequest) -> httpx.AsyncClient:
        kwargs = {"timeout": httpx.Timeout(request.timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif request.proxy:
            kwargs["proxy"] = request.proxy
        return httpx.AsyncClient(**kwargs)

    async def execute(self, request: HttpRequest) -> HttpResponse:
        logger.debug("%s %s", request.method, request.url)
        async with self._client(request) as client:
            try:
                response = await client.request(
                    request.method, request.url, headers=request.headers, json=request.body
                )
            except httpx.HTTPError as e:
                raise transport_error(request, e) from e

        logger.debug("%s %s -> %d", request.method, request.url, response.status_code)
        if response.status_code >= 400:
            raise status_error(response.status_code, response.text)
        return HttpResponse(response.status_code, response.text, request.url)

    async def stream_lines(self, request: HttpRequest) -> AsyncIterator[str]:
        """Yield the non-empty lines of a streamed response body."""
        logger.debug("%s %s (stream)", request.method, request.url)
        async with self._client(request) as client:
            try:
                async with client.stream(
                    request.method, request.url, headers=request.headers, json=request.body
                ) as response:
                    if response.status_code >= 400:
                        await response.aread()
                        raise status_error(response.status_code, response.text)
                    async for line in response.aiter_lines():
                        if line.strip():
                            yield line
            except httpx.HTTPError as e:
                raise transport_error(request, e) from e
