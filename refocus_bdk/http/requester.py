"""Resilient request primitive.

Every REST call made by the kit goes through RefocusRequester.request.
A 429 answer is retried after the server's Retry-After hint, a bounded
number of times; anything else is handed back to the caller as is.
"""

import asyncio
from typing import TYPE_CHECKING, Any

import httpx

from refocus_bdk.exceptions import RefocusTransportError
from refocus_bdk.http.retry import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MIN_RETRY_DELAY_MS,
    RetryState,
    parse_retry_after,
)
from refocus_bdk.observability.logging import get_logger
from refocus_bdk.observability.metrics import (
    RATE_LIMIT_RETRIES,
    REQUEST_COUNT,
    TRANSPORT_ERRORS,
)

if TYPE_CHECKING:
    from refocus_bdk.config.settings import Settings

logger = get_logger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "PATCH", "PUT"})
TOO_MANY_REQUESTS = 429


class RefocusRequester:
    """Sends authenticated requests with bounded 429 retry.

    One pooled httpx.AsyncClient is kept per proxy URL. Close the
    requester with ``aclose()`` or use it as an async context manager.

    Usage:
        async with RefocusRequester(token="...") as requester:
            response = await requester.get("http://localhost:3000/v1/rooms/1")
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        proxy: str | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        min_retry_delay_ms: int = DEFAULT_MIN_RETRY_DELAY_MS,
        timeout: float = 30.0,
        auth_scheme: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the requester.

        Args:
            token: Default API token for the Authorization header
            proxy: Default forward proxy URL
            max_attempts: Total sends per request, the first one included
            min_retry_delay_ms: Wait used when a 429 carries no usable Retry-After
            timeout: Per-send timeout in seconds
            auth_scheme: Optional scheme placed before the token, e.g. "Bearer"
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._token = token
        self._proxy = proxy
        self._max_attempts = max_attempts
        self._min_retry_delay = min_retry_delay_ms / 1000
        self._timeout = timeout
        self._auth_scheme = auth_scheme
        self._transport = transport
        self._clients: dict[str | None, httpx.AsyncClient] = {}

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RefocusRequester":
        """Create a requester from kit settings."""
        return cls(
            token=settings.token_value(),
            proxy=settings.http_proxy,
            max_attempts=settings.http.max_attempts,
            min_retry_delay_ms=settings.http.min_retry_delay_ms,
            timeout=settings.http.timeout_seconds,
            auth_scheme=settings.http.auth_scheme,
            transport=transport,
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def _ensure_client(self, proxy: str | None) -> httpx.AsyncClient:
        """Return the pooled client for a proxy URL, creating it if needed."""
        client = self._clients.get(proxy)
        if client is None:
            client = httpx.AsyncClient(
                timeout=self._timeout,
                proxy=proxy,
                transport=self._transport,
            )
            self._clients[proxy] = client
        return client

    def _headers(self, token: str | None) -> dict[str, str]:
        """Build request headers."""
        headers: dict[str, str] = {}
        if token:
            if self._auth_scheme:
                headers["Authorization"] = f"{self._auth_scheme} {token}"
            else:
                headers["Authorization"] = token
        return headers

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any,
        files: Any,
    ) -> httpx.Response:
        """Send once, translating transport failures."""
        kwargs: dict[str, Any] = {"headers": headers}
        if files is not None:
            # An empty mapping still selects form encoding for the body
            if files:
                kwargs["files"] = files
            if body is not None:
                kwargs["data"] = body
        elif body is not None and method != "GET":
            kwargs["json"] = body

        try:
            return await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            TRANSPORT_ERRORS.labels(method=method).inc()
            logger.error(
                "request_transport_error",
                method=method,
                url=url,
                error=str(e),
            )
            raise RefocusTransportError(
                f"{method} {url} failed: {e}", method=method, url=url
            ) from e

    async def request(
        self,
        method: str,
        url: str,
        *,
        body: Any = None,
        files: Any = None,
        token: str | None = None,
        proxy: str | None = None,
    ) -> httpx.Response:
        """Send a request, retrying on 429.

        Args:
            method: GET, POST, PATCH or PUT
            url: Absolute URL
            body: JSON payload, or form fields when ``files`` is given
            files: Multipart files, as accepted by httpx
            token: Overrides the default token
            proxy: Overrides the default proxy

        Returns:
            The final response. After the last allowed attempt this may
            still be a 429.

        Raises:
            ValueError: If the method is not supported
            RefocusTransportError: If no response was received
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method: {method}")

        client = await self._ensure_client(proxy if proxy is not None else self._proxy)
        headers = self._headers(token if token is not None else self._token)
        state = RetryState(max_attempts=self._max_attempts)

        while True:
            response = await self._send(client, method, url, headers, body, files)
            REQUEST_COUNT.labels(method=method, status=str(response.status_code)).inc()

            if response.status_code != TOO_MANY_REQUESTS:
                return response

            if not state.can_retry:
                logger.warning(
                    "rate_limit_retries_exhausted",
                    method=method,
                    url=url,
                    attempts=state.attempt + 1,
                )
                return response

            delay = parse_retry_after(response.headers.get("Retry-After"))
            if delay is None:
                delay = self._min_retry_delay

            RATE_LIMIT_RETRIES.labels(method=method).inc()
            logger.warning(
                "rate_limited",
                method=method,
                url=url,
                attempt=state.attempt + 1,
                retry_in=delay,
            )
            await asyncio.sleep(delay)
            state = state.next(delay)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, body=body, **kwargs)

    async def patch(self, url: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, body=body, **kwargs)

    async def put(self, url: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, body=body, **kwargs)

    async def aclose(self) -> None:
        """Close every pooled client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    async def __aenter__(self) -> "RefocusRequester":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
