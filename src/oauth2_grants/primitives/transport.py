"""HTTP transport abstraction.

Grants build ``httpx.Request`` objects and hand them to a transport for
delivery. The transport owns timeouts, retries and connection pooling;
grants make exactly one ``send`` call and let transport errors propagate.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self

import httpx

logger = logging.getLogger(__name__)


class HTTPTransport(ABC):
    """Abstract single request/response HTTP transport."""

    @abstractmethod
    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send one request and return the complete response.

        Args:
            request: Fully built request

        Returns:
            Response with its body already read

        Raises:
            httpx.HTTPError: If the request could not be completed
        """

    @abstractmethod
    async def close(self) -> None:
        """Release any resources held by the transport."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
        return None


class HttpxTransport(HTTPTransport):
    """Transport backed by ``httpx.AsyncClient``."""

    def __init__(
        self, http_client: httpx.AsyncClient | None = None, timeout: float = 30.0
    ):
        """Initialize the transport.

        Args:
            http_client: Existing client to use. Its lifecycle stays with
                the caller.
            timeout: HTTP request timeout in seconds when a client is created
        """
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def send(self, request: httpx.Request) -> httpx.Response:
        logger.debug(
            f"Sending {request.method} request to {request.url.host}{request.url.path}"
        )
        return await self._http_client.send(request)

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._http_client.aclose()
