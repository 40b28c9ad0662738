from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

import httpx
import pytest

from oauth2_grants.models.config import ClientConfig
from oauth2_grants.oauth_client import OAuth2Client
from oauth2_grants.primitives.transport import HTTPTransport

# Random bytes from the example in RFC 7636 Appendix B
RFC7636_EXAMPLE_BYTES = bytes(
    [
        116, 24, 223, 180, 151, 153, 224, 37, 79, 250, 96, 125, 216, 173,
        187, 186, 22, 212, 37, 77, 105, 214, 191, 240, 91, 88, 5, 88, 83,
        132, 141, 121,
    ]
)  # fmt: skip


class MockHTTPTransport(HTTPTransport):
    """Mock transport that records requests and replays queued responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response] = []
        self.closed = False
        self._error: Exception | None = None

    def queue_response(
        self,
        status_code: int = 200,
        json: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Queue the response returned by the next send()."""
        if text is not None:
            response = httpx.Response(status_code, text=text, headers=headers)
        else:
            if json is None:
                json = {"access_token": "at", "token_type": "tt"}
            response = httpx.Response(status_code, json=json, headers=headers)
        self._responses.append(response)

    def simulate_error(self, error: Exception) -> None:
        """Raise the given error from the next send()."""
        self._error = error

    async def send(self, request: httpx.Request) -> httpx.Response:
        if self._error is not None:
            raise self._error
        self.requests.append(request)
        if not self._responses:
            self.queue_response()
        return self._responses.pop(0)

    async def close(self) -> None:
        self.closed = True

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def transport() -> MockHTTPTransport:
    return MockHTTPTransport()


@pytest.fixture
def make_client(transport: MockHTTPTransport) -> Callable[..., OAuth2Client]:
    """Factory for OAuth2Client instances with test defaults."""

    def factory(**overrides: Any) -> OAuth2Client:
        config = ClientConfig(
            **{
                "client_id": "clientId",
                "authorization_endpoint_uri": "https://auth.server/auth",
                "token_uri": "https://auth.server/token",
                **overrides,
            }
        )
        return OAuth2Client(
            config, transport=transport, random_source=lambda n: RFC7636_EXAMPLE_BYTES
        )

    return factory


@pytest.fixture
def callback_uri() -> Callable[..., str]:
    """Build an authorization response redirect URI with query parameters."""

    def build(
        params: dict[str, str] | None = None,
        base_url: str = "https://example.app/callback",
    ) -> str:
        if not params:
            return base_url
        return f"{base_url}?{urlencode(params)}"

    return build


@pytest.fixture
def implicit_callback_uri() -> Callable[..., str]:
    """Build an implicit grant redirect URI with fragment parameters."""

    def build(
        params: dict[str, str] | None = None,
        base_url: str = "https://example.app/callback",
    ) -> str:
        if not params:
            return base_url
        return f"{base_url}#{urlencode(params)}"

    return build
