"""Shared request building and response parsing for OAuth 2.0 grants.

Every grant holds an ``OAuth2GrantToolkit`` and delegates to it for the
parts of the protocol the grants have in common:
- Token endpoint request construction with client authentication (RFC 6749 Section 2.3)
- Three-layer request option merging (built-in < client defaults < call)
- Access token response validation (RFC 6749 Section 5)
- Redirect URI parsing and state validation
"""

from __future__ import annotations

import base64
import inspect
import logging
import secrets
from collections.abc import Mapping
from typing import Any
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from oauth2_grants.models.config import ClientConfig, RequestOptions, StateValidator
from oauth2_grants.models.errors import (
    AuthorizationResponseError,
    OAuth2ResponseError,
    StateValidationError,
    TokenResponseError,
)
from oauth2_grants.models.tokens import TokenResponse, Tokens
from oauth2_grants.primitives.claims import is_number
from oauth2_grants.primitives.transport import HTTPTransport

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def merge_layers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge mappings in order; later layers win on key collision."""
    merged: dict[str, str] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings in order, comparing names case-insensitively.

    The name casing of the layer that supplied the winning value is kept.
    """
    merged: dict[str, tuple[str, str]] = {}
    for layer in layers:
        if layer:
            for name, value in layer.items():
                merged[name.lower()] = (name, value)
    return dict(merged.values())


def append_query_params(uri: str, params: Mapping[str, str]) -> str:
    """Append parameters to a URI, keeping any query it already has."""
    if not params:
        return uri
    parts = urlsplit(uri)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_params(query: str) -> dict[str, str]:
    """Parse form-encoded parameters; the first occurrence of a key wins."""
    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def to_url(uri: str | httpx.URL) -> SplitResult:
    """Split a redirect URI given as a string or ``httpx.URL``."""
    return urlsplit(str(uri))


def join_scope(scope: str | list[str] | None) -> str | None:
    """Space-join a scope list (RFC 6749 Section 3.3)."""
    if scope is None:
        return None
    joined = " ".join(scope) if isinstance(scope, list) else scope
    return joined or None


class OAuth2GrantToolkit:
    """Request builder, response parser and redirect validator shared by grants.

    Holds the read-only client configuration and the injected transport.
    Holds no per-call state, so one toolkit serves concurrent grant calls.
    """

    def __init__(self, config: ClientConfig, transport: HTTPTransport):
        self.config = config
        self.transport = transport

    def resolve_scope(self, scope: str | list[str] | None) -> str | None:
        """Return the call scope, or the default scope when none was given."""
        if scope is None:
            scope = self.config.defaults.scope
        return join_scope(scope)

    def build_request(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Mapping[str, str] | None = None,
        request_options: RequestOptions | None = None,
    ) -> httpx.Request:
        """Build an outgoing request, merging default and call options.

        Args:
            url: Target endpoint, may already carry a query
            method: HTTP method
            headers: Headers required by the grant
            body: Form fields required by the grant, None for no body
            request_options: Per-call overrides

        Returns:
            Request ready to hand to the transport
        """
        defaults = self.config.defaults.request_options or RequestOptions()
        overrides = request_options or RequestOptions()

        builtin_headers = dict(headers)
        if body is not None:
            builtin_headers = merge_headers(
                {"Content-Type": FORM_CONTENT_TYPE}, builtin_headers
            )

        request_headers = merge_headers(
            builtin_headers, defaults.headers, overrides.headers
        )
        request_url = append_query_params(
            url, merge_layers(defaults.url_params, overrides.url_params)
        )

        content = None
        if body is not None:
            form = merge_layers(body, defaults.body, overrides.body)
            content = urlencode(form).encode("ascii")

        return httpx.Request(
            method, request_url, headers=request_headers, content=content
        )

    def build_token_request(
        self,
        body: Mapping[str, str],
        request_options: RequestOptions | None = None,
    ) -> httpx.Request:
        """Build a token endpoint request with client authentication.

        Confidential clients authenticate with HTTP Basic auth
        (RFC 6749 Section 2.3.1). Public clients send their client_id in
        the request body instead.
        """
        form = dict(body)
        headers = {"Accept": "application/json"}

        if self.config.client_secret is not None:
            credentials = f"{self.config.client_id}:{self.config.client_secret}"
            encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {encoded}"
        else:
            form["client_id"] = self.config.client_id

        logger.debug(
            f"Token request: grant_type={form.get('grant_type')}, "
            f"client_id={self.config.client_id}, "
            f"client_auth={'basic' if self.config.is_confidential else 'none'}"
        )

        return self.build_request(
            self.config.token_uri, "POST", headers, form, request_options
        )

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request through the transport. Errors propagate unchanged."""
        return await self.transport.send(request)

    async def request_tokens(
        self,
        body: Mapping[str, str],
        request_options: RequestOptions | None = None,
    ) -> TokenResponse:
        """Build, send and parse a token endpoint request."""
        request = self.build_token_request(body, request_options)
        response = await self.send(request)
        return self.parse_token_response(response)

    def parse_token_response(self, response: httpx.Response) -> TokenResponse:
        """Validate a token endpoint response (RFC 6749 Section 5).

        Args:
            response: HTTP response from the token endpoint

        Returns:
            TokenResponse: Normalized tokens plus the raw JSON body

        Raises:
            OAuth2ResponseError: If the server returned an OAuth error
            TokenResponseError: If the response has an unexpected shape
        """
        if not response.is_success:
            raise self._token_error(response)

        try:
            body = response.json()
        except ValueError as e:
            raise TokenResponseError("Response is not JSON encoded", response) from e

        if not isinstance(body, dict):
            raise TokenResponseError("body is not a JSON object", response)

        _require_string(body, "access_token", response)
        _require_string(body, "token_type", response)
        _optional_string(body, "refresh_token", response)
        _optional_string(body, "scope", response)
        _optional_string(body, "id_token", response)

        expires_in = body.get("expires_in")
        if expires_in is not None and not (
            is_number(expires_in) and expires_in >= 0
        ):
            raise TokenResponseError("expires_in is not a number", response)

        tokens = Tokens(
            access_token=body["access_token"],
            token_type=body["token_type"],
            expires_in=int(expires_in) if expires_in is not None else None,
            refresh_token=body.get("refresh_token") or None,
            scope=body["scope"].split(" ") if body.get("scope") else None,
        )

        logger.info("Token request successful")
        return TokenResponse(tokens=tokens, body=body, response=response)

    def _token_error(
        self, response: httpx.Response
    ) -> OAuth2ResponseError | TokenResponseError:
        """Build an OAuth2ResponseError from an error response body.

        Falls back to TokenResponseError when the body carries no error.
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("error"), str):
            error = OAuth2ResponseError.from_body(body)
            logger.warning(
                f"Token request failed with {response.status_code}: "
                f"{error.error} - {error.error_description or 'No description provided'}"
            )
            return error

        logger.warning(f"Token request failed with {response.status_code}")
        return TokenResponseError(
            f"Server returned {response.status_code} and no error description was given",
            response,
        )

    def check_redirect_path(self, url: SplitResult) -> None:
        """Require the redirect path to match the configured redirect URI.

        Raises:
            AuthorizationResponseError: If the paths differ
        """
        if self.config.redirect_uri is None:
            return
        expected_path = _normalize_path(urlsplit(self.config.redirect_uri).path)
        if _normalize_path(url.path) != expected_path:
            raise AuthorizationResponseError(
                f"Redirect path should match configured path, but got: {url.path}"
            )

    async def validate_state(
        self,
        received: str | None,
        state: str | None = None,
        state_validator: StateValidator | None = None,
    ) -> None:
        """Validate the state returned with an authorization response.

        A call-level validator takes precedence over an expected state value,
        which takes precedence over the client's default validator. Without
        any of them the state is not checked.

        Raises:
            StateValidationError: If the validator rejects the received state
        """
        validator = state_validator
        if validator is None and state is not None:
            validator = _expect_state(state)
        if validator is None:
            validator = self.config.defaults.state_validator
        if validator is None:
            return

        result = validator(received)
        if inspect.isawaitable(result):
            result = await result

        if not result:
            if received is None:
                raise StateValidationError("missing state")
            raise StateValidationError(f"invalid state: {received}")


def _expect_state(expected: str) -> StateValidator:
    def validator(received: str | None) -> bool:
        if received is None:
            return False
        return secrets.compare_digest(expected.encode(), received.encode())

    return validator


def _normalize_path(path: str) -> str:
    # An absolute URI with an empty path refers to "/"
    return path or "/"


def _require_string(
    body: dict[str, Any], key: str, response: httpx.Response
) -> None:
    value = body.get(key)
    if value is None or value == "":
        raise TokenResponseError(f"missing {key}", response)
    if not isinstance(value, str):
        raise TokenResponseError(f"{key} is not a string", response)


def _optional_string(
    body: dict[str, Any], key: str, response: httpx.Response
) -> None:
    value = body.get(key)
    if value is not None and not isinstance(value, str):
        raise TokenResponseError(f"{key} is not a string", response)
