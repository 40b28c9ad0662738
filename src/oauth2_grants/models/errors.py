"""Exception hierarchy for OAuth 2.0 and OpenID Connect client errors.

Provides specific exception types for different failure modes to enable
precise error handling and recovery strategies.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 related errors."""

    pass


class OAuth2ResponseError(OAuth2Error):
    """Raised when the authorization server reports an OAuth error.

    Covers both error redirects (RFC 6749 Section 4.1.2.1) and error
    responses from the token endpoint (RFC 6749 Section 5.2).
    """

    def __init__(
        self,
        error: str,
        error_description: str | None = None,
        error_uri: str | None = None,
        state: str | None = None,
    ):
        super().__init__(error_description or error)
        self.error = error
        self.error_description = error_description
        self.error_uri = error_uri
        self.state = state

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> OAuth2ResponseError:
        """Build an error from redirect query or fragment parameters.

        Raises:
            ValueError: If the parameters carry no ``error`` value
        """
        error = params.get("error")
        if error is None:
            raise ValueError("error URL parameter must be set")

        return cls(
            error=error,
            error_description=params.get("error_description"),
            error_uri=params.get("error_uri"),
            state=params.get("state"),
        )

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> OAuth2ResponseError:
        """Build an error from a JSON token endpoint error body."""

        def optional_string(key: str) -> str | None:
            value = body.get(key)
            return value if isinstance(value, str) else None

        return cls(
            error=body["error"],
            error_description=optional_string("error_description"),
            error_uri=optional_string("error_uri"),
            state=optional_string("state"),
        )


class AuthorizationResponseError(OAuth2Error):
    """Raised when an authorization response redirect is malformed or invalid.

    Detected locally, before any request to the token endpoint is made.
    """

    pass


class StateValidationError(AuthorizationResponseError):
    """Raised when OAuth state parameter validation fails.

    This indicates either a missing state parameter or a state mismatch,
    which could indicate a CSRF attack or authorization server issue.
    """

    pass


class TokenResponseError(OAuth2Error):
    """Raised when the token endpoint response has an unexpected shape."""

    def __init__(self, description: str, response: httpx.Response):
        super().__init__(f"Invalid token response: {description}")
        self.description = description
        self.response = response


class IDTokenValidationError(TokenResponseError):
    """Raised when an OpenID Connect ID token fails verification or validation."""

    pass


class MissingClientSecretError(OAuth2Error):
    """Raised when a grant that needs a confidential client has no secret."""

    def __init__(self, message: str = "this grant requires a client_secret to be set"):
        super().__init__(message)


class UserInfoError(OAuth2Error):
    """Raised when requesting claims from the UserInfo endpoint fails."""

    pass


class ResourceResponseError(OAuth2Error):
    """Raised when a protected resource returns a non-success status."""

    def __init__(self, description: str, response: httpx.Response):
        super().__init__(description)
        self.description = description
        self.response = response
