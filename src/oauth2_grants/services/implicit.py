"""OAuth 2.0 Implicit Grant.

Implements RFC 6749 Section 4.2. The access token arrives in the fragment
of the redirect URI, so there is no token endpoint round trip.
"""

from __future__ import annotations

import logging

import httpx

from oauth2_grants.models.config import StateValidator
from oauth2_grants.models.errors import AuthorizationResponseError, OAuth2ResponseError
from oauth2_grants.models.tokens import Tokens
from oauth2_grants.services.toolkit import (
    OAuth2GrantToolkit,
    append_query_params,
    parse_params,
    to_url,
)

logger = logging.getLogger(__name__)


class ImplicitGrant:
    """Implements the OAuth 2.0 implicit grant."""

    def __init__(self, toolkit: OAuth2GrantToolkit):
        self._toolkit = toolkit

    def get_authorization_uri(
        self,
        state: str | None = None,
        scope: str | list[str] | None = None,
    ) -> str:
        """Build the authorization URI with ``response_type=token``."""
        config = self._toolkit.config
        params = {
            "response_type": "token",
            "client_id": config.client_id,
        }

        if config.redirect_uri is not None:
            params["redirect_uri"] = config.redirect_uri
        resolved_scope = self._toolkit.resolve_scope(scope)
        if resolved_scope:
            params["scope"] = resolved_scope
        if state:
            params["state"] = state

        return append_query_params(config.authorization_endpoint_uri, params)

    async def get_token(
        self,
        auth_response_uri: str | httpx.URL,
        state: str | None = None,
        state_validator: StateValidator | None = None,
    ) -> Tokens:
        """Parse tokens from the fragment of the redirect URI (RFC 6749 Section 4.2.2).

        Args:
            auth_response_uri: The complete URI the user-agent was redirected to
            state: State expected back
            state_validator: Custom state check, takes precedence over state

        Returns:
            Tokens: The issued tokens

        Raises:
            AuthorizationResponseError: If the redirect is invalid
            OAuth2ResponseError: If the redirect carries an error
        """
        url = to_url(auth_response_uri)
        self._toolkit.check_redirect_path(url)

        if not url.fragment:
            raise AuthorizationResponseError(
                "URI does not contain callback fragment parameters"
            )

        params = parse_params(url.fragment)

        if "error" in params:
            logger.warning(
                f"Implicit grant response contained error: {params['error']} - "
                f"{params.get('error_description')}"
            )
            raise OAuth2ResponseError.from_params(params)

        if not params.get("access_token"):
            raise AuthorizationResponseError("missing access_token")
        if not params.get("token_type"):
            raise AuthorizationResponseError("missing token_type")

        await self._toolkit.validate_state(params.get("state"), state, state_validator)

        expires_in = None
        if "expires_in" in params:
            try:
                expires_in = int(params["expires_in"])
            except ValueError as e:
                raise AuthorizationResponseError("expires_in is not a number") from e
            if expires_in < 0:
                raise AuthorizationResponseError("expires_in is not a number")

        scope = params.get("scope")
        return Tokens(
            access_token=params["access_token"],
            token_type=params["token_type"],
            expires_in=expires_in,
            scope=scope.split(" ") if scope else None,
        )
