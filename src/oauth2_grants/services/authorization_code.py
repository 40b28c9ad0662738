"""OAuth 2.0 Authorization Code Grant with PKCE.

Implements RFC 6749 Section 4.1 with RFC 7636 PKCE. The grant is split in
two phases connected only through state the caller holds: building the
authorization URI, and exchanging the code from the redirect for tokens.
"""

from __future__ import annotations

import logging
from urllib.parse import SplitResult, urlunsplit

import httpx

from oauth2_grants.models.config import RequestOptions, StateValidator
from oauth2_grants.models.errors import AuthorizationResponseError, OAuth2ResponseError
from oauth2_grants.models.flow import (
    AuthorizationCodeResponse,
    AuthorizationUri,
    AuthorizationUriWithoutVerifier,
    AuthorizationUriWithVerifier,
)
from oauth2_grants.models.tokens import TokenResponse, Tokens
from oauth2_grants.primitives.pkce import PKCEGenerator
from oauth2_grants.services.toolkit import (
    OAuth2GrantToolkit,
    append_query_params,
    parse_params,
    to_url,
)

logger = logging.getLogger(__name__)


class AuthorizationCodeGrant:
    """Implements the OAuth 2.0 authorization code grant.

    Handles both phases of the flow:
    - Authorization URI construction with PKCE (enabled by default)
    - Redirect validation: path, error passthrough, code and state
    - Authorization code to token exchange (RFC 6749 Section 4.1.3)

    Nothing is stored between the phases. When PKCE is used the caller must
    keep the returned code verifier and pass it to ``get_token``.
    """

    def __init__(self, toolkit: OAuth2GrantToolkit, pkce_generator: PKCEGenerator):
        self._toolkit = toolkit
        self._pkce_generator = pkce_generator

    def get_authorization_uri(
        self,
        state: str | None = None,
        scope: str | list[str] | None = None,
        disable_pkce: bool = False,
    ) -> AuthorizationUri:
        """Build the URI to send the user-agent to for the authorization request.

        Args:
            state: Opaque value echoed back by the authorization server
            scope: Scope to request, overrides the default scope
            disable_pkce: Build the URI without a PKCE challenge

        Returns:
            The URI, plus the code verifier when PKCE is used
        """
        config = self._toolkit.config
        params = {
            "response_type": "code",
            "client_id": config.client_id,
        }

        if config.redirect_uri is not None:
            params["redirect_uri"] = config.redirect_uri
        resolved_scope = self._toolkit.resolve_scope(scope)
        if resolved_scope:
            params["scope"] = resolved_scope
        if state:
            params["state"] = state

        if disable_pkce:
            uri = append_query_params(config.authorization_endpoint_uri, params)
            return AuthorizationUriWithoutVerifier(uri=uri)

        pkce_params = self._pkce_generator.generate()
        params["code_challenge"] = pkce_params.code_challenge
        params["code_challenge_method"] = pkce_params.code_challenge_method

        uri = append_query_params(config.authorization_endpoint_uri, params)
        logger.debug(f"Generated authorization URI for client {config.client_id}")
        return AuthorizationUriWithVerifier(
            uri=uri, code_verifier=pkce_params.code_verifier
        )

    async def get_token(
        self,
        auth_response_uri: str | httpx.URL,
        state: str | None = None,
        state_validator: StateValidator | None = None,
        code_verifier: str | None = None,
        request_options: RequestOptions | None = None,
    ) -> Tokens:
        """Validate the authorization response and exchange the code for tokens.

        Args:
            auth_response_uri: The complete URI the authorization server
                redirected the user-agent to, including all parameters
            state: State expected back, usually the one sent in the request
            state_validator: Custom state check, takes precedence over state
            code_verifier: PKCE verifier returned with the authorization URI
            request_options: Per-call request overrides

        Returns:
            Tokens: The issued tokens

        Raises:
            AuthorizationResponseError: If the redirect is invalid
            OAuth2ResponseError: If the server reported an error
            TokenResponseError: If the token response is malformed
        """
        token_response = await self.request_token_response(
            auth_response_uri,
            state=state,
            state_validator=state_validator,
            code_verifier=code_verifier,
            request_options=request_options,
        )
        return token_response.tokens

    async def request_token_response(
        self,
        auth_response_uri: str | httpx.URL,
        state: str | None = None,
        state_validator: StateValidator | None = None,
        code_verifier: str | None = None,
        request_options: RequestOptions | None = None,
    ) -> TokenResponse:
        """Same as ``get_token`` but returns the full parsed token response."""
        validated = await self.validate_authorization_response(
            to_url(auth_response_uri), state, state_validator
        )
        logger.info("Authorization response valid - exchanging authorization code")

        body = {
            "grant_type": "authorization_code",
            "code": validated.code,
        }
        if self._toolkit.config.redirect_uri is not None:
            body["redirect_uri"] = self._toolkit.config.redirect_uri
        if code_verifier is not None:
            body["code_verifier"] = code_verifier

        return await self._toolkit.request_tokens(body, request_options)

    async def validate_authorization_response(
        self,
        url: SplitResult,
        state: str | None = None,
        state_validator: StateValidator | None = None,
    ) -> AuthorizationCodeResponse:
        """Validate an authorization response redirect (RFC 6749 Section 4.1.2).

        An ``error`` parameter always wins over any other parameter.

        Raises:
            AuthorizationResponseError: If the redirect is invalid
            OAuth2ResponseError: If the redirect carries an error
        """
        self._toolkit.check_redirect_path(url)

        if not url.query:
            raise AuthorizationResponseError(
                f"URI does not contain callback parameters: {urlunsplit(url)}"
            )

        params = parse_params(url.query)

        if "error" in params:
            logger.warning(
                f"Authorization response contained error: {params['error']} - "
                f"{params.get('error_description')}"
            )
            raise OAuth2ResponseError.from_params(params)

        code = params.get("code")
        if not code:
            raise AuthorizationResponseError("Missing code, unable to request token")

        received_state = params.get("state")
        await self._toolkit.validate_state(received_state, state, state_validator)

        return AuthorizationCodeResponse(code=code, state=received_state)
