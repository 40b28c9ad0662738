"""OpenID Connect Authorization Code Flow.

Implements OIDC Core Section 3.1 on top of the OAuth 2.0 authorization code
grant: authentication request parameters on the authorization URI, and ID
token verification and validation after the code exchange.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import httpx

from oauth2_grants.models.config import OIDCClientConfig, RequestOptions, StateValidator
from oauth2_grants.models.errors import IDTokenValidationError, TokenResponseError
from oauth2_grants.models.flow import AuthorizationUri
from oauth2_grants.models.oidc import (
    Display,
    OIDCAuthorizationParams,
    OIDCTokens,
    Prompt,
)
from oauth2_grants.primitives.claims import validate_at_hash, validate_id_token_claims
from oauth2_grants.primitives.pkce import PKCEGenerator
from oauth2_grants.services.authorization_code import AuthorizationCodeGrant
from oauth2_grants.services.toolkit import OAuth2GrantToolkit, append_query_params

logger = logging.getLogger(__name__)


class OIDCAuthorizationCodeFlow:
    """Orchestrates the OpenID Connect Authorization Code Flow.

    Delegates the OAuth 2.0 parts to an ``AuthorizationCodeGrant`` and adds:
    - Authentication request parameters (nonce, prompt, max_age, ...)
    - ID token signature verification via the configured ``verify_jwt``
    - ID token claim validation (OIDC Core Section 3.1.3.7)
    - Access token hash validation (OIDC Core Section 3.1.3.8)
    """

    def __init__(self, toolkit: OAuth2GrantToolkit, pkce_generator: PKCEGenerator):
        if not isinstance(toolkit.config, OIDCClientConfig):
            raise TypeError("OIDC flow requires an OIDCClientConfig")
        self._toolkit = toolkit
        self._config: OIDCClientConfig = toolkit.config
        self._grant = AuthorizationCodeGrant(toolkit, pkce_generator)

    def get_authorization_uri(
        self,
        state: str | None = None,
        scope: str | list[str] | None = None,
        disable_pkce: bool = False,
        nonce: str | None = None,
        display: Display | None = None,
        prompt: Prompt | list[Prompt] | None = None,
        max_age: int | None = None,
        ui_locales: str | list[str] | None = None,
        id_token_hint: str | None = None,
        login_hint: str | None = None,
        acr_values: str | list[str] | None = None,
    ) -> AuthorizationUri:
        """Build the authentication request URI (OIDC Core Section 3.1.2.1).

        The ``openid`` scope is not added automatically; include it in the
        requested or default scope.

        Returns:
            The URI, plus the code verifier when PKCE is used
        """
        authorization_uri = self._grant.get_authorization_uri(
            state=state, scope=scope, disable_pkce=disable_pkce
        )
        oidc_params = OIDCAuthorizationParams(
            nonce=nonce,
            display=display,
            prompt=prompt,
            max_age=max_age,
            ui_locales=ui_locales,
            id_token_hint=id_token_hint,
            login_hint=login_hint,
            acr_values=acr_values,
        )
        uri = append_query_params(authorization_uri.uri, oidc_params.to_query_params())
        return replace(authorization_uri, uri=uri)

    async def get_token(
        self,
        auth_response_uri: str | httpx.URL,
        state: str | None = None,
        state_validator: StateValidator | None = None,
        code_verifier: str | None = None,
        nonce: str | None = None,
        request_options: RequestOptions | None = None,
    ) -> OIDCTokens:
        """Exchange the authorization code and validate the returned ID token.

        Args:
            auth_response_uri: The complete URI the user-agent was redirected to
            state: State expected back
            state_validator: Custom state check, takes precedence over state
            code_verifier: PKCE verifier returned with the authorization URI
            nonce: Nonce sent with the authentication request
            request_options: Per-call request overrides

        Returns:
            OIDCTokens: Tokens plus the raw and decoded ID token

        Raises:
            AuthorizationResponseError: If the redirect is invalid
            OAuth2ResponseError: If the server reported an error
            TokenResponseError: If the token response is malformed
            IDTokenValidationError: If the ID token fails verification
        """
        token_response = await self._grant.request_token_response(
            auth_response_uri,
            state=state,
            state_validator=state_validator,
            code_verifier=code_verifier,
            request_options=request_options,
        )
        body, response = token_response.body, token_response.response

        if "id_token" not in body:
            raise TokenResponseError("missing id_token", response)
        id_token_string = body["id_token"]
        if not isinstance(id_token_string, str):
            raise TokenResponseError("id_token is not a string", response)

        try:
            verified = await self._config.verify_jwt(id_token_string)
        except Exception as e:
            raise IDTokenValidationError(
                f"id_token could not be verified: {e}", response
            ) from e

        id_token = validate_id_token_claims(
            verified.payload, self._config.client_id, nonce, response
        )

        tokens = token_response.tokens
        if id_token.at_hash is not None:
            alg = verified.protected_header.get("alg")
            validate_at_hash(tokens.access_token, str(alg), id_token.at_hash, response)

        logger.info(f"ID token validated for subject {id_token.sub}")
        return OIDCTokens(
            **tokens.model_dump(),
            id_token_string=id_token_string,
            id_token=id_token,
        )
