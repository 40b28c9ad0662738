"""OAuth 2.0 Client Credentials Grant (RFC 6749 Section 4.4).

Only confidential clients may use this grant.
"""

from __future__ import annotations

from oauth2_grants.models.config import RequestOptions
from oauth2_grants.models.errors import MissingClientSecretError
from oauth2_grants.models.tokens import Tokens
from oauth2_grants.services.toolkit import OAuth2GrantToolkit


class ClientCredentialsGrant:
    """Requests tokens on behalf of the client itself."""

    def __init__(self, toolkit: OAuth2GrantToolkit):
        self._toolkit = toolkit

    async def get_token(
        self,
        scope: str | list[str] | None = None,
        request_options: RequestOptions | None = None,
    ) -> Tokens:
        """Request an access token using the client's own credentials.

        Raises:
            MissingClientSecretError: If no client secret is configured
        """
        if not self._toolkit.config.is_confidential:
            raise MissingClientSecretError()

        body = {"grant_type": "client_credentials"}
        resolved_scope = self._toolkit.resolve_scope(scope)
        if resolved_scope:
            body["scope"] = resolved_scope

        token_response = await self._toolkit.request_tokens(body, request_options)
        return token_response.tokens
