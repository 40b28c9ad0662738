"""OAuth 2.0 Resource Owner Password Credentials Grant (RFC 6749 Section 4.3)."""

from __future__ import annotations

from oauth2_grants.models.config import RequestOptions
from oauth2_grants.models.tokens import Tokens
from oauth2_grants.services.toolkit import OAuth2GrantToolkit


class ResourceOwnerPasswordCredentialsGrant:
    """Exchanges the resource owner's username and password for tokens."""

    def __init__(self, toolkit: OAuth2GrantToolkit):
        self._toolkit = toolkit

    async def get_token(
        self,
        username: str,
        password: str,
        scope: str | list[str] | None = None,
        request_options: RequestOptions | None = None,
    ) -> Tokens:
        """Request an access token and optional refresh token."""
        body = {
            "grant_type": "password",
            "username": username,
            "password": password,
        }
        resolved_scope = self._toolkit.resolve_scope(scope)
        if resolved_scope:
            body["scope"] = resolved_scope

        token_response = await self._toolkit.request_tokens(body, request_options)
        return token_response.tokens
