"""OAuth 2.0 Refresh Token Grant (RFC 6749 Section 6)."""

from __future__ import annotations

import logging

from oauth2_grants.models.config import RequestOptions
from oauth2_grants.models.tokens import Tokens
from oauth2_grants.services.toolkit import OAuth2GrantToolkit, join_scope

logger = logging.getLogger(__name__)


class RefreshTokenGrant:
    """Exchanges a refresh token for a new access token."""

    def __init__(self, toolkit: OAuth2GrantToolkit):
        self._toolkit = toolkit

    async def refresh(
        self,
        refresh_token: str,
        scope: str | list[str] | None = None,
        request_options: RequestOptions | None = None,
    ) -> Tokens:
        """Refresh an access token.

        The server may not return a new refresh token. In that case the
        returned ``Tokens.refresh_token`` is None and the caller keeps
        using the one it passed in.

        Args:
            refresh_token: Refresh token issued earlier
            scope: Narrower scope to request. The default scope is not
                applied; omitting scope keeps the original grant's scope.
            request_options: Per-call request overrides

        Returns:
            Tokens: The refreshed tokens
        """
        body = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        narrowed_scope = join_scope(scope)
        if narrowed_scope:
            body["scope"] = narrowed_scope

        token_response = await self._toolkit.request_tokens(body, request_options)
        tokens = token_response.tokens
        if tokens.refresh_token is None:
            logger.debug("Refresh response did not rotate the refresh token")
        return tokens
