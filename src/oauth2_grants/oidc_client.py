"""OpenID Connect client facade."""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self

from oauth2_grants.models.config import OIDCClientConfig
from oauth2_grants.models.oidc import IDToken
from oauth2_grants.primitives.pkce import PKCEGenerator, RandomSource
from oauth2_grants.primitives.transport import HTTPTransport, HttpxTransport
from oauth2_grants.services.oidc_flow import OIDCAuthorizationCodeFlow
from oauth2_grants.services.refresh_token import RefreshTokenGrant
from oauth2_grants.services.toolkit import OAuth2GrantToolkit
from oauth2_grants.services.userinfo import UserInfoService


class OIDCClient:
    """OpenID Connect Relying Party.

    ``code`` implements the Authorization Code Flow (OIDC Core Section 3.1),
    ``refresh_token`` the OAuth 2.0 refresh grant, and ``get_user_info``
    the UserInfo request (OIDC Core Section 5.3).
    """

    def __init__(
        self,
        config: OIDCClientConfig,
        transport: HTTPTransport | None = None,
        random_source: RandomSource | None = None,
    ):
        self.config = config
        self.transport = transport or HttpxTransport()

        toolkit = OAuth2GrantToolkit(config, self.transport)
        self.code = OIDCAuthorizationCodeFlow(toolkit, PKCEGenerator(random_source))
        self.refresh_token = RefreshTokenGrant(toolkit)
        self._user_info = UserInfoService(config, self.transport)

    async def get_user_info(
        self,
        access_token: str,
        id_token: IDToken,
        request_headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Request claims about the End-User from the UserInfo endpoint.

        Raises:
            UserInfoError: If the request fails or the claims do not belong
                to the ID token's subject
        """
        return await self._user_info.get_user_info(
            access_token, id_token, request_headers
        )

    async def close(self) -> None:
        """Close the transport."""
        await self.transport.close()

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
