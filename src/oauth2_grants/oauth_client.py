"""OAuth 2.0 client facade.

Holds the shared configuration and transport and exposes one instance of
each grant type.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Self

from oauth2_grants.models.config import ClientConfig
from oauth2_grants.primitives.pkce import PKCEGenerator, RandomSource
from oauth2_grants.primitives.transport import HTTPTransport, HttpxTransport
from oauth2_grants.services.authorization_code import AuthorizationCodeGrant
from oauth2_grants.services.client_credentials import ClientCredentialsGrant
from oauth2_grants.services.implicit import ImplicitGrant
from oauth2_grants.services.password import ResourceOwnerPasswordCredentialsGrant
from oauth2_grants.services.refresh_token import RefreshTokenGrant
from oauth2_grants.services.resource import ResourceRequester
from oauth2_grants.services.toolkit import OAuth2GrantToolkit

logger = logging.getLogger(__name__)


class OAuth2Client:
    """OAuth 2.0 client (Relying Party).

    Exposes the grant types of RFC 6749:
    - ``code``: Authorization Code Grant with PKCE (Section 4.1)
    - ``implicit``: Implicit Grant (Section 4.2)
    - ``password``: Resource Owner Password Credentials Grant (Section 4.3)
    - ``client_credentials``: Client Credentials Grant (Section 4.4)
    - ``refresh_token``: Refresh Token Grant (Section 6)
    - ``resource``: bearer-authenticated resource requests (RFC 6750)

    The client keeps no state between calls. Callers persist state values,
    PKCE verifiers and tokens themselves.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: HTTPTransport | None = None,
        random_source: RandomSource | None = None,
    ):
        """Initialize the OAuth client.

        Args:
            config: Client configuration
            transport: HTTP transport, defaults to an httpx-backed transport
            random_source: Random byte source for PKCE, for tests only
        """
        self.config = config
        self.transport = transport or HttpxTransport()

        toolkit = OAuth2GrantToolkit(config, self.transport)
        pkce_generator = PKCEGenerator(random_source)

        self.code = AuthorizationCodeGrant(toolkit, pkce_generator)
        self.implicit = ImplicitGrant(toolkit)
        self.password = ResourceOwnerPasswordCredentialsGrant(toolkit)
        self.client_credentials = ClientCredentialsGrant(toolkit)
        self.refresh_token = RefreshTokenGrant(toolkit)
        self.resource = ResourceRequester(toolkit)

        logger.debug(f"Initialized OAuth client {config.client_id}")

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
