"""Bearer-authenticated requests to a protected resource (RFC 6750)."""

from __future__ import annotations

import logging

import httpx

from oauth2_grants.models.config import RequestOptions
from oauth2_grants.models.errors import ResourceResponseError
from oauth2_grants.services.toolkit import OAuth2GrantToolkit

logger = logging.getLogger(__name__)


class ResourceRequester:
    """Sends requests to the configured resource server using an access token."""

    def __init__(self, toolkit: OAuth2GrantToolkit):
        self._toolkit = toolkit

    async def request(
        self,
        method: str,
        resource_path: str,
        token: str,
        request_options: RequestOptions | None = None,
    ) -> httpx.Response:
        """Send a bearer-authenticated request to ``resource_endpoint_host``.

        Args:
            method: HTTP method
            resource_path: Path appended to the resource endpoint host
            token: Access token
            request_options: Per-call request overrides

        Returns:
            The successful response

        Raises:
            ValueError: If no resource endpoint host is configured
            ResourceResponseError: If the resource returned a non-2xx status
        """
        host = self._toolkit.config.resource_endpoint_host
        if host is None:
            raise ValueError("resource requests require resource_endpoint_host")

        resource_url = host + resource_path
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        request = self._toolkit.build_request(
            resource_url, method.upper(), headers, None, request_options
        )

        response = await self._toolkit.send(request)
        if not response.is_success:
            logger.warning(
                f"Resource request {method.upper()} {resource_path} failed "
                f"with {response.status_code}"
            )
            raise ResourceResponseError(
                f"Response error from {resource_url}: {response.status_code}",
                response,
            )
        return response
