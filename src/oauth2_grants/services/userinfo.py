"""OpenID Connect UserInfo endpoint client (OIDC Core Section 5.3)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from oauth2_grants.models.config import OIDCClientConfig
from oauth2_grants.models.errors import UserInfoError
from oauth2_grants.models.oidc import IDToken
from oauth2_grants.primitives.claims import includes_claim, is_object
from oauth2_grants.primitives.transport import HTTPTransport
from oauth2_grants.services.toolkit import merge_headers

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
JWT_CONTENT_TYPE = "application/jwt"


class UserInfoService:
    """Retrieves claims about the authenticated End-User.

    The returned claims are only accepted when their ``sub`` equals the
    subject of the ID token, which prevents token substitution across users.
    """

    def __init__(self, config: OIDCClientConfig, transport: HTTPTransport):
        self._config = config
        self._transport = transport

    async def get_user_info(
        self,
        access_token: str,
        id_token: IDToken,
        request_headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Request the UserInfo claims for an access token.

        Args:
            access_token: Access token from the OIDC code flow
            id_token: Validated ID token issued with the access token
            request_headers: Extra request headers

        Returns:
            The UserInfo claims

        Raises:
            UserInfoError: If the endpoint is not configured, the request
                fails or the response is invalid
        """
        if self._config.user_info_endpoint is None:
            raise UserInfoError(
                "calling get_user_info() requires a user_info_endpoint to be configured"
            )

        headers = merge_headers(
            request_headers, {"Authorization": f"Bearer {access_token}"}
        )
        request = httpx.Request("GET", self._config.user_info_endpoint, headers=headers)
        response = await self._transport.send(request)

        if not response.is_success:
            logger.warning(f"UserInfo request failed with {response.status_code}")
            raise UserInfoError(
                f"userinfo returned an error (status {response.status_code})"
            )

        payload = await self._get_response_payload(response)

        if not includes_claim(payload, "sub", lambda sub: sub == id_token.sub):
            raise UserInfoError(
                "the userinfo response body contained an invalid `sub` claim"
            )

        return payload

    async def _get_response_payload(self, response: httpx.Response) -> dict[str, Any]:
        """Parse the UserInfo response according to its content type."""
        content_type = response.headers.get("Content-Type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()

        if media_type == JSON_CONTENT_TYPE:
            try:
                body = response.json()
            except ValueError as e:
                raise UserInfoError("the userinfo response body was not valid JSON") from e
            if not is_object(body):
                raise UserInfoError("the userinfo response body was not a JSON object")
            return body

        if media_type == JWT_CONTENT_TYPE:
            try:
                verified = await self._config.verify_jwt(response.text)
            except Exception as e:
                raise UserInfoError("failed to validate the userinfo JWT response") from e
            return verified.payload

        raise UserInfoError(
            "the userinfo response had an invalid content-type. Expected "
            f"{JSON_CONTENT_TYPE} or {JWT_CONTENT_TYPE}, but got {content_type or None}"
        )
