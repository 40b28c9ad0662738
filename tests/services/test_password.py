"""Tests for the resource owner password credentials grant."""

from urllib.parse import parse_qs

import pytest

from oauth2_grants.models.config import ClientDefaults, RequestOptions
from oauth2_grants.models.errors import OAuth2ResponseError


class TestResourceOwnerPasswordCredentialsGrant:
    """Test the resource owner password credentials grant."""

    async def test_requests_token(self, make_client, transport) -> None:
        """Test the credentials and default scope are posted."""
        # Arrange
        client = make_client(defaults=ClientDefaults(scope=["read", "write"]))

        # Act
        tokens = await client.password.get_token("alice", "p@ss word")

        # Assert
        assert tokens.access_token == "at"
        assert tokens.token_type == "tt"
        assert parse_qs(transport.last_request.content.decode()) == {
            "grant_type": ["password"],
            "username": ["alice"],
            "password": ["p@ss word"],
            "scope": ["read write"],
            "client_id": ["clientId"],
        }

    async def test_call_scope_overrides_default(self, make_client, transport) -> None:
        """Test a call scope replaces the default scope."""
        client = make_client(defaults=ClientDefaults(scope="default"))

        await client.password.get_token("alice", "secret", scope="narrow")

        assert parse_qs(transport.last_request.content.decode())["scope"] == ["narrow"]

    async def test_without_scope(self, make_client, transport) -> None:
        """Test no scope is sent when none is configured."""
        await make_client().password.get_token("alice", "secret")

        assert "scope" not in parse_qs(transport.last_request.content.decode())

    async def test_body_override(self, make_client, transport) -> None:
        """Test extra body fields can be added per call."""
        await make_client().password.get_token(
            "alice", "secret", request_options=RequestOptions(body={"otp": "123456"})
        )

        assert parse_qs(transport.last_request.content.decode())["otp"] == ["123456"]

    async def test_invalid_credentials(self, make_client, transport) -> None:
        """Test rejected credentials raise the OAuth error."""
        transport.queue_response(
            400,
            json={"error": "invalid_grant", "error_description": "Bad credentials"},
        )

        with pytest.raises(OAuth2ResponseError, match="Bad credentials") as exc_info:
            await make_client().password.get_token("alice", "wrong")

        assert exc_info.value.error == "invalid_grant"
