"""Tests for the error types."""

import httpx
import pytest

from oauth2_grants.models.errors import (
    AuthorizationResponseError,
    IDTokenValidationError,
    MissingClientSecretError,
    OAuth2Error,
    OAuth2ResponseError,
    StateValidationError,
    TokenResponseError,
)


class TestOAuth2ResponseError:
    """Test the OAuth error response exception."""

    def test_message_prefers_description(self) -> None:
        """Test the description is used as the message when present."""
        # Act
        error = OAuth2ResponseError(
            error="invalid_request",
            error_description="Error description",
            error_uri="error://uri",
            state="state",
        )

        # Assert
        assert str(error) == "Error description"
        assert error.error == "invalid_request"
        assert error.error_description == "Error description"
        assert error.error_uri == "error://uri"
        assert error.state == "state"

    def test_message_falls_back_to_error_code(self) -> None:
        """Test the error code is the message without a description."""
        error = OAuth2ResponseError(error="invalid_request")

        assert str(error) == "invalid_request"
        assert error.error_description is None
        assert error.error_uri is None
        assert error.state is None

    def test_from_params_without_error_raises(self) -> None:
        """Test building from parameters requires an error value."""
        with pytest.raises(ValueError, match="error URL parameter must be set"):
            OAuth2ResponseError.from_params({"code": "code"})

    def test_from_params_only_error(self) -> None:
        """Test optional fields stay None when absent."""
        error = OAuth2ResponseError.from_params({"error": "access_denied"})

        assert error.error == "access_denied"
        assert error.error_description is None
        assert error.error_uri is None
        assert error.state is None

    def test_from_params_all_fields(self) -> None:
        """Test every error parameter is carried over."""
        error = OAuth2ResponseError.from_params(
            {
                "error": "access_denied",
                "error_description": "User denied access",
                "error_uri": "https://auth.server/errors/access_denied",
                "state": "xyz",
            }
        )

        assert error.error == "access_denied"
        assert error.error_description == "User denied access"
        assert error.error_uri == "https://auth.server/errors/access_denied"
        assert error.state == "xyz"

    def test_from_body_ignores_non_string_optional_fields(self) -> None:
        """Test non-string optional body fields are dropped."""
        error = OAuth2ResponseError.from_body(
            {"error": "invalid_grant", "error_description": 42}
        )

        assert error.error == "invalid_grant"
        assert error.error_description is None


class TestErrorTaxonomy:
    """Test the error hierarchy and messages."""

    def test_token_response_error_carries_response(self) -> None:
        """Test the token response error keeps its response and description."""
        # Arrange
        response = httpx.Response(500, text="boom")

        # Act
        error = TokenResponseError("missing access_token", response)

        # Assert
        assert str(error) == "Invalid token response: missing access_token"
        assert error.description == "missing access_token"
        assert error.response is response

    def test_hierarchy(self) -> None:
        """Test every error derives from OAuth2Error."""
        response = httpx.Response(200)

        assert issubclass(StateValidationError, AuthorizationResponseError)
        assert isinstance(IDTokenValidationError("x", response), TokenResponseError)
        for error_type in (
            OAuth2ResponseError,
            AuthorizationResponseError,
            TokenResponseError,
            MissingClientSecretError,
        ):
            assert issubclass(error_type, OAuth2Error)

    def test_missing_client_secret_message(self) -> None:
        """Test the missing secret error names the requirement."""
        assert str(MissingClientSecretError()) == (
            "this grant requires a client_secret to be set"
        )
