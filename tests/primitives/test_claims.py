"""Tests for ID token claim validation."""

import base64
import hashlib
from typing import Any

import httpx
import pytest

from oauth2_grants.models.errors import IDTokenValidationError
from oauth2_grants.primitives.claims import (
    compute_at_hash,
    is_number,
    validate_at_hash,
    validate_id_token_claims,
)

NOW = 1_700_000_000


def make_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "iss": "https://auth.server",
        "sub": "user-1",
        "aud": "clientId",
        "exp": NOW + 60,
        "iat": NOW,
    }
    payload.update(overrides)
    return payload


def left_half_hash(access_token: str, hash_function: Any) -> str:
    digest = hash_function(access_token.encode()).digest()
    return base64.urlsafe_b64encode(digest[: len(digest) // 2]).decode().rstrip("=")


class TestIsNumber:
    """Test the JSON number check used for numeric claims."""

    @pytest.mark.parametrize("value", [0, 1, -1, 1.5, 10**400])
    def test_accepts_finite_numbers(self, value: Any) -> None:
        """Test integers of any size and finite floats are numbers."""
        assert is_number(value)

    @pytest.mark.parametrize(
        "value", [True, False, float("nan"), float("inf"), float("-inf"), "1", None]
    )
    def test_rejects_non_numbers(self, value: Any) -> None:
        """Test booleans, NaN, infinities and non-numeric types are refused."""
        assert not is_number(value)


class TestValidateIdTokenClaims:
    """Test ID token claim validation rules."""

    def setup_method(self) -> None:
        self.response = httpx.Response(200)

    def validate(self, payload: dict[str, Any], nonce: str | None = None):
        return validate_id_token_claims(
            payload, "clientId", nonce, self.response, now=NOW
        )

    def test_valid_payload(self) -> None:
        """Test a complete valid payload returns the claim set."""
        # Act
        id_token = self.validate(make_payload(nonce="n-1", azp="clientId"), "n-1")

        # Assert
        assert id_token.iss == "https://auth.server"
        assert id_token.sub == "user-1"
        assert id_token.nonce == "n-1"
        assert id_token.azp == "clientId"

    def test_keeps_extra_claims(self) -> None:
        """Test claims beyond the standard set are preserved."""
        id_token = self.validate(make_payload(email="user@example.com"))

        assert id_token.model_extra == {"email": "user@example.com"}

    @pytest.mark.parametrize("claim", ["iss", "sub", "aud", "exp", "iat"])
    def test_missing_required_claim(self, claim: str) -> None:
        """Test each required claim must be present."""
        payload = make_payload()
        del payload[claim]

        with pytest.raises(IDTokenValidationError, match=f"missing the {claim} claim"):
            self.validate(payload)

    def test_error_carries_response(self) -> None:
        """Test validation errors keep the token endpoint response."""
        payload = make_payload()
        del payload["iss"]

        with pytest.raises(IDTokenValidationError) as exc_info:
            self.validate(payload)

        assert exc_info.value.response is self.response

    @pytest.mark.parametrize(
        "claim,value",
        [
            ("iss", 1),
            ("sub", None),
            ("aud", "otherClient"),
            ("aud", ["a", "b"]),
            ("exp", float("nan")),
            ("exp", float("inf")),
            ("iat", "yesterday"),
            ("iat", float("nan")),
            ("auth_time", "now"),
            ("auth_time", float("-inf")),
            ("acr", 1),
            ("amr", ["pwd", 1]),
            ("azp", "otherClient"),
            ("at_hash", 123),
        ],
    )
    def test_invalid_claim(self, claim: str, value: Any) -> None:
        """Test claims with the wrong type or value are rejected."""
        with pytest.raises(IDTokenValidationError, match=f"invalid {claim} claim"):
            self.validate(make_payload(**{claim: value}))

    def test_audience_list_containing_client(self) -> None:
        """Test an audience list is valid when it contains the client."""
        id_token = self.validate(make_payload(aud=["other", "clientId"]))

        assert id_token.aud == ["other", "clientId"]

    def test_boolean_exp_is_invalid(self) -> None:
        """Test a boolean is not accepted as a numeric date."""
        with pytest.raises(IDTokenValidationError, match="invalid exp claim"):
            self.validate(make_payload(exp=True))

    @pytest.mark.parametrize("exp", [NOW, NOW - 1])
    def test_expired_token(self, exp: int) -> None:
        """Test tokens expiring at or before now are rejected."""
        with pytest.raises(IDTokenValidationError, match="already expired"):
            self.validate(make_payload(exp=exp))

    def test_nonce_mismatch(self) -> None:
        """Test the nonce must equal the one sent."""
        with pytest.raises(IDTokenValidationError, match="invalid nonce claim"):
            self.validate(make_payload(nonce="other"), "expected")

    def test_nonce_missing_when_expected(self) -> None:
        """Test the nonce must be present when one was sent."""
        with pytest.raises(IDTokenValidationError, match="missing the nonce claim"):
            self.validate(make_payload(), "expected")

    def test_unexpected_nonce(self) -> None:
        """Test a nonce is rejected when none was sent."""
        with pytest.raises(IDTokenValidationError, match="none was expected"):
            self.validate(make_payload(nonce="surprise"))


class TestAtHash:
    """Test access token hash computation and validation."""

    def setup_method(self) -> None:
        self.response = httpx.Response(200)

    @pytest.mark.parametrize(
        "alg,hash_function",
        [
            ("RS256", hashlib.sha256),
            ("RS384", hashlib.sha384),
            ("RS512", hashlib.sha512),
            ("PS256", hashlib.sha256),
            ("PS384", hashlib.sha384),
            ("PS512", hashlib.sha512),
            ("ES256", hashlib.sha256),
            ("ES384", hashlib.sha384),
            ("ES512", hashlib.sha512),
        ],
    )
    def test_each_supported_algorithm(self, alg: str, hash_function: Any) -> None:
        """Test every supported family hashes with the alg's SHA-2 size."""
        # Arrange
        expected = left_half_hash("AT", hash_function)

        # Act
        at_hash = compute_at_hash("AT", alg)

        # Assert
        assert at_hash == expected
        validate_at_hash("AT", alg, expected, self.response)
        with pytest.raises(IDTokenValidationError, match="does not match"):
            validate_at_hash("other", alg, expected, self.response)

    def test_compute_at_hash_is_unpadded(self) -> None:
        """Test the at_hash uses base64url without padding."""
        assert "=" not in compute_at_hash("AT", "RS256")

    @pytest.mark.parametrize("alg", ["HS256", "none", "EdDSA"])
    def test_unsupported_algorithm_fails_closed(self, alg: str) -> None:
        """Test an at_hash signed with an unknown alg is rejected."""
        with pytest.raises(IDTokenValidationError, match="unsupported algorithm"):
            validate_at_hash("AT", alg, "anything", self.response)
