"""ID token claim validation (OIDC Core Section 3.1.3.7).

Signature verification is delegated to the injected JWT verifier; these
checks run on the verified payload. Any failure rejects the whole token.
"""

from __future__ import annotations

import hashlib
import math
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from oauth2_grants.models.errors import IDTokenValidationError
from oauth2_grants.models.oidc import IDToken
from oauth2_grants.primitives.pkce import base64url_encode

# at_hash uses the hash function of the ID token's signing algorithm
AT_HASH_ALGORITHMS: dict[str, Callable[..., Any]] = {
    "RS256": hashlib.sha256,
    "RS384": hashlib.sha384,
    "RS512": hashlib.sha512,
    "PS256": hashlib.sha256,
    "PS384": hashlib.sha384,
    "PS512": hashlib.sha512,
    "ES256": hashlib.sha256,
    "ES384": hashlib.sha384,
    "ES512": hashlib.sha512,
}


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def is_number(value: Any) -> bool:
    """True for finite JSON numbers. Booleans, NaN and infinities are rejected."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def includes_claim(
    payload: dict[str, Any], key: str, is_valid: Callable[[Any], bool]
) -> bool:
    """True if the claim is present and valid."""
    return key in payload and is_valid(payload[key])


def require_claim(
    payload: dict[str, Any],
    key: str,
    is_valid: Callable[[Any], bool],
    response: httpx.Response,
) -> None:
    if key not in payload:
        raise IDTokenValidationError(f"id_token is missing the {key} claim", response)
    if not is_valid(payload[key]):
        raise IDTokenValidationError(
            f"id_token contains an invalid {key} claim", response
        )


def require_optional_claim(
    payload: dict[str, Any],
    key: str,
    is_valid: Callable[[Any], bool],
    response: httpx.Response,
) -> None:
    if key in payload and not is_valid(payload[key]):
        raise IDTokenValidationError(
            f"id_token contains an invalid {key} claim", response
        )


def validate_id_token_claims(
    payload: dict[str, Any],
    client_id: str,
    nonce: str | None,
    response: httpx.Response,
    now: float | None = None,
) -> IDToken:
    """Validate the claims of a verified ID token payload.

    Args:
        payload: Verified JWT payload
        client_id: This client's identifier, must be in ``aud``
        nonce: Nonce sent in the authentication request, if any
        response: Token endpoint response, attached to raised errors
        now: Current Unix time, defaults to time.time()

    Returns:
        IDToken: The validated claim set

    Raises:
        IDTokenValidationError: If any claim check fails
    """
    current_time = time.time() if now is None else now

    def is_valid_audience(aud: Any) -> bool:
        if is_string(aud):
            return aud == client_id
        return is_string_list(aud) and client_id in aud

    require_claim(payload, "iss", is_string, response)
    require_claim(payload, "sub", is_string, response)
    require_claim(payload, "aud", is_valid_audience, response)
    require_claim(payload, "exp", is_number, response)
    # The token must expire strictly after the current time
    if payload["exp"] <= current_time:
        raise IDTokenValidationError("id_token is already expired", response)
    require_claim(payload, "iat", is_number, response)
    require_optional_claim(payload, "auth_time", is_number, response)

    if nonce is not None:
        require_claim(payload, "nonce", lambda v: v == nonce, response)
    elif "nonce" in payload:
        raise IDTokenValidationError(
            "id_token contained a nonce, but none was expected", response
        )

    require_optional_claim(payload, "acr", is_string, response)
    require_optional_claim(payload, "amr", is_string_list, response)
    require_optional_claim(payload, "azp", lambda v: v == client_id, response)
    require_optional_claim(payload, "at_hash", is_string, response)

    try:
        return IDToken.model_validate(payload)
    except ValidationError as e:
        raise IDTokenValidationError(f"id_token claims are invalid: {e}", response) from e


def compute_at_hash(access_token: str, alg: str) -> str | None:
    """Compute the at_hash value for an access token (OIDC Core Section 3.1.3.6).

    Base64url encoding of the left half of the hash of the access
    token, using the hash function of the ID token's ``alg``.

    Returns:
        The at_hash, or None if the algorithm is not supported
    """
    hash_function = AT_HASH_ALGORITHMS.get(alg)
    if hash_function is None:
        return None
    digest = hash_function(access_token.encode("utf-8")).digest()
    return base64url_encode(digest[: len(digest) // 2])


def validate_at_hash(
    access_token: str, alg: str, at_hash: str, response: httpx.Response
) -> None:
    """Require the ID token's at_hash to match the issued access token.

    Raises:
        IDTokenValidationError: If the algorithm is unsupported or the hash differs
    """
    expected = compute_at_hash(access_token, alg)
    if expected is None:
        raise IDTokenValidationError(
            f"id_token uses unsupported algorithm for signing: {alg}", response
        )
    if expected != at_hash:
        raise IDTokenValidationError(
            "id_token at_hash claim does not match access_token hash", response
        )
