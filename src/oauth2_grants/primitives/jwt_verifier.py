"""JWT signature verification backed by PyJWT.

Provides a ready-made ``JWTVerifier`` for OIDC clients. Any other callable
with the same signature can be injected instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import jwt

from oauth2_grants.models.oidc import JWTVerifyResult

logger = logging.getLogger(__name__)


class PyJWTVerifier:
    """Verifies compact JWTs against a static key or a JWKS endpoint.

    Verifies the signature and the ``exp``/``nbf`` claims. Audience and
    issuer checks are left to the OIDC claim validation.
    """

    def __init__(
        self,
        key: Any = None,
        jwks_uri: str | None = None,
        algorithms: Sequence[str] = ("RS256",),
        leeway: float = 0,
    ):
        """Initialize the verifier.

        Args:
            key: Verification key (PEM string, bytes or key object)
            jwks_uri: JWKS endpoint to look up keys by ``kid``
            algorithms: Accepted signing algorithms
            leeway: Clock skew tolerance in seconds for exp/nbf
        """
        if (key is None) == (jwks_uri is None):
            raise ValueError("exactly one of key or jwks_uri must be given")
        self._key = key
        self._jwks_client = jwt.PyJWKClient(jwks_uri) if jwks_uri else None
        self._algorithms = list(algorithms)
        self._leeway = leeway
        self._decoder = jwt.PyJWT()

    async def __call__(self, token: str) -> JWTVerifyResult:
        """Verify a compact JWT.

        Raises:
            jwt.PyJWTError: If the token or its signature is invalid
        """
        key = self._key
        if self._jwks_client is not None:
            # PyJWKClient fetches keys with blocking I/O
            signing_key = await asyncio.to_thread(
                self._jwks_client.get_signing_key_from_jwt, token
            )
            key = signing_key.key

        decoded = self._decoder.decode_complete(
            token,
            key=key,
            algorithms=self._algorithms,
            options={"verify_aud": False, "verify_iss": False},
            leeway=self._leeway,
        )
        logger.debug(f"Verified JWT signed with {decoded['header'].get('alg')}")
        return JWTVerifyResult(
            payload=decoded["payload"], protected_header=decoded["header"]
        )
