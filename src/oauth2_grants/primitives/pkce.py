"""PKCE (Proof Key for Code Exchange) parameter generation.

Implements RFC 7636 code verifier and S256 code challenge generation to
prevent authorization code interception attacks.
"""

from __future__ import annotations

import base64
import hashlib
import re
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

RandomSource = Callable[[int], bytes]

MIN_VERIFIER_BYTES = 32
MAX_VERIFIER_BYTES = 96

# RFC 7636 Section 4.1: 43-128 characters from the unreserved set
CODE_VERIFIER_PATTERN = re.compile(r"[A-Za-z0-9\-._~]{43,128}")


def base64url_encode(data: bytes) -> str:
    """Base64url-encode without padding (RFC 7515 Appendix C)."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_code_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge from a code verifier.

    RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))
    """
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64url_encode(digest)


@dataclass(frozen=True)
class PKCEPair:
    """A code verifier and the S256 challenge derived from it.

    The challenge goes on the authorization URI; the verifier stays with
    the caller until the code exchange.
    """

    code_verifier: str
    code_challenge: str
    code_challenge_method: Literal["S256"] = "S256"

    @classmethod
    def from_verifier(cls, code_verifier: str) -> PKCEPair:
        """Build the pair for an existing verifier.

        Raises:
            ValueError: If the verifier is not a valid RFC 7636 verifier
        """
        if not CODE_VERIFIER_PATTERN.fullmatch(code_verifier):
            raise ValueError(
                "code_verifier must be 43-128 characters of [A-Za-z0-9-._~]"
            )
        return cls(
            code_verifier=code_verifier,
            code_challenge=generate_code_challenge(code_verifier),
        )


class PKCEGenerator:
    """Generates PKCE pairs for authorization code requests.

    The code verifier is the base64url encoding of random bytes from a
    cryptographic source. 32 bytes yield a 43-character verifier, the
    minimum length RFC 7636 allows.
    """

    def __init__(
        self,
        random_source: RandomSource | None = None,
        verifier_bytes: int = MIN_VERIFIER_BYTES,
    ):
        """Initialize the generator.

        Args:
            random_source: Returns N cryptographically random bytes.
                Defaults to secrets.token_bytes; override only in tests.
            verifier_bytes: Number of random bytes in the verifier (32-96)
        """
        if not (MIN_VERIFIER_BYTES <= verifier_bytes <= MAX_VERIFIER_BYTES):
            raise ValueError(
                f"verifier_bytes must be between {MIN_VERIFIER_BYTES} "
                f"and {MAX_VERIFIER_BYTES}"
            )
        self._random_source = random_source or secrets.token_bytes
        self._verifier_bytes = verifier_bytes

    def generate(self) -> PKCEPair:
        """Generate a fresh verifier and its S256 challenge."""
        random_bytes = self._random_source(self._verifier_bytes)
        return PKCEPair.from_verifier(base64url_encode(random_bytes))
