"""Authorization flow models.

Contains the authorization URI results handed to the caller and the
validated authorization response parsed from the redirect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class AuthorizationUriWithVerifier:
    """Authorization URI built with PKCE.

    The caller must persist ``code_verifier`` across the redirect and pass
    it to the token exchange.
    """

    uri: str
    code_verifier: str
    with_verifier: Literal[True] = True


@dataclass(frozen=True)
class AuthorizationUriWithoutVerifier:
    """Authorization URI built without PKCE."""

    uri: str
    with_verifier: Literal[False] = False


AuthorizationUri = AuthorizationUriWithVerifier | AuthorizationUriWithoutVerifier


@dataclass(frozen=True)
class AuthorizationCodeResponse:
    """Successful authorization response (RFC 6749 Section 4.1.2)."""

    code: str
    state: str | None = None
