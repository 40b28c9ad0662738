"""OpenID Connect models.

ID token claims (OIDC Core Section 2), the tokens returned by the OIDC
Authorization Code flow and the result of JWT verification.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from oauth2_grants.models.tokens import Tokens

Display = Literal["page", "popup", "touch", "wap"]
Prompt = Literal["none", "login", "consent", "select_account"]


@dataclass(frozen=True)
class JWTVerifyResult:
    """Verified JWT payload and protected header."""

    payload: dict[str, Any]
    protected_header: dict[str, Any]


# Verifies the signature of a compact JWT and returns its payload and header.
JWTVerifier = Callable[[str], Awaitable[JWTVerifyResult]]


class IDToken(BaseModel):
    """Validated ID token claim set (OIDC Core Section 2).

    Claims beyond the ones listed are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    iss: str
    sub: str
    aud: str | list[str]
    exp: int | float
    iat: int | float
    auth_time: int | float | None = None
    nonce: str | None = None
    acr: str | None = None
    amr: list[str] | None = None
    azp: str | None = None
    at_hash: str | None = None


class OIDCTokens(Tokens):
    """Tokens from the OIDC Authorization Code flow, including the ID token."""

    id_token_string: str
    id_token: IDToken


@dataclass(frozen=True)
class OIDCAuthorizationParams:
    """Authentication request parameters (OIDC Core Section 3.1.2.1)."""

    nonce: str | None = None
    display: Display | None = None
    prompt: Prompt | list[Prompt] | None = None
    max_age: int | None = None
    ui_locales: str | list[str] | None = None
    id_token_hint: str | None = None
    login_hint: str | None = None
    acr_values: str | list[str] | None = None

    def to_query_params(self) -> dict[str, str]:
        """Convert to authorization URL query parameters.

        Multi-valued parameters are space-separated.
        """
        params: dict[str, str] = {}

        if self.nonce is not None:
            params["nonce"] = self.nonce
        if self.display is not None:
            params["display"] = self.display
        if self.prompt is not None:
            params["prompt"] = _join(self.prompt)
        if self.max_age is not None:
            params["max_age"] = str(self.max_age)
        if self.ui_locales is not None:
            params["ui_locales"] = _join(self.ui_locales)
        if self.id_token_hint is not None:
            params["id_token_hint"] = self.id_token_hint
        if self.login_hint is not None:
            params["login_hint"] = self.login_hint
        if self.acr_values is not None:
            params["acr_values"] = _join(self.acr_values)

        return params


def _join(value: str | list[str]) -> str:
    return " ".join(value) if isinstance(value, list) else value
