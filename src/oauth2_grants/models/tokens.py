"""Token models for OAuth 2.0 access token responses.

Contains the normalized token record every grant returns and the parsed
token endpoint response it is derived from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field


class Tokens(BaseModel):
    """Tokens received from a successful access token response (RFC 6749 Section 5.1).

    ``scope`` is None when the server omitted it, which means the granted
    scopes equal the requested ones. ``refresh_token`` is None when the
    server did not issue one; after a refresh the caller keeps using the
    previous refresh token in that case.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str  # Usually "Bearer", compare case-insensitively
    expires_in: int | None = Field(default=None, ge=0)  # Seconds until expiry
    refresh_token: str | None = None
    scope: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return only the fields present in the response."""
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True)
class TokenResponse:
    """A validated token endpoint response.

    Keeps the raw JSON body next to the normalized tokens so extensions
    can read additional fields such as ``id_token``.
    """

    tokens: Tokens
    body: dict[str, Any]
    response: httpx.Response
