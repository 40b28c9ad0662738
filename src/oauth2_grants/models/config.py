"""Client configuration models.

Configuration is supplied once when a client is constructed and is
read-only afterwards. Grant calls may override defaults per call but
never write them back.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from oauth2_grants.models.oidc import JWTVerifier

StateValidator = Callable[[str | None], bool | Awaitable[bool]]


@dataclass(frozen=True)
class RequestOptions:
    """Extra headers, URL query parameters and form body fields.

    Used both as client-wide defaults and as per-call overrides. Per-call
    values win over defaults, and defaults win over the values a grant
    adds itself.
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    url_params: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, str] = field(default_factory=dict)


class ClientDefaults(BaseModel):
    """Defaults applied to every grant call unless overridden."""

    model_config = ConfigDict(frozen=True)

    scope: str | list[str] | None = None
    request_options: RequestOptions | None = None
    state_validator: StateValidator | None = None


class ClientConfig(BaseModel):
    """OAuth 2.0 client configuration (RFC 6749 Section 2)."""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    client_secret: str | None = None  # None for public clients
    authorization_endpoint_uri: str
    token_uri: str
    redirect_uri: str | None = None
    resource_endpoint_host: str | None = None
    defaults: ClientDefaults = Field(default_factory=ClientDefaults)

    @field_validator("authorization_endpoint_uri", "token_uri", "redirect_uri")
    @classmethod
    def validate_absolute_uri(cls, v: str | None) -> str | None:
        """Endpoint and redirect URIs must be absolute."""
        if v is None:
            return v
        parsed = urlsplit(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"URI must be absolute: {v}")
        return v

    @property
    def is_confidential(self) -> bool:
        """Confidential clients authenticate with a client secret."""
        return self.client_secret is not None


class OIDCClientConfig(ClientConfig):
    """OpenID Connect Relying Party configuration.

    ``verify_jwt`` is responsible for verifying the JWT signature; the
    client only adds the OpenID Connect claim checks on top.
    """

    redirect_uri: str
    user_info_endpoint: str | None = None
    verify_jwt: JWTVerifier
