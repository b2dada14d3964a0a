"""Settings for the FastAPI history API."""

from __future__ import annotations

from pydantic import Field, model_validator

from .base import BaseConfig
from .utils import is_env_reference, resolve_env_reference


class WebAuthConfig(BaseConfig):
    """Shared-token protection for every history endpoint except ``/health``."""

    enabled: bool = Field(False, description="Require a token header on history endpoints")
    header_name: str = Field("X-Api-Token", description="Request header carrying the token", min_length=1)
    token: str | None = Field(None, description="Expected token, can use 'env:VAR_NAME' format")

    @model_validator(mode="after")
    def _require_token(self) -> "WebAuthConfig":
        if self.token is not None and not self.token.strip():
            self.token = None
        if self.enabled and self.token is None:
            raise ValueError("Authentication token must be provided when web auth is enabled.")
        return self

    @property
    def token_secret(self) -> str | None:
        """Resolved token; an enabled config with an unset variable fails loudly."""

        if self.token is None:
            return None
        if is_env_reference(self.token):
            return resolve_env_reference(self.token, required=self.enabled)
        return self.token.strip()


class WebConfig(BaseConfig):
    enabled: bool = Field(True, description="Serve the history API from 'historycache serve'")
    title: str = Field("History Cache API", description="Title reported in the OpenAPI schema")
    auth: WebAuthConfig | None = Field(None, description="Token authentication for the history API")


__all__ = ["WebAuthConfig", "WebConfig"]
