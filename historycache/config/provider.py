"""Configuration for the HTTP listing provider."""

from __future__ import annotations

from pydantic import Field

from .base import BaseConfig
from .utils import resolve_env_reference


class ProviderConfig(BaseConfig):
    """Connection settings for the paged listing backend."""

    base_url: str = Field(..., description="Listing API base URL", min_length=1)
    timeout: float = Field(30.0, description="Request timeout in seconds", gt=0)
    api_key: str | None = Field(None, description="Bearer token, can use 'env:VAR_NAME' format")
    user_agent: str = Field("historycache/0.1", description="User-Agent header sent with requests")

    @property
    def api_key_secret(self) -> str | None:
        """Return the resolved API key; an unset ``env:VAR`` reference yields ``None``."""

        return resolve_env_reference(self.api_key, required=False)


__all__ = ["ProviderConfig"]
