"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field

from historycache.config.base import BaseConfig
from historycache.config.history import HistoryConfig
from historycache.config.provider import ProviderConfig
from historycache.config.scope import ScopeConfig
from historycache.config.web import WebConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the entire application."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    scope: ScopeConfig | None = Field(None, description="Initial cache scope")
    history: HistoryConfig | None = Field(None, description="History pagination configuration")
    provider: ProviderConfig | None = Field(None, description="HTTP listing provider configuration")
    web: WebConfig | None = Field(None, description="Web API configuration")


__all__ = ["AppConfig"]
