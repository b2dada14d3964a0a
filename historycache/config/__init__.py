"""Configuration namespace for historycache."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .history import HistoryConfig, TagMapping
from .provider import ProviderConfig
from .scope import Cluster, ScopeConfig
from .utils import is_env_reference, resolve_env_reference
from .web import WebAuthConfig, WebConfig

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "HistoryConfig",
    "TagMapping",
    "ProviderConfig",
    "Cluster",
    "ScopeConfig",
    "WebAuthConfig",
    "WebConfig",
    "is_env_reference",
    "resolve_env_reference",
]
