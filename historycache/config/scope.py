"""Configuration for the active backend scope."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .base import BaseConfig


class Cluster(str, Enum):
    """Classification of the backend endpoint."""

    MAINNET_BETA = "mainnet-beta"
    TESTNET = "testnet"
    DEVNET = "devnet"
    CUSTOM = "custom"


class ScopeConfig(BaseConfig):
    """Initial scope the cache is bound to."""

    url: str = Field(..., description="Endpoint URL identifying the cache scope", min_length=1)
    cluster: Cluster = Field(Cluster.MAINNET_BETA, description="Cluster classification of the endpoint")


__all__ = ["Cluster", "ScopeConfig"]
