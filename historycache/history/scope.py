"""Tracks the active backend scope and notifies listeners when it changes."""

from __future__ import annotations

from threading import Lock
from typing import Callable

from loguru import logger

from historycache.config.scope import Cluster, ScopeConfig

ScopeListener = Callable[[str, Cluster], None]


class ScopeProvider:
    """Holds the current endpoint URL and its cluster classification."""

    def __init__(self, url: str, cluster: Cluster = Cluster.MAINNET_BETA) -> None:
        self._lock = Lock()
        self._url = url
        self._cluster = cluster
        self._listeners: list[ScopeListener] = []

    @classmethod
    def from_config(cls, config: ScopeConfig) -> "ScopeProvider":
        return cls(config.url, config.cluster)

    @property
    def url(self) -> str:
        with self._lock:
            return self._url

    @property
    def cluster(self) -> Cluster:
        with self._lock:
            return self._cluster

    def subscribe(self, listener: ScopeListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ScopeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def switch(self, url: str, cluster: Cluster | None = None) -> None:
        """Change the active scope and notify every listener synchronously."""
        with self._lock:
            self._url = url
            if cluster is not None:
                self._cluster = cluster
            resolved = self._cluster
            listeners = list(self._listeners)

        logger.info("Scope switched to {} ({})", url, resolved.value)
        for listener in listeners:
            listener(url, resolved)


__all__ = ["ScopeListener", "ScopeProvider"]
