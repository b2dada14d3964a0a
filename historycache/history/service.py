"""Consumer-facing history API bound to a scope provider."""

from __future__ import annotations

from concurrent.futures import Future

from loguru import logger

from historycache.config.history import HistoryConfig
from historycache.config.scope import Cluster
from historycache.exceptions import StoreNotInitialisedError

from .fetcher import ListingProvider, PageFetcher
from .models import CacheEntry
from .orchestrator import ErrorReporter, FetchOrchestrator
from .scope import ScopeProvider
from .store import HistoryStore


class HistoryService:
    """Wires store, fetcher and orchestrator together for a scope provider.

    The service owns the store lifecycle: :meth:`start` binds it to the
    provider's current scope and every scope switch clears it before any
    fetch for the new scope can populate it.
    """

    def __init__(
        self,
        provider: ListingProvider,
        scope_provider: ScopeProvider,
        config: HistoryConfig | None = None,
        *,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        self.config = config or HistoryConfig()
        self.scope_provider = scope_provider
        self.store = HistoryStore(strict_ordering=self.config.strict_ordering)
        self.fetcher = PageFetcher(
            provider,
            dataset_id=self.config.dataset_id,
            tags=self.config.tags,
        )
        self.orchestrator = FetchOrchestrator(
            self.store,
            self.fetcher,
            page_size=self.config.page_size,
            max_workers=self.config.max_workers,
            scope_provider=scope_provider,
            error_reporter=error_reporter,
        )
        self._started = False
        self._closed = False

    def __enter__(self) -> "HistoryService":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def scope(self) -> str:
        return self.store.scope

    def start(self) -> None:
        if self._started:
            return
        if self._closed:
            raise StoreNotInitialisedError("A closed HistoryService cannot be restarted")
        self.store.init(self.scope_provider.url)
        self.scope_provider.subscribe(self._on_scope_change)
        self._started = True
        logger.info("History service started for scope {}", self.scope_provider.url)

    def close(self) -> None:
        if not self._started:
            return
        self.scope_provider.unsubscribe(self._on_scope_change)
        self.orchestrator.shutdown()
        self.store.close()
        self._started = False
        self._closed = True
        logger.info("History service closed")

    def list_entries(self) -> dict[str, CacheEntry]:
        self._ensure_started("list_entries")
        return self.store.entries(self.store.scope)

    def get_entry(self, key: str) -> CacheEntry | None:
        self._ensure_started("get_entry")
        return self.store.get(self.store.scope, key)

    def trigger_fetch(self, key: str, refresh: bool = False) -> Future[CacheEntry | None] | None:
        self._ensure_started("trigger_fetch")
        return self.orchestrator.trigger(key, refresh=refresh)

    def _on_scope_change(self, url: str, cluster: Cluster) -> None:
        self.store.clear(url)

    def _ensure_started(self, operation: str) -> None:
        if not self._started:
            raise StoreNotInitialisedError(f"{operation} must be called on a started HistoryService")


__all__ = ["HistoryService"]
