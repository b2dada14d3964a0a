"""Decide which page to fetch next and drive fetch -> reconcile -> store."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock
from time import perf_counter
from typing import Callable

from loguru import logger

from historycache.config.scope import Cluster
from historycache.exceptions import FetchError

from .fetcher import PageFetcher
from .models import CacheEntry, FetchStatus, History, HistoryUpdate
from .scope import ScopeProvider
from .store import FetchTicket, HistoryStore

ErrorReporter = Callable[[FetchError, str], None]

DEFAULT_PAGE_SIZE = 5


class FetchOrchestrator:
    """Issue page fetches for keys and apply their completions to the store.

    Triggers return immediately: the ``FETCHING`` status is written before the
    fetch is handed to a worker thread, and the completion is applied to the
    store whenever the provider answers. Concurrent triggers for the same key
    are not deduplicated; completions apply in completion order.
    """

    def __init__(
        self,
        store: HistoryStore,
        fetcher: PageFetcher,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_workers: int = 4,
        scope_provider: ScopeProvider | None = None,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.store = store
        self.fetcher = fetcher
        self.page_size = page_size
        self.scope_provider = scope_provider
        self.error_reporter = error_reporter
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="history-fetch")
        self._pending: set[Future[CacheEntry | None]] = set()
        self._pending_lock = Lock()

    def __enter__(self) -> "FetchOrchestrator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def trigger(self, key: str, refresh: bool = False) -> Future[CacheEntry | None] | None:
        """Fetch the next page for ``key`` (or the first page on ``refresh``).

        Returns the future of the pending completion, or ``None`` when the
        history is already complete and nothing was fetched.
        """
        scope = self.store.scope
        entry = self.store.get(scope, key)
        history = entry.data if entry is not None else None

        before: str | None = None
        if not refresh and history is not None and history.fetched:
            if history.found_oldest:
                logger.debug("History for {} is complete; skipping fetch", key)
                return None
            before = history.oldest_cursor

        ticket = self.store.begin(scope, key, before)
        logger.info("Fetching history page for {} (before={}, limit={})", key, before, self.page_size)
        future = self._executor.submit(self._complete, ticket, self.page_size)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def wait_all(self, timeout: float | None = None) -> None:
        """Block until every fetch issued so far has been applied."""
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait_for_pending: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_pending)

    def _complete(self, ticket: FetchTicket, limit: int) -> CacheEntry | None:
        bound_logger = logger.bind(key=ticket.key, scope=ticket.scope, sequence=ticket.sequence)
        timer_start = perf_counter()
        result = self.fetcher.fetch(ticket.key, before=ticket.before, limit=limit)
        duration = perf_counter() - timer_start

        if result.ok:
            status = FetchStatus.FETCHED
            history: History | None = History(
                fetched=result.records,
                found_oldest=len(result.records) < limit,
            )
        else:
            status = FetchStatus.FETCH_FAILED
            history = None
            assert result.error is not None
            self._report(result.error, ticket.scope)

        entry = self.store.update(
            ticket.scope,
            ticket.key,
            status,
            HistoryUpdate(history=history, before=ticket.before),
            ticket=ticket,
        )
        if entry is None:
            bound_logger.info("Fetch completion discarded", duration_seconds=duration)
        else:
            bound_logger.info(
                "Fetch completed: {} ({} records cached, oldest found: {})",
                status.value,
                len(entry.data.fetched) if entry.data else 0,
                entry.data.found_oldest if entry.data else False,
            )
        return entry

    def _report(self, error: FetchError, scope: str) -> None:
        if self.error_reporter is None:
            return
        if self.scope_provider is not None and self.scope_provider.cluster is Cluster.CUSTOM:
            return
        try:
            self.error_reporter(error, scope)
        except Exception as exc:  # pragma: no cover - reporter failures must not mask the fetch outcome
            logger.warning("Error reporter failed: {}", exc)

    def _forget(self, future: Future[CacheEntry | None]) -> None:
        with self._pending_lock:
            self._pending.discard(future)


__all__ = ["DEFAULT_PAGE_SIZE", "ErrorReporter", "FetchOrchestrator"]
