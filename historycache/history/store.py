"""Scope-bound cache of per-key histories and their fetch status."""

from __future__ import annotations

from dataclasses import dataclass, replace
from threading import Lock

from loguru import logger

from historycache.exceptions import ScopeMismatchError, StoreNotInitialisedError

from .models import CacheEntry, FetchStatus, HistoryUpdate
from .reconcile import reconcile


@dataclass(frozen=True, slots=True)
class FetchTicket:
    """Identifies one in-flight fetch so its completion can be validated."""

    scope: str
    key: str
    sequence: int
    epoch: int
    before: str | None = None


class HistoryStore:
    """Thread-safe history cache bound to a single active scope.

    The store holds entries for exactly one scope at a time. Switching scope
    through :meth:`clear` discards every entry and bumps an internal epoch,
    so completions of fetches started under the previous scope are ignored.
    """

    def __init__(self, *, strict_ordering: bool = False) -> None:
        self.strict_ordering = strict_ordering
        self._lock = Lock()
        self._scope: str | None = None
        self._epoch = 0
        self._entries: dict[str, CacheEntry] = {}

    @property
    def scope(self) -> str:
        with self._lock:
            return self._require_scope()

    @property
    def initialised(self) -> bool:
        with self._lock:
            return self._scope is not None

    def init(self, scope: str) -> None:
        """Start a lifecycle bound to ``scope``."""
        self.clear(scope)

    def clear(self, scope: str) -> None:
        """Drop every entry and make ``scope`` the active scope."""
        with self._lock:
            dropped = len(self._entries)
            self._entries = {}
            self._scope = scope
            self._epoch += 1
        logger.info("History cache reset for scope {} ({} entries dropped)", scope, dropped)

    def close(self) -> None:
        """End the lifecycle; later reads raise :class:`StoreNotInitialisedError`."""
        with self._lock:
            self._entries = {}
            self._scope = None
            self._epoch += 1

    def get(self, scope: str, key: str) -> CacheEntry | None:
        with self._lock:
            if self._require_scope() != scope:
                return None
            return self._entries.get(key)

    def entries(self, scope: str) -> dict[str, CacheEntry]:
        with self._lock:
            if self._require_scope() != scope:
                return {}
            return dict(self._entries)

    def begin(self, scope: str, key: str, before: str | None = None) -> FetchTicket:
        """Mark ``key`` as fetching and issue a ticket for the pending fetch."""
        with self._lock:
            active = self._require_scope()
            if active != scope:
                raise ScopeMismatchError(scope, active)

            current = self._entries.get(key)
            if current is None:
                current = CacheEntry(scope=scope, key=key, status=FetchStatus.FETCHING)
            sequence = current.sequence + 1
            self._entries[key] = replace(current, status=FetchStatus.FETCHING, sequence=sequence)
            return FetchTicket(scope=scope, key=key, sequence=sequence, epoch=self._epoch, before=before)

    def update(
        self,
        scope: str,
        key: str,
        status: FetchStatus,
        data: HistoryUpdate | None = None,
        ticket: FetchTicket | None = None,
    ) -> CacheEntry | None:
        """Reconcile ``data`` into the entry for ``key`` and set its status.

        Returns the stored entry, or ``None`` when the update was discarded
        because it targets an inactive scope or (with strict ordering) an
        already superseded fetch.
        """
        with self._lock:
            if ticket is not None and ticket.epoch != self._epoch:
                logger.debug("Discarding completion for {} started under a previous lifecycle", key)
                return None
            if self._require_scope() != scope:
                logger.debug("Discarding update for {} from inactive scope {}", key, scope)
                return None

            current = self._entries.get(key)
            if (
                self.strict_ordering
                and ticket is not None
                and current is not None
                and ticket.sequence < current.applied_sequence
            ):
                logger.warning(
                    "Dropping stale completion for {} (sequence {} < applied {})",
                    key,
                    ticket.sequence,
                    current.applied_sequence,
                )
                return None

            if current is None:
                current = CacheEntry(scope=scope, key=key, status=status)
            entry = replace(
                current,
                status=status,
                data=reconcile(current.data, data),
                sequence=max(current.sequence, ticket.sequence if ticket else 0),
                applied_sequence=ticket.sequence if ticket else current.applied_sequence,
            )
            self._entries[key] = entry
            return entry

    def _require_scope(self) -> str:
        if self._scope is None:
            raise StoreNotInitialisedError("History store used before init() or after close()")
        return self._scope


__all__ = ["FetchTicket", "HistoryStore"]
