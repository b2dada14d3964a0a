"""Data models shared by the fetcher, reconciler and store."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class FetchStatus(str, Enum):
    """Lifecycle of the most recent fetch for a key."""

    FETCHING = "fetching"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True, slots=True)
class Record:
    """A single historical entry for an account."""

    signature: str = ""
    slot: int = -1
    cursor: str | None = None
    err: str | None = None
    memo: str | None = None


@dataclass(frozen=True, slots=True)
class History:
    """Accumulated records for one key plus the pagination boundary flag."""

    fetched: tuple[Record, ...] = ()
    found_oldest: bool = False

    @property
    def oldest_cursor(self) -> str | None:
        if not self.fetched:
            return None
        return self.fetched[-1].cursor


@dataclass(frozen=True, slots=True)
class HistoryUpdate:
    """Payload applied to a cached history once a fetch completes.

    ``history`` is ``None`` for failed or status-only updates. ``before`` is
    the cursor the completed fetch was issued with and drives the
    continuity check in :func:`historycache.history.reconcile.reconcile`.
    """

    history: History | None = None
    before: str | None = None


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached history for a key together with its fetch status."""

    scope: str
    key: str
    status: FetchStatus
    data: History | None = None
    sequence: int = 0
    applied_sequence: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status.value
        if self.data is not None:
            payload["data"]["fetched"] = [asdict(record) for record in self.data.fetched]
        return payload


__all__ = ["FetchStatus", "Record", "History", "HistoryUpdate", "CacheEntry"]
