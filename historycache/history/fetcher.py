"""Fetch single history pages from a listing provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from loguru import logger

from historycache.config.history import TagMapping
from historycache.exceptions import FetchError

from .models import Record


@dataclass(frozen=True, slots=True)
class ProviderItem:
    """Raw item returned by a listing provider."""

    tags: Mapping[str, str]
    cursor: str | None = None


class ListingProvider(Protocol):
    def retrieve_page(
        self,
        owner_key: str,
        limit: int,
        before: str | None,
        dataset_id: str,
    ) -> Sequence[ProviderItem]:
        """Return up to ``limit`` items for ``owner_key`` older than ``before``."""


@dataclass(frozen=True, slots=True)
class PageResult:
    """Outcome of a single page fetch: either records or an error."""

    records: tuple[Record, ...] = ()
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, records: Sequence[Record]) -> "PageResult":
        return cls(records=tuple(records))

    @classmethod
    def failure(cls, error: FetchError) -> "PageResult":
        return cls(error=error)


class PageFetcher:
    """Load one page of records for a key and normalise provider items."""

    def __init__(
        self,
        provider: ListingProvider,
        *,
        dataset_id: str = "",
        tags: TagMapping | None = None,
    ) -> None:
        self.provider = provider
        self.dataset_id = dataset_id
        self.tags = tags or TagMapping()

    def fetch(self, key: str, before: str | None = None, limit: int = 5) -> PageResult:
        """Fetch the page after ``before`` (or the newest page) for ``key``.

        Provider errors are captured into the returned :class:`PageResult`;
        only invalid arguments raise.
        """
        if limit < 1:
            raise ValueError(f"Page limit must be at least 1, got {limit}")

        logger.debug("Requesting page for {} (before={}, limit={})", key, before, limit)
        try:
            items = self.provider.retrieve_page(key, limit, before, self.dataset_id)
            offset = _surrogate_offset(before)
            records = [
                self._to_record(item, offset + index + 1)
                for index, item in enumerate(list(items)[:limit])
            ]
        except Exception as exc:
            error = FetchError(key, before, exc)
            logger.warning("{}", error)
            return PageResult.failure(error)

        logger.debug("Fetched {} records for {}", len(records), key)
        return PageResult.success(records)

    def _to_record(self, item: ProviderItem, position: int) -> Record:
        tags = item.tags or {}
        cursor = item.cursor
        if not cursor:
            cursor = str(position)

        return Record(
            signature=tags.get(self.tags.signature) or "",
            slot=_parse_slot(tags.get(self.tags.slot)),
            cursor=cursor,
            err=tags.get(self.tags.err) or None,
            memo=tags.get(self.tags.memo) or None,
        )


def _parse_slot(value: str | None) -> int:
    if value is None or value == "":
        return -1
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-integer slot tag: {!r}", value)
        return -1


def _surrogate_offset(before: str | None) -> int:
    # Surrogate cursors are 1-based positions; a native cursor carries no offset.
    if before and before.isdigit():
        return int(before)
    return 0


__all__ = ["ProviderItem", "ListingProvider", "PageResult", "PageFetcher"]
