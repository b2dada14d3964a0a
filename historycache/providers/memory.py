"""In-memory listing provider for fixtures and offline runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from loguru import logger

from historycache.history.fetcher import ProviderItem


class InMemoryListingProvider:
    """Serve newest-first item lists per owner.

    With ``native_cursors`` the provider pages by each item's own cursor and
    an unknown ``before`` yields an empty page. Without native cursors items
    are returned cursor-less and ``before`` is read as the number of items
    already consumed, matching the position cursors assigned by
    :class:`historycache.history.fetcher.PageFetcher`.
    """

    def __init__(
        self,
        items: Mapping[str, Sequence[ProviderItem]] | None = None,
        *,
        native_cursors: bool = True,
    ) -> None:
        self.items: dict[str, list[ProviderItem]] = {
            owner: list(owner_items) for owner, owner_items in (items or {}).items()
        }
        self.native_cursors = native_cursors
        self.calls: list[tuple[str, int, str | None, str]] = []

    @classmethod
    def from_json(cls, path: Path, *, native_cursors: bool | None = None) -> "InMemoryListingProvider":
        """Load ``{"owner": [{"tags": {...}, "cursor": "..."}, ...]}`` from ``path``.

        Unless ``native_cursors`` is given, the fixture pages by its own cursors
        only when every item carries one; otherwise paging is positional.
        """

        data: dict[str, list[dict[str, Any]]] = json.loads(Path(path).read_text(encoding="utf-8"))
        items = {
            owner: [
                ProviderItem(
                    tags={str(k): str(v) for k, v in (raw.get("tags") or {}).items()},
                    cursor=str(raw["cursor"]) if raw.get("cursor") else None,
                )
                for raw in raw_items
            ]
            for owner, raw_items in data.items()
        }
        if native_cursors is None:
            native_cursors = all(item.cursor for owner_items in items.values() for item in owner_items)
        logger.debug(
            "Loaded fixture {} with {} owners (native cursors: {})", path, len(items), native_cursors
        )
        return cls(items, native_cursors=native_cursors)

    def retrieve_page(
        self,
        owner_key: str,
        limit: int,
        before: str | None,
        dataset_id: str,
    ) -> Sequence[ProviderItem]:
        self.calls.append((owner_key, limit, before, dataset_id))
        owner_items = self.items.get(owner_key, [])

        if not self.native_cursors:
            start = int(before) if before else 0
            return [ProviderItem(tags=item.tags) for item in owner_items[start:start + limit]]

        start = 0
        if before is not None:
            positions = [index for index, item in enumerate(owner_items) if item.cursor == before]
            if not positions:
                return []
            start = positions[0] + 1
        return owner_items[start:start + limit]


__all__ = ["InMemoryListingProvider"]
