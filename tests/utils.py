"""Shared builders and fake providers for tests."""

from __future__ import annotations

from threading import Event
from typing import Sequence

from historycache.history import History, ProviderItem, Record


def make_items(count: int, *, prefix: str = "sig", top_slot: int = 1000) -> list[ProviderItem]:
    """Build ``count`` newest-first provider items with native cursors."""
    return [
        ProviderItem(
            tags={"signature": f"{prefix}{index}", "slot": str(top_slot - index)},
            cursor=f"{prefix}{index}",
        )
        for index in range(count)
    ]


def make_records(*cursors: str) -> tuple[Record, ...]:
    """Build records whose signature and cursor are both ``cursor``."""
    return tuple(Record(signature=cursor, slot=index, cursor=cursor) for index, cursor in enumerate(cursors))


def make_history(*cursors: str, found_oldest: bool = False) -> History:
    return History(fetched=make_records(*cursors), found_oldest=found_oldest)


class FailingProvider:
    """Provider whose every call raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or ConnectionError("listing backend unreachable")
        self.calls = 0

    def retrieve_page(
        self, owner_key: str, limit: int, before: str | None, dataset_id: str
    ) -> Sequence[ProviderItem]:
        self.calls += 1
        raise self.error


class GatedProvider:
    """Provider that blocks each call on a per-``before`` gate until released."""

    def __init__(self, pages: dict[str | None, list[ProviderItem]]) -> None:
        self.pages = pages
        self.gates: dict[str | None, Event] = {before: Event() for before in pages}
        self.started: dict[str | None, Event] = {before: Event() for before in pages}

    def release(self, before: str | None) -> None:
        self.gates[before].set()

    def retrieve_page(
        self, owner_key: str, limit: int, before: str | None, dataset_id: str
    ) -> Sequence[ProviderItem]:
        self.started[before].set()
        if not self.gates[before].wait(timeout=5):
            raise TimeoutError(f"gate for {before!r} never released")
        return self.pages[before][:limit]
