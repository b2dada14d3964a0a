"""Tests for the in-memory listing provider."""

from __future__ import annotations

import json
from pathlib import Path

from historycache.providers import InMemoryListingProvider

from tests.utils import make_items


def test_pages_by_native_cursor() -> None:
    provider = InMemoryListingProvider({"A": make_items(6)})

    assert [item.cursor for item in provider.retrieve_page("A", 4, None, "")] == ["sig0", "sig1", "sig2", "sig3"]
    assert [item.cursor for item in provider.retrieve_page("A", 4, "sig3", "")] == ["sig4", "sig5"]


def test_unknown_cursor_or_owner_yields_empty_page() -> None:
    provider = InMemoryListingProvider({"A": make_items(3)})

    assert provider.retrieve_page("A", 4, "missing", "") == []
    assert provider.retrieve_page("B", 4, None, "") == []


def test_positional_paging_strips_cursors() -> None:
    provider = InMemoryListingProvider({"A": make_items(5)}, native_cursors=False)

    page = provider.retrieve_page("A", 2, "2", "")

    assert [item.tags["signature"] for item in page] == ["sig2", "sig3"]
    assert all(item.cursor is None for item in page)


def test_from_json(tmp_path: Path) -> None:
    fixture = tmp_path / "fixture.json"
    fixture.write_text(
        json.dumps({"A": [{"tags": {"signature": "s1", "slot": 7}, "cursor": "s1"}, {"tags": {}}]}),
        encoding="utf-8",
    )

    provider = InMemoryListingProvider.from_json(fixture)
    page = provider.retrieve_page("A", 5, None, "")

    assert page[0].tags == {"signature": "s1", "slot": "7"}
    assert provider.native_cursors is False
    assert [item.cursor for item in page] == [None, None]


def test_from_json_keeps_native_cursors_when_complete(tmp_path: Path) -> None:
    fixture = tmp_path / "fixture.json"
    fixture.write_text(
        json.dumps({"A": [{"tags": {"signature": "s1"}, "cursor": "s1"}, {"tags": {"signature": "s2"}, "cursor": 2}]}),
        encoding="utf-8",
    )

    provider = InMemoryListingProvider.from_json(fixture)

    assert provider.native_cursors is True
    assert [item.cursor for item in provider.retrieve_page("A", 5, "s1", "")] == ["2"]
