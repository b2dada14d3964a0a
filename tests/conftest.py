"""Pytest helpers for path configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from historycache.history import HistoryStore  # noqa: E402
from historycache.providers import InMemoryListingProvider  # noqa: E402

from tests.utils import make_items  # noqa: E402

SCOPE = "https://api.devnet.example.com"
ACCOUNT = "Acct1111111111111111111111111111111111111111"


@pytest.fixture
def store() -> HistoryStore:
    """A store with an active lifecycle bound to the test scope."""
    history_store = HistoryStore()
    history_store.init(SCOPE)
    return history_store


@pytest.fixture
def memory_provider() -> InMemoryListingProvider:
    """Twelve newest-first records for ``ACCOUNT`` with native cursors."""
    return InMemoryListingProvider({ACCOUNT: make_items(12)})
