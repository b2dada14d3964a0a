"""Listing providers backing the history fetcher."""

from historycache.providers.http import HttpListingProvider
from historycache.providers.memory import InMemoryListingProvider

__all__ = ["HttpListingProvider", "InMemoryListingProvider"]
