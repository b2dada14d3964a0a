"""Paginated history cache: fetch, reconcile and store account histories."""

from historycache.history.fetcher import ListingProvider, PageFetcher, PageResult, ProviderItem
from historycache.history.models import CacheEntry, FetchStatus, History, HistoryUpdate, Record
from historycache.history.orchestrator import DEFAULT_PAGE_SIZE, FetchOrchestrator
from historycache.history.reconcile import combine_fetched, reconcile
from historycache.history.scope import ScopeProvider
from historycache.history.service import HistoryService
from historycache.history.store import FetchTicket, HistoryStore

__all__ = [
    "CacheEntry",
    "DEFAULT_PAGE_SIZE",
    "FetchOrchestrator",
    "FetchStatus",
    "FetchTicket",
    "History",
    "HistoryService",
    "HistoryStore",
    "HistoryUpdate",
    "ListingProvider",
    "PageFetcher",
    "PageResult",
    "ProviderItem",
    "Record",
    "ScopeProvider",
    "combine_fetched",
    "reconcile",
]
