"""Exception hierarchy shared across the history cache."""

from __future__ import annotations


class HistoryCacheError(RuntimeError):
    """Base class for all errors raised by historycache."""


class FetchError(HistoryCacheError):
    """Raised (and captured) when the listing provider fails to return a page."""

    def __init__(self, key: str, before: str | None, cause: BaseException | None = None) -> None:
        self.key = key
        self.before = before
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to fetch history page for {key} (before={before}){detail}")


class StoreNotInitialisedError(HistoryCacheError):
    """Raised when the history store is used outside of an active lifecycle."""


class ScopeMismatchError(HistoryCacheError):
    """Raised when a caller addresses a scope that is not the active one."""

    def __init__(self, requested: str, active: str) -> None:
        self.requested = requested
        self.active = active
        super().__init__(f"Scope '{requested}' is not active (active scope: '{active}')")


__all__ = [
    "HistoryCacheError",
    "FetchError",
    "StoreNotInitialisedError",
    "ScopeMismatchError",
]
