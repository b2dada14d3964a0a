"""HTTP client for the paged record listing API."""

from __future__ import annotations

from typing import Any, Sequence

import requests
from loguru import logger

from historycache.config.provider import ProviderConfig
from historycache.history.fetcher import ProviderItem


class HttpListingProvider:
    """Client for a JSON listing endpoint returning newest-first record pages.

    Pages are requested from ``{base_url}/accounts/{owner_key}/records``. The
    response is either ``{"records": [...]}`` or a bare list, each item being
    ``{"tags": {...}, "cursor": "..."}``. A single request is made per page;
    failures propagate to the caller.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        api_key: str | None = None,
        user_agent: str = "historycache/0.1",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "HttpListingProvider":
        return cls(
            config.base_url,
            timeout=config.timeout,
            api_key=config.api_key_secret,
            user_agent=config.user_agent,
        )

    def retrieve_page(
        self,
        owner_key: str,
        limit: int,
        before: str | None,
        dataset_id: str,
    ) -> Sequence[ProviderItem]:
        params: dict[str, str] = {"limit": str(limit)}
        if dataset_id:
            params["dataset"] = dataset_id
        if before:
            params["before"] = before

        url = f"{self.base_url}/accounts/{owner_key}/records"
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()

        raw_items = payload.get("records", []) if isinstance(payload, dict) else payload
        if not isinstance(raw_items, list):
            raise ValueError(f"Unexpected listing payload from {url}: {type(raw_items).__name__}")

        items = [self._parse_item(raw) for raw in raw_items]
        logger.debug("Listing {} returned {} items", url, len(items))
        return items

    def _parse_item(self, raw: Any) -> ProviderItem:
        if not isinstance(raw, dict):
            return ProviderItem(tags={})

        tags = raw.get("tags") or {}
        if not isinstance(tags, dict):
            tags = {}
        cursor = raw.get("cursor")
        return ProviderItem(
            tags={str(name): str(value) for name, value in tags.items() if value is not None},
            cursor=str(cursor) if cursor not in (None, "") else None,
        )


__all__ = ["HttpListingProvider"]
