"""Configuration models for history pagination."""

from __future__ import annotations

from pydantic import Field

from .base import BaseConfig


class TagMapping(BaseConfig):
    """Names of the provider tags mapped onto record fields."""

    signature: str = Field("signature", description="Tag holding the record signature", min_length=1)
    slot: str = Field("slot", description="Tag holding the slot ordering hint", min_length=1)
    err: str = Field("err", description="Tag holding an error annotation", min_length=1)
    memo: str = Field("memo", description="Tag holding a memo annotation", min_length=1)


class HistoryConfig(BaseConfig):
    """Settings for fetching and caching account histories."""

    page_size: int = Field(5, description="Number of records requested per page", ge=1)
    dataset_id: str = Field("", description="Dataset/index identifier passed to the listing provider")
    max_workers: int = Field(4, description="Worker threads used for in-flight fetches", ge=1)
    strict_ordering: bool = Field(
        False,
        description="Drop completions older than the last applied fetch for the same key",
    )
    tags: TagMapping = Field(default_factory=TagMapping, description="Provider tag names")


__all__ = ["TagMapping", "HistoryConfig"]
