"""Shared helpers for CLI tests."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from tests.utils import make_items


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def write_config(tmp_path: Path, body: str) -> Path:
    config_file = tmp_path / "config.toml"
    config_file.write_text(body, encoding="utf-8")
    return config_file


def write_fixture(tmp_path: Path, owner: str, count: int) -> Path:
    """Write a JSON fixture with ``count`` newest-first records for ``owner``."""

    fixture = tmp_path / "fixture.json"
    payload = {
        owner: [{"tags": dict(item.tags), "cursor": item.cursor} for item in make_items(count)],
    }
    fixture.write_text(json.dumps(payload), encoding="utf-8")
    return fixture
