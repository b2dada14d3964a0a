"""Base configuration model and TOML loader."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound="BaseConfig")


class BaseConfig(BaseModel):
    """Strict base model shared by every configuration section."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def load_config(config_cls: type[T], path: Path) -> T:
    """Load ``path`` as TOML and validate it against ``config_cls``.

    Raises :class:`FileNotFoundError` when the file is missing and
    :class:`ValueError` when it is not valid TOML. Schema violations surface
    as :class:`pydantic.ValidationError`.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as handle:
            payload = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

    return config_cls.model_validate(payload)


__all__ = ["BaseConfig", "load_config"]
