"""Environment variable references inside configuration values."""

from __future__ import annotations

import os

ENV_PREFIX = "env:"


def is_env_reference(value: str | None) -> bool:
    return value is not None and value.startswith(ENV_PREFIX)


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Return ``value`` with an ``env:VAR`` reference replaced by its variable.

    Secrets such as provider API keys and web tokens are kept out of the TOML
    file this way. An unset or empty variable raises :class:`OSError` when
    ``required`` and resolves to ``None`` otherwise.
    """

    if not is_env_reference(value):
        return value

    var_name = value[len(ENV_PREFIX):]
    resolved = os.environ.get(var_name, "").strip()
    if resolved:
        return resolved
    if required:
        raise OSError(f"Environment variable '{var_name}' referenced by configuration is not set")
    return None


__all__ = ["ENV_PREFIX", "is_env_reference", "resolve_env_reference"]
