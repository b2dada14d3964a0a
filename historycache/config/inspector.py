"""Validate configuration files and describe the available fields."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from types import UnionType
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


# Ordered: PermissionError and FileNotFoundError are both OSError subclasses
# and ValidationError is a ValueError subclass.
_ERROR_KINDS: tuple[tuple[type[BaseException], str, int], ...] = (
    (FileNotFoundError, "missing_file", 2),
    (PermissionError, "permission_error", 2),
    (ValidationError, "validation_error", 3),
    (ValueError, "invalid_format", 1),
)


def check_config(
    path: Path, *, config_cls: type[AppConfig] = AppConfig
) -> tuple[dict[str, Any], int, AppConfig | None]:
    """Validate the configuration file and collect warnings.

    Returns ``(result_dict, exit_code, config_or_None)``. Exit codes: 0 for a
    valid file, 1 for unparsable TOML, 2 for a missing or unreadable file and
    3 for schema violations.
    """

    try:
        config = load_config(config_cls, path)
    except Exception as exc:
        for kind, label, code in _ERROR_KINDS:
            if isinstance(exc, kind):
                return _error_result(path, label, exc), code, None
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    return (
        {"status": "ok", "config_path": str(path), "warnings": _collect_warnings(config)},
        0,
        config,
    )


def explain_config(*, config_cls: type[BaseModel] = AppConfig) -> list[dict[str, Any]]:
    """Flatten the configuration schema into documentation rows."""

    rows: list[dict[str, Any]] = []
    seen: set[type[BaseModel]] = set()

    def _walk(model_cls: type[BaseModel], prefix: str) -> None:
        if model_cls in seen:
            return
        seen.add(model_cls)
        for name, field in model_cls.model_fields.items():
            dotted = f"{prefix}{name}"
            rows.append(
                {
                    "name": dotted,
                    "type": _describe_type(field.annotation),
                    "required": field.is_required(),
                    "default": _default_of(field),
                    "description": field.description or "",
                }
            )
            for nested in _nested_models(field.annotation):
                _walk(nested, f"{dotted}.")

    _walk(config_cls, "")
    return rows


def _error_result(path: Path, label: str, exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": label, "message": str(exc)}
    if isinstance(exc, ValidationError):
        error["message"] = "Configuration validation failed"
        error["details"] = [
            {
                "loc": ".".join(str(part) for part in item["loc"]),
                "message": item["msg"],
                "type": item["type"],
            }
            for item in exc.errors()
        ]
    return {"status": "error", "config_path": str(path), "error": error}


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []

    if config.scope is None:
        warnings.append("No scope block configured; the cache starts without an active endpoint")
    if config.provider is None:
        warnings.append("No provider block configured; only fixture-backed fetches are available")
    if config.web is not None and config.web.enabled and not (config.web.auth and config.web.auth.enabled):
        warnings.append("Web API is enabled without authentication")

    return warnings


def _describe_type(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin is None:
        return annotation.__name__ if isinstance(annotation, type) else repr(annotation).replace("typing.", "")

    args = get_args(annotation)
    if origin in {Union, UnionType}:
        present = [arg for arg in args if arg is not type(None)]
        if len(present) == 1 and len(args) == 2:
            return f"Optional[{_describe_type(present[0])}]"
        return "Union[" + ", ".join(_describe_type(arg) for arg in args) + "]"

    name = getattr(origin, "__name__", repr(origin))
    if not args:
        return name
    return f"{name}[" + ", ".join(_describe_type(arg) for arg in args) + "]"


def _default_of(field: FieldInfo) -> Any:
    if field.is_required():
        return None
    value = field.default_factory() if field.default_factory is not None else field.default
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    return value


def _nested_models(annotation: Any) -> list[type[BaseModel]]:
    candidates = get_args(annotation) if get_origin(annotation) is not None else (annotation,)
    return [arg for arg in candidates if isinstance(arg, type) and issubclass(arg, BaseModel)]


__all__ = ["check_config", "explain_config", "ConfigInspectionError"]
