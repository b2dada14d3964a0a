"""Command line interface for the history cache."""

from __future__ import annotations

import json
import sys
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
import uvicorn
from loguru import logger

from .config import AppConfig, HistoryConfig, load_config
from .config.inspector import check_config, explain_config
from .config.scope import Cluster
from .history import CacheEntry, FetchStatus, HistoryService, ListingProvider, ScopeProvider
from .providers import HttpListingProvider, InMemoryListingProvider
from .web import create_app

_log_sink_id: int | None = None


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            logger.info("Loading configuration from {}", self.config_path)
            self._config = load_config(AppConfig, self.config_path)
            _configure_logging(self._config.logging_level)
        return self._config


app = typer.Typer(help="Paginated account history cache")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _default_config_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / "config" / "example.toml"


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _configure_logging(level: str) -> None:
    """Route log output to stderr at ``level``, replacing the default sink."""

    global _log_sink_id
    with suppress(ValueError):
        logger.remove(_log_sink_id if _log_sink_id is not None else 0)
    _log_sink_id = logger.add(lambda message: sys.stderr.write(message), level=level.upper(), colorize=False)


def _build_provider(config: AppConfig, fixture: Path | None) -> ListingProvider | None:
    if fixture is not None:
        if not fixture.exists():
            logger.error("Fixture file not found: {}", fixture)
            return None
        return InMemoryListingProvider.from_json(fixture)
    if config.provider is None:
        logger.error("No [provider] section configured; pass --fixture to use a local file")
        return None
    return HttpListingProvider.from_config(config.provider)


def _build_scope(config: AppConfig, url: str | None, fixture: Path | None) -> ScopeProvider | None:
    cluster = config.scope.cluster if config.scope else Cluster.CUSTOM
    if url:
        return ScopeProvider(url, cluster)
    if config.scope is not None:
        return ScopeProvider.from_config(config.scope)
    if fixture is not None:
        return ScopeProvider(fixture.resolve().as_uri(), Cluster.CUSTOM)
    logger.error("No scope configured; pass --url or add a [scope] section")
    return None


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        _default_config_path(),
        help="Path to the TOML configuration file",
    ),
) -> None:
    """Initialise CLI state."""

    ctx.obj = CLIState(config_path=config.resolve())

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'status --dry-run' or 'fetch <account>'.")
        _exit(0)


@app.command(help="Show configuration status")
def status(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        help="Load configuration and report subsystem availability",
    ),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()

    if not dry_run:
        logger.info("Status command currently supports --dry-run only; showing status.")
    _report_system_status(config)


@app.command(help="Fetch account history pages and print the cached entry")
def fetch(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Account identifier to fetch history for"),
    pages: int = typer.Option(1, "--pages", min=1, help="Maximum number of pages to fetch"),
    refresh: bool = typer.Option(False, "--refresh", help="Restart from the newest page"),
    fixture: Path | None = typer.Option(
        None,
        "--fixture",
        help="Serve pages from a local JSON fixture instead of the HTTP provider",
    ),
    url: str | None = typer.Option(None, "--url", help="Override the scope URL"),
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for the cached entry",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()

    provider = _build_provider(config, fixture)
    scope_provider = _build_scope(config, url, fixture)
    if provider is None or scope_provider is None:
        _exit(1)
        return

    with HistoryService(provider, scope_provider, config.history or HistoryConfig()) as service:
        for page in range(pages):
            future = service.trigger_fetch(key, refresh=refresh and page == 0)
            if future is None:
                logger.info("Oldest record reached for {}", key)
                break
            completed = future.result()
            if completed is None or completed.status is FetchStatus.FETCH_FAILED:
                break
        entry = service.get_entry(key)

    if entry is None:
        logger.error("No history cached for {}", key)
        _exit(1)
        return

    if format == "json":
        print(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False))
    else:
        _report_entry(entry)

    if entry.status is FetchStatus.FETCH_FAILED:
        _exit(1)


@app.command(help="Run the history API server")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Host to bind the API server to"),
    port: int = typer.Option(8000, help="Port to bind the API server to"),
    fixture: Path | None = typer.Option(None, "--fixture", help="Serve pages from a local JSON fixture"),
    dry_run: bool = typer.Option(
        False,
        help="Build the service and report status without running the server",
    ),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()

    if config.web is not None and not config.web.enabled:
        logger.error("Web API is disabled in the configuration")
        _exit(1)
        return

    provider = _build_provider(config, fixture)
    scope_provider = _build_scope(config, None, fixture)
    if provider is None or scope_provider is None:
        _exit(1)
        return

    service = HistoryService(provider, scope_provider, config.history or HistoryConfig())

    if dry_run:
        logger.info("[Dry Run] Scope: {} ({})", scope_provider.url, scope_provider.cluster.value)
        logger.info("[Dry Run] Server will not be started.")
        return

    app_instance = create_app(service, config.web)

    @app_instance.on_event("startup")
    async def startup_event() -> None:
        logger.info("Application startup...")
        service.start()

    @app_instance.on_event("shutdown")
    async def shutdown_event() -> None:
        logger.info("Application shutdown...")
        service.close()

    uvicorn.run(app_instance, host=host, port=port)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            logger.error("  - {}: {} ({})", detail["loc"] or "<root>", detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        print(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for field in fields:
        default_value = field["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        else:
            default_repr = str(default_value)
        logger.info(
            "  - {name}: type={type}, required={required}, default={default}, description={description}",
            name=field["name"],
            type=field["type"],
            required="yes" if field["required"] else "no",
            default=default_repr,
            description=field["description"] or "(no description)",
        )


def _report_entry(entry: CacheEntry) -> None:
    records = entry.data.fetched if entry.data else ()
    logger.info("=== History for {} ===", entry.key)
    logger.info("Scope: {}", entry.scope)
    logger.info("Status: {}", entry.status.value)
    logger.info("Records: {}, oldest found: {}", len(records), entry.data.found_oldest if entry.data else False)
    for record in records:
        suffix = f" err={record.err}" if record.err else ""
        logger.info("  - slot={} signature={} cursor={}{}", record.slot, record.signature, record.cursor, suffix)


def _report_system_status(config: AppConfig) -> None:
    """Print configuration of every subsystem."""
    logger.info("=== General Configuration ===")
    logger.info("Logging level: {}", config.logging_level)

    logger.info("\n=== Scope ===")
    if config.scope:
        logger.info("URL: {}", config.scope.url)
        logger.info("Cluster: {}", config.scope.cluster.value)
    else:
        logger.info("Not configured")

    logger.info("\n=== History ===")
    history = config.history or HistoryConfig()
    logger.info("Page size: {}, Max workers: {}", history.page_size, history.max_workers)
    logger.info("Dataset: {}", history.dataset_id or "(default)")
    logger.info("Strict ordering: {}", history.strict_ordering)

    logger.info("\n=== Provider ===")
    if config.provider:
        logger.info("Base URL: {}", config.provider.base_url)
        logger.info("Timeout: {}s, API key configured: {}", config.provider.timeout, config.provider.api_key is not None)
    else:
        logger.info("Not configured")

    logger.info("\n=== Web API ===")
    if config.web:
        logger.info("Enabled: {}, Auth: {}", config.web.enabled, bool(config.web.auth and config.web.auth.enabled))
    else:
        logger.info("Not configured")


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
