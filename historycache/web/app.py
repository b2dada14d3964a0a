"""FastAPI application factory and routing definitions."""

from __future__ import annotations

import secrets
from typing import Any, Callable

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from historycache.config.web import WebAuthConfig, WebConfig
from historycache.exceptions import ScopeMismatchError, StoreNotInitialisedError
from historycache.history.service import HistoryService


def create_app(history_service: HistoryService, config: WebConfig | None = None) -> FastAPI:
    """Creates the history API around an already started service."""
    auth_config = config.auth if config and config.auth else None
    auth_dependency = _build_auth_dependency(auth_config)

    app = FastAPI(
        title=config.title if config else "History Cache API",
        description="Read and paginate cached account histories.",
        version="0.1.0",
    )

    @app.exception_handler(StoreNotInitialisedError)
    async def store_not_initialised(request: Request, exc: StoreNotInitialisedError) -> JSONResponse:
        logger.error("History cache unavailable on {}: {}", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "History cache is not running."},
        )

    @app.exception_handler(ScopeMismatchError)
    async def scope_changed(request: Request, exc: ScopeMismatchError) -> JSONResponse:
        logger.warning("Scope changed while handling {}: {}", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "Active scope changed; retry the request."},
        )

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, str]:
        """Check if the API is running."""
        return {"status": "ok"}

    @app.get("/scope", summary="Active Scope", tags=["Histories"])
    async def active_scope(_: None = Depends(auth_dependency)) -> dict[str, str]:
        return {
            "url": history_service.scope,
            "cluster": history_service.scope_provider.cluster.value,
        }

    @app.get("/histories", summary="List Cached Histories", tags=["Histories"])
    async def list_histories(_: None = Depends(auth_dependency)) -> dict[str, Any]:
        """Returns every cached entry of the active scope keyed by account."""
        entries = history_service.list_entries()
        return {key: entry.to_dict() for key, entry in entries.items()}

    @app.get("/histories/{key}", summary="Get Cached History", tags=["Histories"])
    async def get_history(key: str, _: None = Depends(auth_dependency)) -> dict[str, Any]:
        entry = history_service.get_entry(key)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No history cached for '{key}'.")
        return entry.to_dict()

    @app.post(
        "/histories/{key}/fetch",
        summary="Fetch Next History Page",
        tags=["Histories"],
        status_code=status.HTTP_202_ACCEPTED,
    )
    async def fetch_history(
        key: str,
        refresh: bool = False,
        _: None = Depends(auth_dependency),
    ) -> dict[str, str]:
        """
        Schedules the next page fetch for ``key``; ``refresh`` restarts from the newest page.
        """
        logger.info("Fetch requested for {} (refresh={})", key, refresh)
        future = history_service.trigger_fetch(key, refresh=refresh)
        if future is None:
            return {"status": "complete"}
        return {"status": "scheduled"}

    return app


def _build_auth_dependency(auth_config: WebAuthConfig | None) -> Callable[..., Any]:
    """Return a dependency that validates the configured auth token."""

    if not auth_config or not auth_config.enabled:
        async def _no_auth() -> None:  # pragma: no cover - trivial branch
            return None

        return _no_auth

    expected_token = auth_config.token_secret or ""
    header_alias = auth_config.header_name

    async def _verify_token(
        provided_token: str | None = Header(default=None, alias=header_alias),
    ) -> None:
        if provided_token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authentication token.",
            )

        if not secrets.compare_digest(provided_token, expected_token):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token.",
            )

    return _verify_token
