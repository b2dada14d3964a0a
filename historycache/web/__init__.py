"""Web API for inspecting and driving the history cache."""

from historycache.web.app import create_app

__all__ = ["create_app"]
