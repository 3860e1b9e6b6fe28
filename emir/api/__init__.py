"""HTTP API for server-side card rendering."""

from .app import create_app

__all__ = ["create_app"]
