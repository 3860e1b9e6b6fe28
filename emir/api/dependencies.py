"""Shared request dependencies: renderer instances, API keys, body parsing."""

import json
from functools import lru_cache
from typing import Optional

from fastapi import Request

from ..config import settings
from ..exceptions import AuthenticationError, CardValidationError
from ..generator import CardGenerator
from ..thumbnail import ThumbnailRenderer


@lru_cache(maxsize=1)
def get_generator() -> CardGenerator:
    return CardGenerator()


@lru_cache(maxsize=1)
def get_thumbnail_renderer() -> ThumbnailRenderer:
    return ThumbnailRenderer()


def check_api_key(expected: Optional[str], provided: Optional[str]) -> None:
    """Reject the request when a key is configured and the header does not match."""
    if expected and provided != expected:
        raise AuthenticationError("Invalid API key")


def require_quote_cards_key(request: Request) -> None:
    check_api_key(settings.quote_cards_api_key, request.headers.get("x-api-key"))


def require_thumbnails_key(request: Request) -> None:
    check_api_key(settings.thumbnails_api_key, request.headers.get("x-api-key"))


async def read_json_body(request: Request) -> dict:
    """Parse the request body as a JSON object.

    Raises:
        CardValidationError: Body is not valid JSON or not an object
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise CardValidationError("Invalid JSON in request body") from None
    if not isinstance(body, dict):
        raise CardValidationError("Request body must be a JSON object")
    return body


def wants_json(request: Request) -> bool:
    """True for the ?json=1 debug mode."""
    return request.query_params.get("json") == "1"
