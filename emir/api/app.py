"""FastAPI application exposing the quote-card and thumbnail renderers."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import settings
from ..exceptions import (
    AssetLoadError,
    AuthenticationError,
    CardValidationError,
    EmirError,
    RenderError,
    UnknownFormatError,
)
from ..utils import get_logger, setup_logging
from . import quote_cards, thumbnails

logger = get_logger(__name__)

# The server path reports bad portraits to the caller rather than dropping them
_STATUS_BY_ERROR = {
    CardValidationError: 400,
    UnknownFormatError: 400,
    AssetLoadError: 400,
    AuthenticationError: 401,
    RenderError: 500,
}


def status_for(exc: EmirError) -> int:
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


def error_document(exc: EmirError) -> dict:
    status = status_for(exc)
    if status >= 500:
        return {"error": "failed to render image", "detail": exc.message}
    document = {"error": exc.message}
    if "detail" in exc.details:
        document["detail"] = exc.details["detail"]
    return document


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("EMIR render API starting")
    yield
    logger.info("EMIR render API stopped")


def create_app(configure_logging: bool = False) -> FastAPI:
    """Build the application; routes live under /api."""
    if configure_logging:
        setup_logging(settings.log_level, settings.gcp_project_id)

    app = FastAPI(title="EMIR Render API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-api-key"],
    )

    app.include_router(quote_cards.router, prefix="/api", tags=["quote-cards"])
    app.include_router(thumbnails.router, prefix="/api", tags=["thumbnails"])

    @app.exception_handler(EmirError)
    async def handle_emir_error(request: Request, exc: EmirError):
        status = status_for(exc)
        if status >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.url.path} rejected ({status}): {exc.message}")
        return JSONResponse(status_code=status, content=error_document(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "failed to render image", "detail": str(exc)},
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
