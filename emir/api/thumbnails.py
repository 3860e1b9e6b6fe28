from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from ..exceptions import CardValidationError
from ..thumbnail import HEIGHT, SUBTITLE_MAX_CHARS, TITLE_MAX_CHARS, WIDTH, ThumbnailRenderer
from .dependencies import get_thumbnail_renderer, read_json_body, require_thumbnails_key, wants_json
from .quote_cards import PNG_HEADERS
from .schemas import ERROR_RESPONSES, DebugResponse, ThumbnailRequest

router = APIRouter()


@router.get("/thumbnails")
async def describe_thumbnails():
    return {
        "endpoint": "/api/thumbnails",
        "method": "POST",
        "description": f"Render a {WIDTH}x{HEIGHT} YouTube thumbnail and return it as image/png",
        "required": {
            "name": f"string, up to {TITLE_MAX_CHARS} characters",
            "backgroundImage": "image URL (http/https)",
        },
        "optional": {"subtitle": f"string, up to {SUBTITLE_MAX_CHARS} characters"},
        "query": {"json": "set to 1 to receive a JSON summary instead of the PNG"},
        "headers": {"x-api-key": "required when the server has an API key configured"},
    }


@router.post(
    "/thumbnails",
    dependencies=[Depends(require_thumbnails_key)],
    responses=ERROR_RESPONSES,
)
async def create_thumbnail(
    request: Request,
    renderer: ThumbnailRenderer = Depends(get_thumbnail_renderer),
):
    body = await read_json_body(request)
    try:
        payload = ThumbnailRequest.model_validate(body)
    except ValidationError as e:
        raise CardValidationError("Invalid request body", details={"detail": str(e)}) from None

    png = await run_in_threadpool(renderer.render, payload.to_content())

    if wants_json(request):
        return DebugResponse(bytes=len(png))
    return Response(content=png, media_type="image/png", headers=PNG_HEADERS)
