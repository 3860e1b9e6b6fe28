from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from ..exceptions import CardValidationError
from ..formats import DEFAULT_FORMAT
from ..generator import CardGenerator, formats_summary
from ..utils import get_logger
from .dependencies import get_generator, read_json_body, require_quote_cards_key, wants_json
from .schemas import ERROR_RESPONSES, NAME_MAX_CHARS, QUOTE_MAX_CHARS, DebugResponse, QuoteCardRequest

router = APIRouter()
logger = get_logger(__name__)

PNG_HEADERS = {"Cache-Control": "no-store"}


@router.get("/quote-cards")
async def describe_quote_cards():
    """Document the request body instead of rendering."""
    return {
        "endpoint": "/api/quote-cards",
        "method": "POST",
        "description": "Render an EMIR quote card and return it as image/png",
        "required": {
            "name": f"string, up to {NAME_MAX_CHARS} characters",
            "companyTitle": f"string, up to {NAME_MAX_CHARS} characters",
            "companyName": f"string, up to {NAME_MAX_CHARS} characters",
            "quoteContent": f"string, up to {QUOTE_MAX_CHARS} characters",
        },
        "optional": {
            "highlightWord": "comma-separated words rendered in gold",
            "profileImage": "portrait URL (http/https) or base64 data URL",
            "fontSize": "integer, used when useAutoSize is false",
            "useAutoSize": "boolean, default true",
            "format": f"one of the formats below, default '{DEFAULT_FORMAT}'",
        },
        "query": {"json": "set to 1 to receive a JSON summary instead of the PNG"},
        "headers": {"x-api-key": "required when the server has an API key configured"},
        "formats": formats_summary(),
    }


@router.post(
    "/quote-cards",
    dependencies=[Depends(require_quote_cards_key)],
    responses=ERROR_RESPONSES,
)
async def create_quote_card(
    request: Request,
    generator: CardGenerator = Depends(get_generator),
):
    body = await read_json_body(request)
    try:
        payload = QuoteCardRequest.model_validate(body)
    except ValidationError as e:
        raise CardValidationError("Invalid request body", details={"detail": str(e)}) from None

    content = payload.to_content()
    logger.info(f"Quote card request: format={payload.format}, autoSize={payload.useAutoSize}")
    card = await run_in_threadpool(
        generator.render,
        content,
        payload.format,
        payload.fontSize,
        payload.useAutoSize,
        strict_assets=True,
    )

    if wants_json(request):
        return DebugResponse(bytes=len(card.png))
    return Response(content=card.png, media_type="image/png", headers=PNG_HEADERS)
