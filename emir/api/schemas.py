from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import CardValidationError
from ..formats import DEFAULT_FORMAT
from ..models import CardContent, clamp_text, parse_highlight_terms
from ..thumbnail import ThumbnailContent

NAME_MAX_CHARS = 100
QUOTE_MAX_CHARS = 500


def _require_text(value: Optional[str], field_name: str, allow_blank: bool = False) -> str:
    if not value or (not allow_blank and not value.strip()):
        raise CardValidationError(f"Missing or invalid '{field_name}' field (string required)")
    return value


class QuoteCardRequest(BaseModel):
    """Body of POST /api/quote-cards. Field names match the dashboard forms."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, description="Name of the person being quoted")
    companyTitle: Optional[str] = Field(None, description="The person's job title")
    companyName: Optional[str] = Field(None, description="Organization name")
    quoteContent: Optional[str] = Field(None, description="Quote text, up to 500 characters")
    highlightWord: str = Field("", description="Comma-separated words to render in gold")
    profileImage: Optional[str] = Field(None, description="Portrait URL (http/https) or data URL")
    fontSize: Optional[int] = Field(None, gt=0, le=400, description="Fixed quote size when useAutoSize is false")
    useAutoSize: bool = Field(True, description="Pick the largest quote size that fits")
    format: str = Field(DEFAULT_FORMAT, description="Card format name")

    def to_content(self) -> CardContent:
        """Validate required fields, clamp lengths and build the card content.

        Raises:
            CardValidationError: With the message of the first missing field
        """
        name = _require_text(self.name, "name")
        # Title and company only need to be non-empty
        title = _require_text(self.companyTitle, "companyTitle", allow_blank=True)
        company = _require_text(self.companyName, "companyName", allow_blank=True)
        quote = _require_text(self.quoteContent, "quoteContent")

        return CardContent(
            quote_text=clamp_text(quote, QUOTE_MAX_CHARS),
            attribution_name=clamp_text(name, NAME_MAX_CHARS),
            attribution_title=clamp_text(title, NAME_MAX_CHARS),
            attribution_org=clamp_text(company, NAME_MAX_CHARS),
            highlight_terms=parse_highlight_terms(self.highlightWord),
            portrait=(self.profileImage or "").strip() or None,
        )


class ThumbnailRequest(BaseModel):
    """Body of POST /api/thumbnails."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, description="Thumbnail title, up to 120 characters")
    subtitle: Optional[str] = Field(None, description="Optional subtitle, up to 160 characters")
    backgroundImage: Optional[str] = Field(None, description="Background image URL")

    def to_content(self) -> ThumbnailContent:
        name = _require_text(self.name, "name")
        if not self.backgroundImage or not self.backgroundImage.strip():
            raise CardValidationError("Missing or invalid 'backgroundImage' field (string URL required)")
        return ThumbnailContent(
            title=name,
            subtitle=self.subtitle or "",
            background=self.backgroundImage.strip(),
        )


class ErrorResponse(BaseModel):
    """Error document returned with every 4xx/5xx status."""
    error: str
    detail: Optional[str] = None


class DebugResponse(BaseModel):
    """Returned instead of the PNG when ?json=1 is set."""
    ok: bool = True
    bytes: int
    mime: str = "image/png"
    note: str = "binary omitted"


# OpenAPI documentation for the error statuses of the render routes
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid body, unknown format or unusable image"},
    401: {"model": ErrorResponse, "description": "Missing or wrong x-api-key"},
    500: {"model": ErrorResponse, "description": "Rendering failed"},
}
