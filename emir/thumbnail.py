"""YouTube thumbnail renderer.

A full-bleed background photo under a dark scrim, a centered title and
optional subtitle, and a gold footer band carrying the EMIR wordmark.
"""

from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageOps

from .assets import ImageLoader
from .exceptions import CardValidationError
from .fonts import BODY, BOLD, FontRef, FontRegistry
from .models import ImageSource, clamp_text
from .surface import DrawingSurface, PillowSurface
from .utils import get_logger

logger = get_logger(__name__)

WIDTH = 1280
HEIGHT = 720

TITLE_MAX_CHARS = 120
SUBTITLE_MAX_CHARS = 160

SCRIM_STOPS = (
    (0.0, (0, 0, 0, 0.35)),
    (1.0, (0, 0, 0, 0.55)),
)
FOOTER_HEIGHT = 120
FOOTER_COLOR = (194, 162, 77)  # #c2a24d
WORDMARK_BLOCK = (60, 280)  # x range of the dark block in the footer
WORDMARK_BLOCK_COLOR = (17, 17, 17)
WORDMARK_TEXT = "EMIR"
TEXT_COLOR = (255, 255, 255)

TITLE_BASELINE = 320
SUBTITLE_BASELINE = 390
TITLE_SIZE = 72
SUBTITLE_SIZE = 36
WORDMARK_SIZE = 64


@dataclass(frozen=True)
class ThumbnailContent:
    """Input for one thumbnail."""

    title: str
    background: ImageSource
    subtitle: str = ""

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise CardValidationError("Missing or invalid 'name' field (string required)")
        if not self.background or (isinstance(self.background, str) and not self.background.strip()):
            raise CardValidationError("Missing or invalid 'backgroundImage' field (string URL required)")


class ThumbnailRenderer:
    """Renders 1280x720 thumbnails; a broken background is always an error."""

    def __init__(self, loader: Optional[ImageLoader] = None, fonts: Optional[FontRegistry] = None):
        self.loader = loader or ImageLoader()
        self.fonts = fonts

    def render(self, content: ThumbnailContent) -> bytes:
        """
        Render a thumbnail to PNG bytes.

        Raises:
            CardValidationError: Title or background is missing
            AssetLoadError: The background cannot be fetched or decoded
        """
        content.validate()
        background = self.loader.load(content.background)

        surface = PillowSurface(WIDTH, HEIGHT, fonts=self.fonts)
        self.paint(surface, background, content)
        png = surface.to_png()
        logger.info(f"Generated thumbnail ({WIDTH}x{HEIGHT}, {len(png)} bytes)")
        return png

    def paint(self, surface: DrawingSurface, background: Image.Image, content: ThumbnailContent) -> None:
        title = clamp_text(content.title, TITLE_MAX_CHARS).upper()
        subtitle = clamp_text(content.subtitle, SUBTITLE_MAX_CHARS)
        center_x = WIDTH / 2

        cover = ImageOps.fit(background.convert("RGBA"), (WIDTH, HEIGHT), Image.LANCZOS, centering=(0.5, 0.5))
        surface.draw_image(cover, 0, 0)
        surface.fill_linear_gradient((0, 0), (0, HEIGHT), SCRIM_STOPS)

        surface.draw_text((center_x, TITLE_BASELINE), title, FontRef(BOLD), TITLE_SIZE, TEXT_COLOR, anchor="ms")
        if subtitle:
            surface.draw_text(
                (center_x, SUBTITLE_BASELINE), subtitle, FontRef(BODY), SUBTITLE_SIZE, TEXT_COLOR, anchor="ms"
            )

        footer_top = HEIGHT - FOOTER_HEIGHT
        surface.fill_rect((0, footer_top, WIDTH, HEIGHT), FOOTER_COLOR)
        block_left, block_right = WORDMARK_BLOCK
        surface.fill_rect((block_left, footer_top, block_right, HEIGHT), WORDMARK_BLOCK_COLOR)
        surface.draw_text(
            ((block_left + block_right) / 2, HEIGHT - 45),
            WORDMARK_TEXT,
            FontRef(BOLD),
            WORDMARK_SIZE,
            TEXT_COLOR,
            anchor="ms",
        )
