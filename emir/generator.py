"""Quote card generation pipeline.

content -> layout resolver -> scene compositor (+ image enhancer) -> PNG.

Two entry points differ only in how a bad portrait is treated:
- ``generate``: editor path, the card renders without the portrait
- ``generate_strict``: API path, the failure propagates to the caller
"""

from dataclasses import dataclass
from typing import Optional

from PIL import Image

from .assets import ImageLoader, load_logo
from .compositor import QUOTE_FONT, SceneCompositor
from .exceptions import AssetLoadError
from .fonts import FontRegistry
from .formats import DEFAULT_FORMAT, FORMATS, CardFormat, get_format
from .layout_resolver import resolve
from .models import CardContent, ResolvedLayout
from .utils import get_logger

logger = get_logger(__name__)


@dataclass
class GeneratedCard:
    """Result of one generation call."""

    png: bytes
    format_name: str
    width: int
    height: int
    layout: ResolvedLayout
    portrait_drawn: bool
    logo_drawn: bool


class CardGenerator:
    """Renders quote cards for any registered format."""

    def __init__(
        self,
        compositor: Optional[SceneCompositor] = None,
        loader: Optional[ImageLoader] = None,
        fonts: Optional[FontRegistry] = None,
        logo: Optional[Image.Image] = None,
        load_default_logo: bool = True,
    ):
        self.compositor = compositor or SceneCompositor(fonts=fonts)
        self.loader = loader or ImageLoader()
        # Loaded once; render() never mutates generator state
        if logo is None and load_default_logo:
            logo = load_logo()
        self.logo = logo

    def generate(
        self,
        content: CardContent,
        format_name: str = DEFAULT_FORMAT,
        font_size: Optional[int] = None,
        use_auto_size: bool = True,
    ) -> bytes:
        """Render a card, dropping the portrait if it cannot be loaded."""
        return self.render(content, format_name, font_size, use_auto_size, strict_assets=False).png

    def generate_strict(
        self,
        content: CardContent,
        format_name: str = DEFAULT_FORMAT,
        font_size: Optional[int] = None,
        use_auto_size: bool = True,
    ) -> bytes:
        """Render a card; an unusable portrait raises ``AssetLoadError``."""
        return self.render(content, format_name, font_size, use_auto_size, strict_assets=True).png

    def render(
        self,
        content: CardContent,
        format_name: str = DEFAULT_FORMAT,
        font_size: Optional[int] = None,
        use_auto_size: bool = True,
        strict_assets: bool = False,
    ) -> GeneratedCard:
        """
        Run the full pipeline for one card.

        Args:
            content: Card text, highlight terms and optional portrait
            format_name: Registered format name
            font_size: Explicit quote size, used when auto-size is off
            use_auto_size: Search for the largest fitting size
            strict_assets: Raise on portrait failure instead of skipping it

        Returns:
            GeneratedCard with PNG bytes and the layout that was used

        Raises:
            CardValidationError: Content is missing required text
            UnknownFormatError: format_name is not registered
            AssetLoadError: Portrait failed and strict_assets is set
            RenderError: The surface could not be created or encoded
        """
        content.validate()
        card_format = get_format(format_name)

        fixed_size = None
        if not use_auto_size:
            fixed_size = font_size or card_format.layout.font_size_max

        # Portrait first: on the strict path a bad image must fail before any drawing
        portrait = self._load_portrait(content, strict_assets)

        surface = self.compositor.new_surface(card_format.layout)
        layout = resolve(
            content.upper_quote,
            card_format.layout,
            QUOTE_FONT,
            surface.measure_text,
            font_size=fixed_size,
        )
        logo = self.logo
        self.compositor.composite(content, layout, card_format, portrait=portrait, logo=logo, surface=surface)

        png = surface.to_png()
        width, height = surface.size
        logger.info(
            f"Generated {card_format.name} card ({width}x{height}, {layout.font_size}px, "
            f"{len(layout.lines)} lines, {len(png)} bytes)"
        )
        return GeneratedCard(
            png=png,
            format_name=card_format.name,
            width=width,
            height=height,
            layout=layout,
            portrait_drawn=portrait is not None,
            logo_drawn=logo is not None,
        )

    def _load_portrait(self, content: CardContent, strict: bool) -> Optional[Image.Image]:
        if not content.portrait:
            return None
        try:
            return self.loader.load(content.portrait)
        except AssetLoadError as e:
            if strict:
                raise
            logger.warning(f"Portrait unavailable, rendering without it: {e.message}")
            return None


def formats_summary() -> list[dict]:
    """Describe every registered format for documentation responses."""
    return [_describe(fmt) for fmt in FORMATS.values()]


def _describe(fmt: CardFormat) -> dict:
    spec = fmt.layout
    return {
        "name": fmt.name,
        "description": fmt.description,
        "width": spec.canvas_width,
        "height": spec.canvas_height,
        "fontSizeMin": spec.font_size_min,
        "fontSizeMax": spec.font_size_max,
    }
