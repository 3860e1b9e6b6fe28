"""Scene compositor: paints a quote card in a fixed layer order.

Layers, back to front:
1. Dark background gradient
2. Lighting gradient from the right
3. Faint white highlight
4. Vertical gold hairlines
5. Quote text with highlighted words
6. Gold separator rule
7. Name / title / organization
8. Enhanced portrait
9. White wordmark
"""

from typing import Callable, Optional, Sequence

import numpy as np
from PIL import Image

from .fonts import BODY, BOLD, FontRef, FontRegistry
from .formats import (
    ACCENT_COLOR,
    BACKGROUND_STOPS,
    HAIRLINE_ALPHA,
    HAIRLINE_SPACING,
    HIGHLIGHT_START_RATIO,
    HIGHLIGHT_STOPS,
    LIGHTING_STOPS,
    PRIMARY_TEXT_COLOR,
    SEPARATOR_THICKNESS,
    CardFormat,
    LayoutSpec,
)
from .image_enhancer import enhance, legibility_shade
from .models import CardContent, ResolvedLayout, TextRun
from .surface import DrawingSurface, PillowSurface
from .utils import get_logger

logger = get_logger(__name__)

QUOTE_FONT = FontRef(BODY)
NAME_FONT = FontRef(BOLD)
DETAIL_FONT = FontRef(BODY)
QUOTE_MARK = '"'


def is_highlighted(word: str, terms: Sequence[str]) -> bool:
    """Loose match: equal, or either string contains the other.

    Both sides are compared upper-cased. Short terms match generously
    (``"I"`` hits most words); that is the established behaviour.
    """
    word = word.upper()
    for term in terms:
        term = term.upper()
        if word == term or term in word or word in term:
            return True
    return False


def plan_text_runs(
    layout: ResolvedLayout,
    spec: LayoutSpec,
    highlight_terms: Sequence[str],
    measure: Callable[[str, FontRef, int], float],
) -> list[TextRun]:
    """
    Place every word of the quote and the surrounding quote marks.

    Lines start at ``spec.quote_top`` and advance by ``layout.line_height``.
    The opening mark precedes the first word; the closing mark follows the
    last word of the last line.
    """
    size = layout.font_size
    mark_size = spec.opening_quote_size or size
    space_width = measure(" ", QUOTE_FONT, size)
    runs: list[TextRun] = []

    for index, line in enumerate(layout.lines):
        y = spec.quote_top + index * layout.line_height
        x = float(line.x_offset)

        if index == 0:
            runs.append(TextRun(QUOTE_MARK, x, y, PRIMARY_TEXT_COLOR, mark_size))
            x += measure(QUOTE_MARK, QUOTE_FONT, mark_size)

        words = line.words
        for word_index, word in enumerate(words):
            color = ACCENT_COLOR if is_highlighted(word, highlight_terms) else PRIMARY_TEXT_COLOR
            runs.append(TextRun(word, x, y, color, size))
            if word_index < len(words) - 1:
                x += measure(word, QUOTE_FONT, size) + space_width

        if index == len(layout.lines) - 1 and words:
            closing_x = x + measure(words[-1], QUOTE_FONT, size)
            runs.append(TextRun(QUOTE_MARK, closing_x, y, PRIMARY_TEXT_COLOR, size))

    return runs


def whiten(image: Image.Image) -> Image.Image:
    """Recolor every non-transparent pixel to white, keeping alpha."""
    pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
    visible = pixels[..., 3] > 0
    pixels[visible, :3] = 255
    return Image.fromarray(pixels, "RGBA")


class SceneCompositor:
    """Paints quote cards onto a drawing surface."""

    def __init__(
        self,
        fonts: Optional[FontRegistry] = None,
        surface_factory: Optional[Callable[[int, int], DrawingSurface]] = None,
    ):
        self.fonts = fonts
        self._surface_factory = surface_factory or (
            lambda width, height: PillowSurface(width, height, fonts=self.fonts)
        )

    def new_surface(self, spec: LayoutSpec) -> DrawingSurface:
        return self._surface_factory(spec.canvas_width, spec.canvas_height)

    def composite(
        self,
        content: CardContent,
        layout: ResolvedLayout,
        card_format: CardFormat,
        portrait: Optional[Image.Image] = None,
        logo: Optional[Image.Image] = None,
        surface: Optional[DrawingSurface] = None,
    ) -> DrawingSurface:
        """
        Paint a complete card.

        Args:
            content: Card text and highlight terms
            layout: Resolved quote layout for this format
            card_format: Target format
            portrait: Decoded portrait, or None to skip that layer
            logo: Decoded wordmark, or None to skip that layer
            surface: Surface to paint on; a fresh one is created when omitted

        Returns:
            The painted surface
        """
        spec = card_format.layout
        surface = surface or self.new_surface(spec)

        self._draw_background(surface, spec)
        self._draw_quote(surface, content, layout, spec)
        separator_y = self._draw_separator(surface, layout, spec)
        self._draw_attribution(surface, content, spec, separator_y)
        if portrait is not None:
            self._draw_portrait(surface, portrait, card_format)
        if logo is not None:
            self._draw_logo(surface, logo, spec)

        logger.debug(
            f"Composited {card_format.name} card: {len(layout.lines)} lines at {layout.font_size}px"
        )
        return surface

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def _draw_background(self, surface: DrawingSurface, spec: LayoutSpec) -> None:
        width, height = spec.size
        bg_end = (0, height) if spec.vertical_background else (width, height)
        surface.fill_linear_gradient((0, 0), bg_end, BACKGROUND_STOPS)
        surface.fill_linear_gradient((width * spec.lighting_start_ratio, 0), (width, 0), LIGHTING_STOPS)
        surface.fill_linear_gradient((width * HIGHLIGHT_START_RATIO, 0), (width, 0), HIGHLIGHT_STOPS)

        hairlines = [(x, 0, x + 1, height) for x in range(0, width, HAIRLINE_SPACING)]
        surface.fill_rects(hairlines, (*ACCENT_COLOR, HAIRLINE_ALPHA))

    def _draw_quote(
        self,
        surface: DrawingSurface,
        content: CardContent,
        layout: ResolvedLayout,
        spec: LayoutSpec,
    ) -> None:
        runs = plan_text_runs(layout, spec, content.upper_terms, surface.measure_text)
        for run in runs:
            surface.draw_text((run.x, run.y), run.text, QUOTE_FONT, run.font_size, run.color)

    def _draw_separator(self, surface: DrawingSurface, layout: ResolvedLayout, spec: LayoutSpec) -> float:
        y = spec.quote_top + layout.total_text_height
        x = spec.left_padding
        surface.draw_line((x, y), (x + spec.separator_width, y), ACCENT_COLOR, SEPARATOR_THICKNESS)
        return y

    def _draw_attribution(
        self,
        surface: DrawingSurface,
        content: CardContent,
        spec: LayoutSpec,
        separator_y: float,
    ) -> None:
        name, title, org = content.attribution_lines
        x = spec.left_padding
        name_y = separator_y + spec.separator_gap
        title_y = name_y + spec.title_offset
        org_y = title_y + spec.org_offset

        # "la" puts the top of the tallest glyphs at y
        if name:
            surface.draw_text((x, name_y), name, NAME_FONT, spec.name_font_size, PRIMARY_TEXT_COLOR, anchor="la")
        if title:
            surface.draw_text((x, title_y), title, DETAIL_FONT, spec.detail_font_size, ACCENT_COLOR, anchor="la")
        if org:
            surface.draw_text((x, org_y), org, DETAIL_FONT, spec.detail_font_size, ACCENT_COLOR, anchor="la")

    def _draw_portrait(self, surface: DrawingSurface, portrait: Image.Image, card_format: CardFormat) -> None:
        spec = card_format.layout
        placement = spec.portrait
        width, height = spec.size
        src_w, src_h = portrait.size
        if src_w == 0 or src_h == 0:
            logger.warning("Skipping empty portrait image")
            return

        if placement.fit == "height":
            scale = height * placement.size_ratio / src_h
        else:
            scale = width * placement.size_ratio / src_w
        scaled_w = max(1, int(round(src_w * scale)))
        scaled_h = max(1, int(round(src_h * scale)))

        x = width - scaled_w + placement.offset_px + scaled_w * placement.offset_ratio
        y = height - scaled_h * placement.visible_ratio

        resized = portrait.convert("RGBA").resize((scaled_w, scaled_h), Image.LANCZOS)
        surface.draw_image(enhance(resized, card_format.kernel), x, y)
        surface.draw_image(legibility_shade((scaled_w, scaled_h)), x, y)

    def _draw_logo(self, surface: DrawingSurface, logo: Image.Image, spec: LayoutSpec) -> None:
        if logo.width == 0 or logo.height == 0:
            logger.warning("Skipping empty logo image")
            return
        logo_w = spec.logo_width
        logo_h = max(1, int(round(logo.height * logo_w / logo.width)))
        white = whiten(logo.convert("RGBA").resize((logo_w, logo_h), Image.LANCZOS))

        bottom = spec.canvas_height - spec.left_padding
        surface.draw_image(white, spec.left_padding, bottom - logo_h - spec.logo_gap)
