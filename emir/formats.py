"""Card format table: layout constants and sharpening weights per output size.

Each supported format is a static parameter set over the one compositing
pipeline. Pixel values come from the tuned LinkedIn post, LinkedIn preview
and Instagram generators; the YouTube thumbnail variant scales the post
layout down to 1280x720.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import UnknownFormatError

RGBA = tuple[int, int, int, float]
ColorStop = tuple[float, RGBA]

# Palette
PRIMARY_TEXT_COLOR = (255, 255, 255)
ACCENT_COLOR = (190, 161, 82)  # #BEA152

# Gradient stops (offset, (r, g, b, alpha 0..1))
BACKGROUND_STOPS: tuple[ColorStop, ...] = (
    (0.0, (26, 26, 26, 1.0)),
    (1.0, (0, 0, 0, 1.0)),
)
LIGHTING_STOPS: tuple[ColorStop, ...] = (
    (0.0, (95, 96, 95, 0.0)),
    (0.3, (95, 96, 95, 0.1)),
    (0.6, (95, 96, 95, 0.25)),
    (0.8, (95, 96, 95, 0.4)),
    (1.0, (95, 96, 95, 0.35)),
)
HIGHLIGHT_STOPS: tuple[ColorStop, ...] = (
    (0.0, (255, 255, 255, 0.0)),
    (0.7, (255, 255, 255, 0.03)),
    (0.9, (255, 255, 255, 0.06)),
    (1.0, (255, 255, 255, 0.04)),
)
LEGIBILITY_STOPS: tuple[ColorStop, ...] = (
    (0.0, (0, 0, 0, 0.75)),
    (0.5, (0, 0, 0, 0.45)),
    (1.0, (0, 0, 0, 0.0)),
)

HAIRLINE_SPACING = 20
HAIRLINE_ALPHA = 0.03
SEPARATOR_THICKNESS = 2
HIGHLIGHT_START_RATIO = 0.4


@dataclass(frozen=True)
class KernelWeights:
    """Center and edge weights of a 3x3 cross-shaped sharpening kernel."""

    center: float
    edge: float

    @property
    def matrix(self) -> tuple[tuple[float, float, float], ...]:
        e, c = self.edge, self.center
        return (
            (0.0, e, 0.0),
            (e, c, e),
            (0.0, e, 0.0),
        )


@dataclass(frozen=True)
class PortraitPlacement:
    """Where the enhanced portrait lands on the canvas.

    ``fit`` scales the portrait to ``size_ratio`` of the canvas width or
    height. The image is pushed right by ``offset_px`` plus ``offset_ratio``
    of its scaled width (cropping the right edge), and only ``visible_ratio``
    of its height shows above the bottom edge.
    """

    fit: str = "width"
    size_ratio: float = 0.70
    offset_px: int = 0
    offset_ratio: float = 0.0
    visible_ratio: float = 0.8

    def __post_init__(self):
        if self.fit not in ("width", "height"):
            raise ValueError(f"Unknown portrait fit: {self.fit}")


@dataclass(frozen=True)
class LayoutSpec:
    """Geometry of one card format, in pixels."""

    canvas_width: int
    canvas_height: int
    text_box_width: int
    text_box_max_height: int
    font_size_min: int
    font_size_max: int
    line_height_multiplier: float
    left_padding: int
    right_padding: int

    quote_top_ratio: float = 0.14
    separator_width: int = 100
    separator_gap: int = 45
    name_font_size: int = 58
    detail_font_size: int = 36
    title_offset: int = 65
    org_offset: int = 45
    vertical_background: bool = False
    lighting_start_ratio: float = 0.2
    portrait: PortraitPlacement = field(default_factory=PortraitPlacement)
    logo_width: int = 370
    logo_gap: int = 10
    opening_quote_size: Optional[int] = None

    def __post_init__(self):
        if self.font_size_min > self.font_size_max:
            raise ValueError(
                f"font_size_min ({self.font_size_min}) exceeds font_size_max ({self.font_size_max})"
            )
        usable = self.canvas_width - self.left_padding - self.right_padding
        if self.text_box_width > usable:
            raise ValueError(
                f"text_box_width ({self.text_box_width}) exceeds usable width ({usable})"
            )

    @property
    def size(self) -> tuple[int, int]:
        return (self.canvas_width, self.canvas_height)

    @property
    def quote_top(self) -> float:
        """Baseline of the first quote line."""
        return self.canvas_height * self.quote_top_ratio

    def line_height_for(self, font_size: int) -> int:
        return math.ceil(font_size * self.line_height_multiplier)


@dataclass(frozen=True)
class CardFormat:
    """A named output format: layout plus sharpening kernel."""

    name: str
    layout: LayoutSpec
    kernel: KernelWeights
    description: str = ""


LINKEDIN_POST = CardFormat(
    name="linkedin-post",
    description="LinkedIn post / executive quote card (16:9)",
    layout=LayoutSpec(
        canvas_width=1920,
        canvas_height=1080,
        text_box_width=1100,
        text_box_max_height=486,  # 45% of canvas height
        font_size_min=42,
        font_size_max=78,
        line_height_multiplier=1.3,
        left_padding=90,
        right_padding=90,
        portrait=PortraitPlacement(fit="width", size_ratio=0.70, offset_px=120),
    ),
    kernel=KernelWeights(center=3.0, edge=-0.5),
)

LINKEDIN_PREVIEW = CardFormat(
    name="linkedin-preview",
    description="LinkedIn link preview (1.91:1)",
    layout=LayoutSpec(
        canvas_width=1200,
        canvas_height=628,
        text_box_width=680,
        text_box_max_height=282,  # 45% of 628, floored
        font_size_min=28,
        font_size_max=39,
        line_height_multiplier=1.3,
        left_padding=60,
        right_padding=60,
        quote_top_ratio=0.16,
        separator_gap=30,
        name_font_size=34,
        detail_font_size=24,
        title_offset=40,
        org_offset=30,
        portrait=PortraitPlacement(fit="width", size_ratio=0.65, offset_px=40),
        logo_width=280,
    ),
    kernel=KernelWeights(center=2.0, edge=-0.25),
)

INSTAGRAM = CardFormat(
    name="instagram",
    description="Instagram portrait post (4:5)",
    layout=LayoutSpec(
        canvas_width=1080,
        canvas_height=1350,
        text_box_width=460,  # 660px content column minus 80/120 padding
        text_box_max_height=607,  # 45% of 1350, floored
        font_size_min=42,
        font_size_max=70,
        line_height_multiplier=1.3,
        left_padding=80,
        right_padding=120,
        quote_top_ratio=0.12,
        separator_width=80,
        separator_gap=35,
        name_font_size=42,
        detail_font_size=28,
        title_offset=45,
        org_offset=35,
        vertical_background=True,
        lighting_start_ratio=0.0,
        portrait=PortraitPlacement(fit="height", size_ratio=1.0, offset_ratio=0.225, visible_ratio=1.0),
        logo_width=450,
        logo_gap=20,
        opening_quote_size=62,
    ),
    kernel=KernelWeights(center=2.2, edge=-0.3),
)

YOUTUBE_THUMBNAIL = CardFormat(
    name="youtube-thumbnail",
    description="YouTube thumbnail quote card (16:9, 1280x720)",
    layout=LayoutSpec(
        canvas_width=1280,
        canvas_height=720,
        text_box_width=720,
        text_box_max_height=324,  # 45% of canvas height
        font_size_min=28,
        font_size_max=52,
        line_height_multiplier=1.3,
        left_padding=60,
        right_padding=60,
        separator_width=80,
        separator_gap=35,
        name_font_size=40,
        detail_font_size=26,
        title_offset=45,
        org_offset=32,
        portrait=PortraitPlacement(fit="width", size_ratio=0.65, offset_px=80),
        logo_width=250,
    ),
    kernel=KernelWeights(center=3.0, edge=-0.5),
)

FORMATS: dict[str, CardFormat] = {
    fmt.name: fmt for fmt in (LINKEDIN_POST, LINKEDIN_PREVIEW, INSTAGRAM, YOUTUBE_THUMBNAIL)
}

DEFAULT_FORMAT = LINKEDIN_POST.name


def get_format(name: str) -> CardFormat:
    """Look up a card format by name (case-insensitive)."""
    key = (name or "").strip().lower()
    try:
        return FORMATS[key]
    except KeyError:
        raise UnknownFormatError(
            f"Unknown card format: {name!r}",
            details={"available": sorted(FORMATS)},
        ) from None
