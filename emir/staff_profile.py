"""Staff profile portraits for the team page.

Two variants of the same composition: a dark diagonal gradient, the
portrait color-graded and lifted off the background by a soft drop
shadow, and (square only) the white wordmark in the top-right corner.
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional

from PIL import Image, ImageEnhance, ImageFilter

from .assets import ImageLoader, load_logo
from .compositor import whiten
from .exceptions import AssetLoadError, UnknownFormatError
from .models import ImageSource
from .surface import DrawingSurface, PillowSurface
from .utils import get_logger

logger = get_logger(__name__)

BACKGROUND_STOPS = (
    (0.0, (0, 0, 0, 1.0)),  # #000000
    (1.0, (40, 40, 40, 1.0)),  # #282828
)

# Color grade applied in this order
CONTRAST = 1.3
SATURATION = 1.2
BRIGHTNESS = 1.1
SHARPNESS = 2.0

SHADOW_OPACITY = 0.7
SHADOW_BLUR = 25  # canvas shadowBlur; the Gaussian sigma is half of it
SHADOW_OFFSET = (-12, 12)

LOGO_WIDTH = 340
LOGO_RIGHT_MARGIN = 70
LOGO_TOP = 100


@dataclass(frozen=True)
class StaffProfileVariant:
    """Canvas size and portrait placement for one output."""

    name: str
    width: int
    height: int
    fit: str  # "width": scale to target width, "longest": scale the longer side to target
    target: int
    x_shift: int  # added to the horizontally centered x
    top: int
    show_logo: bool

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


STANDARD = StaffProfileVariant(
    name="standard", width=400, height=450, fit="width", target=450, x_shift=-10, top=20, show_logo=False
)
SQUARE = StaffProfileVariant(
    name="square", width=1440, height=1440, fit="longest", target=1350, x_shift=-50, top=120, show_logo=True
)

VARIANTS = {variant.name: variant for variant in (STANDARD, SQUARE)}
DEFAULT_VARIANT = SQUARE.name


def get_variant(name: str) -> StaffProfileVariant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise UnknownFormatError(
            f"Unknown staff profile variant: {name!r}",
            details={"available": sorted(VARIANTS)},
        ) from None


def portrait_placement(variant: StaffProfileVariant, size: tuple[int, int]) -> tuple[int, int, float, float]:
    """Return (width, height, x, y) of the scaled portrait on the canvas."""
    src_w, src_h = size
    if variant.fit == "width":
        scale = variant.target / src_w
    else:
        scale = variant.target / max(src_w, src_h)
    scaled_w = max(1, int(round(src_w * scale)))
    scaled_h = max(1, int(round(src_h * scale)))
    x = (variant.width - scaled_w) / 2 + variant.x_shift
    return scaled_w, scaled_h, x, variant.top


def color_grade(image: Image.Image) -> Image.Image:
    """Contrast, saturation, brightness and sharpness boost; alpha is kept."""
    rgba = image.convert("RGBA")
    alpha = rgba.getchannel("A")
    graded = rgba.convert("RGB")
    graded = ImageEnhance.Contrast(graded).enhance(CONTRAST)
    graded = ImageEnhance.Color(graded).enhance(SATURATION)
    graded = ImageEnhance.Brightness(graded).enhance(BRIGHTNESS)
    graded = ImageEnhance.Sharpness(graded).enhance(SHARPNESS)
    graded.putalpha(alpha)
    return graded


def shadow_padding() -> int:
    return math.ceil(3 * SHADOW_BLUR / 2)


def drop_shadow(image: Image.Image) -> Image.Image:
    """
    Black silhouette of ``image`` at ``SHADOW_OPACITY``, blurred.

    The result is larger than the input by ``shadow_padding()`` on every
    side so the blur is not clipped; draw it that much up and left.
    """
    pad = shadow_padding()
    width, height = image.size
    mask = Image.new("L", (width + 2 * pad, height + 2 * pad), 0)
    alpha = image.convert("RGBA").getchannel("A").point(lambda a: int(round(a * SHADOW_OPACITY)))
    mask.paste(alpha, (pad, pad))
    mask = mask.filter(ImageFilter.GaussianBlur(SHADOW_BLUR / 2))

    shadow = Image.new("RGBA", mask.size, (0, 0, 0, 255))
    shadow.putalpha(mask)
    return shadow


class StaffProfileRenderer:
    """Renders the standard (400x450) and square (1440x1440) staff portraits."""

    def __init__(
        self,
        loader: Optional[ImageLoader] = None,
        logo: Optional[Image.Image] = None,
        load_default_logo: bool = True,
        surface_factory: Optional[Callable[[int, int], DrawingSurface]] = None,
    ):
        self.loader = loader or ImageLoader()
        if logo is None and load_default_logo:
            logo = load_logo()
        self.logo = logo
        self._surface_factory = surface_factory or (lambda width, height: PillowSurface(width, height))

    def render(
        self,
        portrait: Optional[ImageSource],
        variant: str = DEFAULT_VARIANT,
        strict_assets: bool = False,
    ) -> bytes:
        """
        Render one variant to PNG bytes.

        Args:
            portrait: Portrait source, or None for the background alone
            variant: "standard" or "square"
            strict_assets: Raise instead of rendering without the portrait

        Raises:
            UnknownFormatError: No such variant
            AssetLoadError: The portrait is unusable and ``strict_assets`` is set
        """
        spec = get_variant(variant)
        image = self._load_portrait(portrait, strict_assets)
        surface = self._surface_factory(spec.width, spec.height)
        self.paint(surface, spec, image)
        png = surface.to_png()
        logger.info(f"Generated {spec.name} staff profile ({spec.width}x{spec.height}, {len(png)} bytes)")
        return png

    def render_all(self, portrait: Optional[ImageSource], strict_assets: bool = False) -> dict[str, bytes]:
        """Render every variant from one portrait load."""
        image = self._load_portrait(portrait, strict_assets)
        results = {}
        for spec in VARIANTS.values():
            surface = self._surface_factory(spec.width, spec.height)
            self.paint(surface, spec, image)
            results[spec.name] = surface.to_png()
        return results

    def paint(self, surface: DrawingSurface, spec: StaffProfileVariant, portrait: Optional[Image.Image]) -> None:
        surface.fill_linear_gradient((0, spec.height), (spec.width, 0), BACKGROUND_STOPS)
        if portrait is not None:
            self._draw_portrait(surface, spec, portrait)
        if spec.show_logo and self.logo is not None:
            self._draw_logo(surface, spec)

    def _load_portrait(self, source: Optional[ImageSource], strict: bool) -> Optional[Image.Image]:
        if source is None:
            return None
        try:
            image = self.loader.load(source)
        except AssetLoadError as e:
            if strict:
                raise
            logger.warning(f"Portrait unavailable, rendering staff profile without it: {e.message}")
            return None
        if image.width == 0 or image.height == 0:
            logger.warning("Skipping empty portrait image")
            return None
        return image

    def _draw_portrait(self, surface: DrawingSurface, spec: StaffProfileVariant, portrait: Image.Image) -> None:
        scaled_w, scaled_h, x, y = portrait_placement(spec, portrait.size)
        resized = portrait.convert("RGBA").resize((scaled_w, scaled_h), Image.LANCZOS)
        graded = color_grade(resized)

        pad = shadow_padding()
        dx, dy = SHADOW_OFFSET
        surface.draw_image(drop_shadow(graded), x + dx - pad, y + dy - pad)
        surface.draw_image(graded, x, y)

    def _draw_logo(self, surface: DrawingSurface, spec: StaffProfileVariant) -> None:
        logo = self.logo
        if logo.width == 0 or logo.height == 0:
            logger.warning("Skipping empty logo image")
            return
        logo_h = max(1, int(round(logo.height * LOGO_WIDTH / logo.width)))
        white = whiten(logo.convert("RGBA").resize((LOGO_WIDTH, logo_h), Image.LANCZOS))
        surface.draw_image(white, spec.width - LOGO_WIDTH - LOGO_RIGHT_MARGIN, LOGO_TOP)
