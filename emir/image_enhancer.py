"""Portrait sharpening and legibility shading."""

import numpy as np
from PIL import Image

from .formats import LEGIBILITY_STOPS, KernelWeights
from .gradients import linear_gradient


def enhance(bitmap: Image.Image, kernel: KernelWeights) -> Image.Image:
    """
    Sharpen a portrait with a 3x3 cross-shaped convolution.

    The kernel runs over the R, G and B channels; alpha is copied unchanged
    and the outermost rows and columns are left as-is. Results are rounded
    and clamped to 0..255.

    Args:
        bitmap: Source image (any mode; converted to RGBA)
        kernel: Center and edge weights of the card format

    Returns:
        New RGBA image; ``bitmap`` is not modified
    """
    src = np.asarray(bitmap.convert("RGBA"), dtype=np.float32)
    out = src.copy()
    height, width = src.shape[:2]
    if height < 3 or width < 3:
        return Image.fromarray(out.astype(np.uint8), "RGBA")

    rgb = src[..., :3]
    inner = out[1:-1, 1:-1, :3]
    np.multiply(rgb[1:-1, 1:-1], kernel.center, out=inner)
    inner += (rgb[:-2, 1:-1] + rgb[2:, 1:-1] + rgb[1:-1, :-2] + rgb[1:-1, 2:]) * kernel.edge

    np.rint(out, out=out)
    np.clip(out, 0, 255, out=out)
    return Image.fromarray(out.astype(np.uint8), "RGBA")


def legibility_shade(size: tuple[int, int]) -> Image.Image:
    """
    Diagonal black shade for drawing over an enhanced portrait.

    Opaque-ish black at the bottom-left corner fading to fully transparent
    at the image center, so quote text stays readable where the portrait
    overlaps it.
    """
    width, height = size
    return linear_gradient(
        (width, height),
        start=(0, height),
        end=(width * 0.5, height * 0.5),
        stops=LEGIBILITY_STOPS,
    )
