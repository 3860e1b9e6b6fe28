"""Canvas-style linear gradients rendered with numpy."""

from typing import Sequence

import numpy as np
from PIL import Image

from .formats import ColorStop


def linear_gradient(
    size: tuple[int, int],
    start: tuple[float, float],
    end: tuple[float, float],
    stops: Sequence[ColorStop],
) -> Image.Image:
    """
    Render an RGBA layer filled with a linear gradient.

    Each pixel center is projected onto the start->end vector; positions
    before the start take the first stop and positions past the end take the
    last, as with ``CanvasRenderingContext2D.createLinearGradient``.

    Args:
        size: (width, height) of the layer
        start: Gradient start point in layer coordinates
        end: Gradient end point in layer coordinates
        stops: (offset, (r, g, b, alpha 0..1)) pairs, offsets ascending

    Returns:
        RGBA image of the requested size
    """
    width, height = size
    x0, y0 = start
    dx, dy = end[0] - x0, end[1] - y0
    denom = dx * dx + dy * dy

    xs = np.arange(width, dtype=np.float32) + 0.5
    ys = np.arange(height, dtype=np.float32)[:, None] + 0.5
    if denom == 0:
        t = np.zeros((height, width), dtype=np.float32)
    else:
        t = ((xs - x0) * dx + (ys - y0) * dy) / denom
    t = np.clip(t, 0.0, 1.0)

    offsets = [offset for offset, _ in stops]
    layer = np.empty((height, width, 4), dtype=np.float32)
    for channel in range(4):
        scale = 255.0 if channel == 3 else 1.0
        values = [color[channel] * scale for _, color in stops]
        layer[..., channel] = np.interp(t, offsets, values)

    return Image.fromarray(np.rint(layer).astype(np.uint8), "RGBA")
