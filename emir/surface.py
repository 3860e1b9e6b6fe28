"""Drawing surface abstraction and its Pillow implementation.

The compositor only talks to ``DrawingSurface`` so the same layout and
painting code can run against any raster backend:
- Pillow (default, headless)
- Recording fakes in tests
"""

import io
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw

from .exceptions import RenderError
from .fonts import FontRef, FontRegistry, default_registry
from .formats import ColorStop
from .gradients import linear_gradient

Box = tuple[float, float, float, float]


def _rgba(color) -> tuple[int, int, int, int]:
    """Normalize (r, g, b) or (r, g, b, alpha 0..1) to 8-bit RGBA."""
    if len(color) == 3:
        return (int(color[0]), int(color[1]), int(color[2]), 255)
    r, g, b, a = color
    return (int(r), int(g), int(b), int(round(a * 255)))


class DrawingSurface(ABC):
    """Abstract raster surface that a card is painted onto."""

    @property
    @abstractmethod
    def size(self) -> tuple[int, int]:
        """(width, height) in pixels."""
        pass

    @abstractmethod
    def measure_text(self, text: str, font: FontRef, size: int) -> float:
        """Advance width of ``text`` in the given font and size."""
        pass

    @abstractmethod
    def fill_rect(self, box: Box, color) -> None:
        """Fill an (x0, y0, x1, y1) rectangle, blending translucent colors."""
        pass

    def fill_rects(self, boxes: Iterable[Box], color) -> None:
        """Fill several rectangles with one color."""
        for box in boxes:
            self.fill_rect(box, color)

    @abstractmethod
    def fill_linear_gradient(
        self,
        start: tuple[float, float],
        end: tuple[float, float],
        stops: Sequence[ColorStop],
        box: Optional[Box] = None,
    ) -> None:
        """Blend a linear gradient over ``box`` (whole surface when None)."""
        pass

    @abstractmethod
    def draw_text(
        self,
        xy: tuple[float, float],
        text: str,
        font: FontRef,
        size: int,
        color,
        anchor: str = "ls",
    ) -> None:
        """Draw text; ``anchor`` follows Pillow's two-letter anchor codes."""
        pass

    @abstractmethod
    def draw_line(self, start: tuple[float, float], end: tuple[float, float], color, width: int = 1) -> None:
        pass

    @abstractmethod
    def draw_image(self, image: Image.Image, x: float, y: float) -> None:
        """Alpha-composite ``image`` with its top-left corner at (x, y)."""
        pass

    @abstractmethod
    def get_pixel_buffer(self) -> np.ndarray:
        """Copy of the surface as an (height, width, 4) uint8 array."""
        pass

    @abstractmethod
    def to_png(self) -> bytes:
        """Encode the surface as PNG."""
        pass


class PillowSurface(DrawingSurface):
    """RGBA surface backed by a Pillow image."""

    def __init__(self, width: int, height: int, fonts: Optional[FontRegistry] = None):
        try:
            self._image = Image.new("RGBA", (width, height), (0, 0, 0, 255))
        except (ValueError, MemoryError) as e:
            raise RenderError(f"Could not create {width}x{height} surface: {e}") from e
        self._fonts = fonts or default_registry()

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def image(self) -> Image.Image:
        return self._image

    def measure_text(self, text: str, font: FontRef, size: int) -> float:
        return self._fonts.get(font, size).getlength(text)

    def fill_rect(self, box: Box, color) -> None:
        self.fill_rects([box], color)

    def fill_rects(self, boxes: Iterable[Box], color) -> None:
        rgba = _rgba(color)
        pixel_boxes = [b for b in map(self._pixel_box, boxes) if b[2] >= b[0] and b[3] >= b[1]]
        if not pixel_boxes:
            return
        if rgba[3] == 255:
            draw = ImageDraw.Draw(self._image)
            for box in pixel_boxes:
                draw.rectangle(box, fill=rgba)
            return

        layer = Image.new("RGBA", self._image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for box in pixel_boxes:
            draw.rectangle(box, fill=rgba)
        self._image = Image.alpha_composite(self._image, layer)

    def fill_linear_gradient(self, start, end, stops, box=None) -> None:
        if box is None:
            box = (0, 0, *self._image.size)
        x0, y0, x1, y1 = (int(round(v)) for v in box)
        width, height = x1 - x0, y1 - y0
        if width <= 0 or height <= 0:
            return
        local_start = (start[0] - x0, start[1] - y0)
        local_end = (end[0] - x0, end[1] - y0)
        layer = linear_gradient((width, height), local_start, local_end, stops)
        self.draw_image(layer, x0, y0)

    def draw_text(self, xy, text, font, size, color, anchor="ls") -> None:
        draw = ImageDraw.Draw(self._image)
        draw.text(xy, text, font=self._fonts.get(font, size), fill=_rgba(color), anchor=anchor)

    def draw_line(self, start, end, color, width=1) -> None:
        draw = ImageDraw.Draw(self._image)
        draw.line([start, end], fill=_rgba(color), width=width)

    def draw_image(self, image: Image.Image, x: float, y: float) -> None:
        # paste() accepts negative offsets, alpha_composite(dest=...) does not
        layer = Image.new("RGBA", self._image.size, (0, 0, 0, 0))
        layer.paste(image.convert("RGBA"), (int(round(x)), int(round(y))))
        self._image = Image.alpha_composite(self._image, layer)

    def get_pixel_buffer(self) -> np.ndarray:
        return np.array(self._image, dtype=np.uint8)

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self._image.convert("RGB").save(buffer, format="PNG")
        except OSError as e:
            raise RenderError(f"PNG encoding failed: {e}") from e
        return buffer.getvalue()

    @staticmethod
    def _pixel_box(box: Box) -> tuple[int, int, int, int]:
        # Pillow rectangles are inclusive; canvas fillRect is not
        x0, y0, x1, y1 = box
        return (int(round(x0)), int(round(y0)), int(round(x1)) - 1, int(round(y1)) - 1)
