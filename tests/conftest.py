"""
Pytest configuration and fixtures for EMIR tests
"""
import io

import numpy as np
import pytest
from PIL import Image

from emir.surface import DrawingSurface

# Fixed advance per character, as a fraction of the font size
CHAR_WIDTH_RATIO = 0.35


def fake_measure(text, font, size):
    """Monospace stand-in for real font metrics."""
    return len(text) * size * CHAR_WIDTH_RATIO


class RecordingSurface(DrawingSurface):
    """Surface that records every drawing call instead of rasterizing."""

    def __init__(self, width, height):
        self._size = (width, height)
        self.calls = []

    @property
    def size(self):
        return self._size

    def measure_text(self, text, font, size):
        return fake_measure(text, font, size)

    def fill_rect(self, box, color):
        self.calls.append(("fill_rect", box, color))

    def fill_rects(self, boxes, color):
        self.calls.append(("fill_rects", list(boxes), color))

    def fill_linear_gradient(self, start, end, stops, box=None):
        self.calls.append(("gradient", start, end, stops))

    def draw_text(self, xy, text, font, size, color, anchor="ls"):
        self.calls.append(("text", xy, text, font, size, color, anchor))

    def draw_line(self, start, end, color, width=1):
        self.calls.append(("line", start, end, color, width))

    def draw_image(self, image, x, y):
        self.calls.append(("image", image.size, x, y))

    def get_pixel_buffer(self):
        return np.zeros((self._size[1], self._size[0], 4), dtype=np.uint8)

    def to_png(self):
        return b"\x89PNG\r\n\x1a\n"

    def kinds(self):
        return [call[0] for call in self.calls]


def make_png(size=(40, 30), color=(200, 120, 60)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def measure():
    return fake_measure


@pytest.fixture
def recording_surface_factory():
    return lambda width, height: RecordingSurface(width, height)


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def portrait_image():
    return Image.new("RGBA", (400, 600), (180, 140, 120, 255))
