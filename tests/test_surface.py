import io

import numpy as np
import pytest
from PIL import Image

from emir.exceptions import RenderError
from emir.fonts import BODY, FontRef, FontRegistry
from emir.gradients import linear_gradient
from emir.surface import PillowSurface

BLACK_TO_WHITE = ((0.0, (0, 0, 0, 1.0)), (1.0, (255, 255, 255, 1.0)))


def test_linear_gradient_interpolates_along_vector():
    layer = np.asarray(linear_gradient((10, 1), (0, 0), (10, 0), BLACK_TO_WHITE))

    reds = layer[0, :, 0]
    assert reds[0] == 13  # t = 0.05
    assert reds[-1] == 242  # t = 0.95
    assert (np.diff(reds.astype(int)) > 0).all()
    assert (layer[..., 3] == 255).all()


def test_linear_gradient_clamps_outside_vector():
    layer = np.asarray(linear_gradient((20, 1), (5, 0), (10, 0), BLACK_TO_WHITE))
    assert layer[0, 0, 0] == 0
    assert layer[0, -1, 0] == 255


def test_linear_gradient_degenerate_vector_uses_first_stop():
    layer = np.asarray(linear_gradient((4, 4), (2, 2), (2, 2), BLACK_TO_WHITE))
    assert (layer[..., :3] == 0).all()


def test_fill_rect_is_end_exclusive():
    surface = PillowSurface(10, 10)
    surface.fill_rect((0, 0, 5, 5), (255, 0, 0))
    pixels = surface.get_pixel_buffer()

    assert tuple(pixels[4, 4]) == (255, 0, 0, 255)
    assert tuple(pixels[5, 5]) == (0, 0, 0, 255)


def test_fill_rect_blends_translucent_color():
    surface = PillowSurface(4, 4)
    surface.fill_rect((0, 0, 4, 4), (255, 255, 255, 0.5))
    red, _, _, alpha = surface.get_pixel_buffer()[2, 2]

    assert 126 <= red <= 129
    assert alpha == 255


def test_fill_rects_ignores_empty_boxes():
    surface = PillowSurface(4, 4)
    surface.fill_rects([(2, 0, 2, 4)], (255, 255, 255))
    assert (surface.get_pixel_buffer()[..., :3] == 0).all()


def test_draw_image_accepts_negative_offsets():
    surface = PillowSurface(10, 10)
    surface.draw_image(Image.new("RGBA", (4, 4), (0, 255, 0, 255)), -2, -2)
    pixels = surface.get_pixel_buffer()

    assert tuple(pixels[1, 1]) == (0, 255, 0, 255)
    assert tuple(pixels[2, 2]) == (0, 0, 0, 255)


def test_measure_text_grows_with_size():
    surface = PillowSurface(10, 10, fonts=FontRegistry())
    font = FontRef(BODY)
    assert surface.measure_text("HELLO", font, 40) > surface.measure_text("HELLO", font, 20) > 0


def test_to_png_encodes_rgb():
    surface = PillowSurface(12, 8)
    decoded = Image.open(io.BytesIO(surface.to_png()))
    assert decoded.format == "PNG"
    assert decoded.mode == "RGB"
    assert decoded.size == (12, 8)


def test_invalid_surface_size_raises():
    with pytest.raises(RenderError):
        PillowSurface(-1, 10)


def test_font_registry_caches_and_falls_back(tmp_path):
    registry = FontRegistry({BODY: tmp_path / "missing.otf"})
    font = FontRef(BODY)
    assert registry.get(font, 30) is registry.get(font, 30)
