import numpy as np
import pytest
from PIL import Image

from emir.formats import INSTAGRAM, LINKEDIN_POST, KernelWeights
from emir.image_enhancer import enhance, legibility_shade


def _image(array):
    return Image.fromarray(np.asarray(array, dtype=np.uint8), "RGBA")


def _random_image(width, height, seed=7):
    rng = np.random.default_rng(seed)
    return _image(rng.integers(0, 256, size=(height, width, 4)))


def test_enhance_uniform_image_is_unchanged():
    # 3.0 + 4 * -0.5 == 1, so a flat field maps to itself
    src = _image(np.full((6, 6, 4), 100))
    out = np.asarray(enhance(src, LINKEDIN_POST.kernel))
    assert (out == 100).all()


def test_enhance_preserves_border_pixels():
    src = _random_image(12, 9)
    out = np.asarray(enhance(src, INSTAGRAM.kernel))
    original = np.asarray(src)

    assert (out[0] == original[0]).all()
    assert (out[-1] == original[-1]).all()
    assert (out[:, 0] == original[:, 0]).all()
    assert (out[:, -1] == original[:, -1]).all()


def test_enhance_preserves_alpha():
    src = _random_image(10, 10, seed=3)
    out = np.asarray(enhance(src, LINKEDIN_POST.kernel))
    assert (out[..., 3] == np.asarray(src)[..., 3]).all()


def test_enhance_applies_cross_kernel():
    pixels = np.zeros((3, 3, 4))
    pixels[..., 3] = 255
    pixels[1, 1, :3] = 50
    pixels[0, 1, :3] = 10  # above
    pixels[1, 0, :3] = 20  # left

    out = np.asarray(enhance(_image(pixels), KernelWeights(center=3.0, edge=-0.5)))

    # 3 * 50 - 0.5 * (10 + 20) = 135
    assert tuple(out[1, 1, :3]) == (135, 135, 135)


def test_enhance_ignores_diagonal_neighbours():
    pixels = np.zeros((3, 3, 4))
    pixels[..., 3] = 255
    pixels[1, 1, :3] = 40
    pixels[0, 0, :3] = 255
    pixels[2, 2, :3] = 255

    out = np.asarray(enhance(_image(pixels), KernelWeights(center=2.0, edge=-0.25)))
    assert tuple(out[1, 1, :3]) == (80, 80, 80)


def test_enhance_clamps_results():
    bright = np.zeros((3, 3, 4))
    bright[..., 3] = 255
    bright[1, 1, :3] = 200
    out = np.asarray(enhance(_image(bright), LINKEDIN_POST.kernel))
    assert tuple(out[1, 1, :3]) == (255, 255, 255)

    dark = np.full((3, 3, 4), 200)
    dark[1, 1, :3] = 0
    out = np.asarray(enhance(_image(dark), LINKEDIN_POST.kernel))
    assert tuple(out[1, 1, :3]) == (0, 0, 0)


def test_enhance_does_not_modify_input():
    src = _random_image(8, 8, seed=11)
    before = np.asarray(src).copy()
    enhance(src, LINKEDIN_POST.kernel)
    assert (np.asarray(src) == before).all()


@pytest.mark.parametrize("size", [(1, 1), (2, 5), (5, 2)])
def test_enhance_tiny_images_pass_through(size):
    src = _random_image(*size)
    out = enhance(src, LINKEDIN_POST.kernel)
    assert out.size == src.size
    assert (np.asarray(out) == np.asarray(src)).all()


def test_enhance_converts_rgb_input():
    src = Image.new("RGB", (5, 5), (10, 20, 30))
    out = enhance(src, LINKEDIN_POST.kernel)
    assert out.mode == "RGBA"
    assert out.getpixel((2, 2)) == (10, 20, 30, 255)


def test_legibility_shade_fades_toward_center():
    shade = np.asarray(legibility_shade((200, 100)))

    bottom_left = shade[-1, 0, 3]
    center = shade[50, 100, 3]
    top_right = shade[0, -1, 3]

    assert shade.shape == (100, 200, 4)
    assert (shade[..., :3] == 0).all()
    assert bottom_left > 170
    assert center < 5
    assert top_right == 0
