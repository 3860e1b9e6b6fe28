import pytest

from emir.exceptions import UnknownFormatError
from emir.formats import (
    DEFAULT_FORMAT,
    FORMATS,
    LINKEDIN_POST,
    KernelWeights,
    LayoutSpec,
    PortraitPlacement,
    get_format,
)


@pytest.mark.parametrize("name", sorted(FORMATS))
def test_format_invariants(name):
    spec = FORMATS[name].layout
    assert spec.font_size_min <= spec.font_size_max
    assert spec.text_box_width <= spec.canvas_width - spec.left_padding - spec.right_padding
    assert spec.text_box_max_height <= spec.canvas_height
    assert spec.line_height_multiplier > 0


def test_expected_format_table():
    assert sorted(FORMATS) == ["instagram", "linkedin-post", "linkedin-preview", "youtube-thumbnail"]
    assert DEFAULT_FORMAT == "linkedin-post"
    assert LINKEDIN_POST.layout.size == (1920, 1080)
    assert FORMATS["instagram"].layout.size == (1080, 1350)
    assert FORMATS["linkedin-preview"].kernel == KernelWeights(center=2.0, edge=-0.25)


def test_get_format_is_case_insensitive():
    assert get_format(" LinkedIn-Post ") is LINKEDIN_POST


def test_get_format_unknown_lists_available():
    with pytest.raises(UnknownFormatError) as excinfo:
        get_format("tiktok")
    assert excinfo.value.details["available"] == sorted(FORMATS)
    assert "tiktok" in excinfo.value.message


def test_kernel_matrix_is_cross_shaped():
    assert KernelWeights(center=3.0, edge=-0.5).matrix == (
        (0.0, -0.5, 0.0),
        (-0.5, 3.0, -0.5),
        (0.0, -0.5, 0.0),
    )


def test_line_height_rounds_up():
    assert LINKEDIN_POST.layout.line_height_for(78) == 102
    assert LINKEDIN_POST.layout.line_height_for(42) == 55


def _spec(**overrides):
    fields = dict(
        canvas_width=1000,
        canvas_height=500,
        text_box_width=600,
        text_box_max_height=200,
        font_size_min=20,
        font_size_max=40,
        line_height_multiplier=1.3,
        left_padding=50,
        right_padding=50,
    )
    fields.update(overrides)
    return LayoutSpec(**fields)


def test_layout_spec_rejects_inverted_font_range():
    with pytest.raises(ValueError):
        _spec(font_size_min=50, font_size_max=40)


def test_layout_spec_rejects_text_box_wider_than_canvas():
    with pytest.raises(ValueError):
        _spec(text_box_width=950)


def test_portrait_placement_rejects_unknown_fit():
    with pytest.raises(ValueError):
        PortraitPlacement(fit="cover")
