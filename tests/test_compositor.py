import numpy as np
import pytest
from PIL import Image

from emir.compositor import (
    NAME_FONT,
    QUOTE_FONT,
    QUOTE_MARK,
    SceneCompositor,
    is_highlighted,
    plan_text_runs,
    whiten,
)
from emir.formats import (
    ACCENT_COLOR,
    HAIRLINE_SPACING,
    INSTAGRAM,
    LINKEDIN_POST,
    PRIMARY_TEXT_COLOR,
)
from emir.layout_resolver import resolve
from emir.models import CardContent


def _content(**overrides):
    fields = dict(
        quote_text="Hello World",
        attribution_name="Jane Doe",
        attribution_title="Chief Executive",
        attribution_org="EMIR",
        highlight_terms=("WORLD",),
    )
    fields.update(overrides)
    return CardContent(**fields)


def test_is_highlighted_matches_case_insensitively():
    assert is_highlighted("WORLD", ["world"])
    assert not is_highlighted("HELLO", ["WORLD"])


def test_is_highlighted_matches_substrings_both_ways():
    assert is_highlighted("GROWTH,", ["GROWTH"])
    assert is_highlighted("AI", ["AIR"])


def test_is_highlighted_without_terms():
    assert not is_highlighted("ANYTHING", [])


def test_plan_text_runs_single_line(measure):
    spec = LINKEDIN_POST.layout
    layout = resolve("HELLO WORLD", spec, QUOTE_FONT, measure)

    runs = plan_text_runs(layout, spec, ["WORLD"], measure)

    assert [run.text for run in runs] == [QUOTE_MARK, "HELLO", "WORLD", QUOTE_MARK]
    assert {run.y for run in runs} == {spec.quote_top}
    assert runs[1].color == PRIMARY_TEXT_COLOR
    assert runs[2].color == ACCENT_COLOR


def test_plan_text_runs_advances_by_word_and_space(measure):
    spec = LINKEDIN_POST.layout
    layout = resolve("HELLO WORLD", spec, QUOTE_FONT, measure)
    size = layout.font_size

    mark, hello, world, closing = plan_text_runs(layout, spec, [], measure)

    assert mark.x == spec.left_padding
    assert hello.x == mark.x + measure(QUOTE_MARK, QUOTE_FONT, size)
    assert world.x == pytest.approx(hello.x + measure("HELLO", QUOTE_FONT, size) + measure(" ", QUOTE_FONT, size))
    assert closing.x == world.x + measure("WORLD", QUOTE_FONT, size)


def test_plan_text_runs_multiline_positions(measure):
    spec = LINKEDIN_POST.layout
    layout = resolve("HELLO WORLD AGAIN", spec, QUOTE_FONT, measure, font_size=400)
    assert len(layout.lines) > 1

    runs = plan_text_runs(layout, spec, [], measure)
    words = [run for run in runs if run.text != QUOTE_MARK]
    ys = sorted({run.y for run in words})

    assert ys[0] == spec.quote_top
    assert ys[1] - ys[0] == pytest.approx(layout.line_height)
    # Closing mark sits on the last line
    assert runs[-1].text == QUOTE_MARK
    assert runs[-1].y == ys[-1]


def test_plan_text_runs_uses_format_opening_mark_size(measure):
    spec = INSTAGRAM.layout
    layout = resolve("HELLO", spec, QUOTE_FONT, measure)
    runs = plan_text_runs(layout, spec, [], measure)

    assert runs[0].font_size == spec.opening_quote_size
    assert runs[-1].font_size == layout.font_size


def test_composite_layer_order(measure, recording_surface_factory, portrait_image):
    compositor = SceneCompositor(surface_factory=recording_surface_factory)
    content = _content()
    layout = resolve(content.upper_quote, LINKEDIN_POST.layout, QUOTE_FONT, measure)
    logo = Image.new("RGBA", (200, 50), (0, 0, 0, 255))

    surface = compositor.composite(content, layout, LINKEDIN_POST, portrait=portrait_image, logo=logo)
    kinds = surface.kinds()

    assert kinds[:4] == ["gradient", "gradient", "gradient", "fill_rects"]
    first_line = kinds.index("line")
    assert set(kinds[4:first_line]) == {"text"}
    assert kinds[first_line + 1:first_line + 4] == ["text", "text", "text"]
    assert kinds[-3:] == ["image", "image", "image"]


def test_composite_hairlines_cover_width(measure, recording_surface_factory):
    compositor = SceneCompositor(surface_factory=recording_surface_factory)
    content = _content()
    layout = resolve(content.upper_quote, LINKEDIN_POST.layout, QUOTE_FONT, measure)

    surface = compositor.composite(content, layout, LINKEDIN_POST)
    _, boxes, color = next(call for call in surface.calls if call[0] == "fill_rects")

    assert len(boxes) == 1920 // HAIRLINE_SPACING
    assert boxes[1] == (HAIRLINE_SPACING, 0, HAIRLINE_SPACING + 1, 1080)
    assert color[:3] == ACCENT_COLOR


def test_composite_separator_follows_quote(measure, recording_surface_factory):
    spec = LINKEDIN_POST.layout
    compositor = SceneCompositor(surface_factory=recording_surface_factory)
    content = _content()
    layout = resolve(content.upper_quote, spec, QUOTE_FONT, measure)

    surface = compositor.composite(content, layout, LINKEDIN_POST)
    _, start, end, color, _width = next(call for call in surface.calls if call[0] == "line")

    expected_y = spec.quote_top + layout.total_text_height
    assert start == (spec.left_padding, expected_y)
    assert end == (spec.left_padding + spec.separator_width, expected_y)
    assert color == ACCENT_COLOR


def test_composite_attribution_lines(measure, recording_surface_factory):
    spec = LINKEDIN_POST.layout
    compositor = SceneCompositor(surface_factory=recording_surface_factory)
    content = _content(attribution_org="")
    layout = resolve(content.upper_quote, spec, QUOTE_FONT, measure)

    surface = compositor.composite(content, layout, LINKEDIN_POST)
    attribution = [call for call in surface.calls if call[0] == "text" and call[6] == "la"]

    assert [call[2] for call in attribution] == ["JANE DOE", "CHIEF EXECUTIVE"]
    name_call, title_call = attribution
    assert name_call[3] == NAME_FONT
    assert name_call[4] == spec.name_font_size
    assert title_call[1][1] - name_call[1][1] == pytest.approx(spec.title_offset)
    assert title_call[5] == ACCENT_COLOR


def test_composite_portrait_placement(measure, recording_surface_factory, portrait_image):
    spec = LINKEDIN_POST.layout
    compositor = SceneCompositor(surface_factory=recording_surface_factory)
    content = _content()
    layout = resolve(content.upper_quote, spec, QUOTE_FONT, measure)

    surface = compositor.composite(content, layout, LINKEDIN_POST, portrait=portrait_image)
    portrait_call, shade_call = [call for call in surface.calls if call[0] == "image"]

    # 400x600 scaled to 70% of 1920 wide
    assert portrait_call[1] == (1344, 2016)
    assert portrait_call[2] == 1920 - 1344 + 120
    assert portrait_call[3] == 1080 - 2016 * 0.8
    assert shade_call[1:] == portrait_call[1:]


def test_composite_skips_missing_portrait_and_logo(measure, recording_surface_factory):
    compositor = SceneCompositor(surface_factory=recording_surface_factory)
    content = _content()
    layout = resolve(content.upper_quote, LINKEDIN_POST.layout, QUOTE_FONT, measure)

    surface = compositor.composite(content, layout, LINKEDIN_POST)
    assert "image" not in surface.kinds()


def test_composite_on_pillow_surface(measure):
    compositor = SceneCompositor()
    content = _content()
    surface = compositor.new_surface(LINKEDIN_POST.layout)
    layout = resolve(content.upper_quote, LINKEDIN_POST.layout, QUOTE_FONT, surface.measure_text)

    compositor.composite(content, layout, LINKEDIN_POST, surface=surface)
    pixels = surface.get_pixel_buffer()

    assert surface.size == (1920, 1080)
    assert pixels.shape == (1080, 1920, 4)
    # Dark background, fully opaque
    assert (pixels[..., 3] == 255).all()
    assert pixels[5, 5, :3].max() < 60


def test_whiten_keeps_alpha():
    src = np.zeros((2, 2, 4), dtype=np.uint8)
    src[0, 0] = (10, 20, 30, 200)
    src[1, 1] = (90, 90, 90, 0)

    out = np.asarray(whiten(Image.fromarray(src, "RGBA")))

    assert tuple(out[0, 0]) == (255, 255, 255, 200)
    assert tuple(out[1, 1]) == (90, 90, 90, 0)
