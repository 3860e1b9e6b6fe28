"""Quote text fitting: font-size search and greedy word wrap."""

from typing import Callable, Optional

from .exceptions import CardValidationError
from .fonts import FontRef
from .formats import LayoutSpec
from .models import LayoutLine, ResolvedLayout
from .utils import get_logger

logger = get_logger(__name__)

# (text, font, size) -> advance width in pixels
MeasureFn = Callable[[str, FontRef, int], float]


def wrap_words(text: str, max_width: float, measure: Callable[[str], float]) -> list[str]:
    """
    Greedily wrap ``text`` into lines narrower than ``max_width``.

    A word that is wider than the box on its own still gets a line of its
    own; wrapping never drops or duplicates words.
    """
    lines = []
    current_line = ""
    for word in text.split():
        if not current_line:
            current_line = word
            continue
        test_line = f"{current_line} {word}"
        if measure(test_line) < max_width:
            current_line = test_line
        else:
            lines.append(current_line)
            current_line = word
    if current_line:
        lines.append(current_line)
    return lines


def _layout_at(text: str, spec: LayoutSpec, font: FontRef, size: int, measure: MeasureFn) -> ResolvedLayout:
    wrapped = wrap_words(text, spec.text_box_width, lambda s: measure(s, font, size))
    line_height = spec.line_height_for(size)
    total = len(wrapped) * line_height
    return ResolvedLayout(
        font_size=size,
        line_height=line_height,
        lines=tuple(LayoutLine(text=line, x_offset=spec.left_padding) for line in wrapped),
        total_text_height=total,
        overflows=total > spec.text_box_max_height,
    )


def resolve(
    text: str,
    spec: LayoutSpec,
    font: FontRef,
    measure: MeasureFn,
    font_size: Optional[int] = None,
) -> ResolvedLayout:
    """
    Choose a font size and line breaks for a quote.

    Args:
        text: Quote text, already upper-cased by the caller
        spec: Layout of the target card format
        font: Font family used for the quote
        measure: Text measurement capability of the drawing surface
        font_size: Fixed size; skips the search and only wraps

    Returns:
        ResolvedLayout at the largest size in [font_size_min, font_size_max]
        whose wrapped height fits ``spec.text_box_max_height``, or at
        ``font_size_min`` (flagged as overflowing) when nothing fits

    Raises:
        CardValidationError: If the text is empty
    """
    if not text or not text.strip():
        raise CardValidationError("Quote text must not be empty")

    if font_size is not None:
        if font_size <= 0:
            raise CardValidationError(f"Font size must be positive, got {font_size}")
        logger.debug(f"Using fixed font size: {font_size}px")
        return _layout_at(text, spec, font, font_size, measure)

    best: Optional[ResolvedLayout] = None
    low, high = spec.font_size_min, spec.font_size_max
    while low <= high:
        size = (low + high) // 2
        candidate = _layout_at(text, spec, font, size, measure)
        logger.debug(
            f"Testing font size {size}px - Height: {candidate.total_text_height}px, "
            f"Max: {spec.text_box_max_height}px"
        )
        if candidate.total_text_height <= spec.text_box_max_height:
            best = candidate
            low = size + 1
        else:
            high = size - 1

    if best is None:
        logger.warning(
            f"Quote overflows text box even at {spec.font_size_min}px; rendering at minimum size"
        )
        return _layout_at(text, spec, font, spec.font_size_min, measure)

    logger.debug(f"Selected optimal font size: {best.font_size}px")
    return best
