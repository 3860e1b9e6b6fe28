"""Value types passed between the layout, compositing and enhancing stages."""

from dataclasses import dataclass, field
from typing import Optional, Union

from .exceptions import CardValidationError

# Raw image bytes, an http(s) URL, or a local file path
ImageSource = Union[bytes, str]


def parse_highlight_terms(raw: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated highlight field into upper-cased terms."""
    if not raw:
        return ()
    terms = (part.strip().upper() for part in raw.split(","))
    return tuple(term for term in terms if term)


def clamp_text(text: Optional[str], limit: int) -> str:
    """Trim text and cut it to ``limit`` characters, ending in '...' when cut."""
    if not text:
        return ""
    trimmed = text.strip()
    if len(trimmed) <= limit:
        return trimmed
    return trimmed[: limit - 3] + "..."


@dataclass(frozen=True)
class CardContent:
    """Everything a caller supplies for one quote card."""

    quote_text: str
    attribution_name: str = ""
    attribution_title: str = ""
    attribution_org: str = ""
    highlight_terms: tuple[str, ...] = field(default_factory=tuple)
    portrait: Optional[ImageSource] = None

    @classmethod
    def from_highlight_string(
        cls,
        quote_text: str,
        attribution_name: str = "",
        attribution_title: str = "",
        attribution_org: str = "",
        highlight: Optional[str] = None,
        portrait: Optional[ImageSource] = None,
    ) -> "CardContent":
        """Build content from form-style input with a comma-separated highlight field."""
        return cls(
            quote_text=quote_text,
            attribution_name=attribution_name,
            attribution_title=attribution_title,
            attribution_org=attribution_org,
            highlight_terms=parse_highlight_terms(highlight),
            portrait=portrait or None,
        )

    def validate(self) -> None:
        """Reject content that cannot produce a card.

        Raises:
            CardValidationError: If the quote or the attribution name is blank
        """
        if not self.quote_text or not self.quote_text.strip():
            raise CardValidationError("Missing or empty 'quoteContent' field")
        if not self.attribution_name or not self.attribution_name.strip():
            raise CardValidationError("Missing or empty 'name' field")

    @property
    def upper_quote(self) -> str:
        return self.quote_text.upper()

    @property
    def upper_terms(self) -> tuple[str, ...]:
        return tuple(term.upper() for term in self.highlight_terms if term)

    @property
    def attribution_lines(self) -> tuple[str, str, str]:
        return (
            self.attribution_name.upper(),
            self.attribution_title.upper(),
            self.attribution_org.upper(),
        )


@dataclass(frozen=True)
class LayoutLine:
    """One wrapped line of quote text."""

    text: str
    x_offset: int

    @property
    def words(self) -> list[str]:
        return self.text.split()


@dataclass(frozen=True)
class ResolvedLayout:
    """Font size and line breaks chosen for a quote."""

    font_size: int
    line_height: int
    lines: tuple[LayoutLine, ...]
    total_text_height: int
    overflows: bool = False

    @property
    def words(self) -> list[str]:
        return [word for line in self.lines for word in line.words]


@dataclass(frozen=True)
class TextRun:
    """A single word (or quote mark) placed on the canvas."""

    text: str
    x: float
    y: float
    color: tuple[int, int, int]
    font_size: int
