"""Font registration and lookup.

Cards use the Akkurat family. When the licensed files are not present in
``assets/fonts`` we fall back to common sans-serif faces, then to Pillow's
bundled default font, so measurement always works.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import ImageFont

from .config import settings
from .utils import get_logger

logger = get_logger(__name__)

BODY = "body"
BOLD = "bold"

# Fallback faces, tried in order after the registered file
_SYSTEM_FALLBACKS = {
    BODY: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/Library/Fonts/Arial.ttf",
        "C:\\Windows\\Fonts\\arial.ttf",
    ],
    BOLD: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/Library/Fonts/Arial Bold.ttf",
        "C:\\Windows\\Fonts\\arialbd.ttf",
    ],
}


@dataclass(frozen=True)
class FontRef:
    """A font family key; the size is chosen at measurement time."""

    family: str = BODY


class FontRegistry:
    """Maps family keys to font files and caches loaded faces per size."""

    def __init__(self, paths: Optional[dict[str, Path]] = None):
        self._paths: dict[str, Path] = dict(paths or {})
        self._cache: dict[tuple[str, int], ImageFont.FreeTypeFont] = {}

    @classmethod
    def from_settings(cls) -> "FontRegistry":
        return cls({BODY: settings.body_font_path, BOLD: settings.bold_font_path})

    def register(self, family: str, path: Path) -> None:
        """Point a family at a font file, dropping any cached faces for it."""
        self._paths[family] = Path(path)
        self._cache = {key: font for key, font in self._cache.items() if key[0] != family}

    def get(self, font: FontRef, size: int) -> ImageFont.FreeTypeFont:
        key = (font.family, size)
        if key not in self._cache:
            self._cache[key] = self._load(font.family, size)
        return self._cache[key]

    def _load(self, family: str, size: int):
        candidates = []
        if family in self._paths:
            candidates.append(str(self._paths[family]))
        candidates.extend(_SYSTEM_FALLBACKS.get(family, _SYSTEM_FALLBACKS[BODY]))

        for path in candidates:
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                logger.debug(f"Font not loadable: {path}")
                continue

        logger.debug(f"No font file for '{family}', using Pillow default at {size}px")
        return ImageFont.load_default(size=size)


_default_registry: Optional[FontRegistry] = None


def default_registry() -> FontRegistry:
    """Process-wide registry built from settings on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FontRegistry.from_settings()
    return _default_registry
