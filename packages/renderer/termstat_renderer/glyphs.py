"""Built-in glyph sets for level bars."""

from __future__ import annotations

from .models import GlyphSet

DEFAULT_GLYPH_SET_NAME = "ascii"

GLYPH_SETS: dict[str, GlyphSet] = {
    "ascii": GlyphSet(name="ascii", glyphs="_-^"),
    "ascii8": GlyphSet(name="ascii8", glyphs=" .:-=+*#"),
    "blocks": GlyphSet(name="blocks", glyphs="▁▂▃▄▅▆▇█"),
}


def list_glyph_sets() -> list[str]:
    return sorted(GLYPH_SETS.keys())


def get_glyph_set(name: str | None) -> GlyphSet:
    if not name:
        return GLYPH_SETS[DEFAULT_GLYPH_SET_NAME]
    return GLYPH_SETS.get(name, GLYPH_SETS[DEFAULT_GLYPH_SET_NAME])
