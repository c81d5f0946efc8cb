"""Renderer package for termstat text reports."""

from .glyphs import DEFAULT_GLYPH_SET_NAME, GLYPH_SETS, get_glyph_set, list_glyph_sets
from .models import GlyphSet, ReportSection
from .report import SECTION_ORDER, ReportRenderer, format_duration

__all__ = [
    "DEFAULT_GLYPH_SET_NAME",
    "GLYPH_SETS",
    "GlyphSet",
    "ReportRenderer",
    "ReportSection",
    "SECTION_ORDER",
    "format_duration",
    "get_glyph_set",
    "list_glyph_sets",
]
