"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GlyphSet:
    name: str
    glyphs: str
    open: str = "["
    close: str = "]"
    unknown: str = "?"

    @property
    def levels(self) -> int:
        return len(self.glyphs)

    def glyph(self, level: int | None) -> str:
        if level is None:
            return self.unknown
        return self.glyphs[max(0, min(self.levels - 1, level))]

    def bar(self, levels: list[int | None]) -> str:
        return self.open + "".join(self.glyph(lv) for lv in levels) + self.close


@dataclass(frozen=True)
class ReportSection:
    title: str
    lines: list[str] = field(default_factory=list)

    def text(self) -> str:
        return "\n".join(self.lines)
