"""Glyph and glyph-set data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

SET_PIXEL = "#"


@dataclass(frozen=True)
class Glyph:
    """A ``height`` x ``width`` bit matrix; True bits are drawn."""

    width: int
    height: int
    bits: tuple[tuple[bool, ...], ...]

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> Glyph:
        """Build a glyph from strings where ``#`` marks a set pixel."""
        matrix = tuple(tuple(ch == SET_PIXEL for ch in row) for row in rows)
        width = max((len(row) for row in matrix), default=0)
        padded = tuple(row + (False,) * (width - len(row)) for row in matrix)
        return cls(width=width, height=len(padded), bits=padded)


@dataclass(frozen=True)
class GlyphSet:
    """Immutable font or icon set."""

    name: str
    glyph_width: int
    glyph_height: int
    glyphs: Mapping[str, Glyph] = field(default_factory=dict)
    icons: Mapping[str, Glyph] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "glyphs", MappingProxyType(dict(self.glyphs)))
        object.__setattr__(self, "icons", MappingProxyType(dict(self.icons)))


def build_glyph_set(
    name: str,
    glyph_width: int,
    glyph_height: int,
    glyph_rows: Mapping[str, Iterable[str]] | None = None,
    icon_rows: Mapping[str, Iterable[str]] | None = None,
) -> GlyphSet:
    """Create a glyph set from row-string tables."""
    glyphs = {ch: Glyph.from_rows(rows) for ch, rows in (glyph_rows or {}).items()}
    icons = {key: Glyph.from_rows(rows) for key, rows in (icon_rows or {}).items()}
    return GlyphSet(name=name, glyph_width=glyph_width, glyph_height=glyph_height, glyphs=glyphs, icons=icons)


def get_glyph(glyph_set: GlyphSet | None, char: str) -> Glyph | None:
    """Look up a character; no fallback substitution."""
    if glyph_set is None:
        return None
    return glyph_set.glyphs.get(char)


def get_icon(glyph_set: GlyphSet | None, name: str) -> Glyph | None:
    if glyph_set is None:
        return None
    return glyph_set.icons.get(name)


__all__ = ["Glyph", "GlyphSet", "build_glyph_set", "get_glyph", "get_icon"]
