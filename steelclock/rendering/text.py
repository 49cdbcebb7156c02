"""Glyph rasterization, text measurement and alignment."""

from __future__ import annotations

from steelclock.rendering.glyphs import Glyph, GlyphSet, get_glyph
from steelclock.rendering.surface import ON, Surface

CHAR_GAP = 1

H_ALIGNMENTS = ("left", "center", "right")
V_ALIGNMENTS = ("top", "middle", "bottom")
V_ALIGN_ALIASES = {"center": "middle"}


def normalize_v_align(value: str) -> str:
    """Map alias names onto the canonical vertical alignments."""
    return V_ALIGN_ALIASES.get(value, value)


def measure_text(glyph_set: GlyphSet | None, text: str) -> int:
    """Width in pixels of ``text``; absent characters contribute nothing."""
    width = 0
    drawn = 0
    for char in text:
        glyph = get_glyph(glyph_set, char)
        if glyph is None:
            continue
        width += glyph.width + CHAR_GAP
        drawn += 1
    if drawn == 0:
        return 0
    return width - CHAR_GAP


def text_height(glyph_set: GlyphSet | None) -> int:
    if glyph_set is None:
        return 0
    return glyph_set.glyph_height


def draw_glyph(surface: Surface, glyph: Glyph, x: int, y: int, intensity: int = ON) -> None:
    """Write ``intensity`` at every set bit; clear bits are left untouched."""
    for row_index, row in enumerate(glyph.bits):
        for col_index, bit in enumerate(row):
            if bit:
                surface.set_pixel(x + col_index, y + row_index, intensity)


def draw_text(
    surface: Surface,
    text: str,
    x: int,
    y: int,
    glyph_set: GlyphSet | None,
    intensity: int = ON,
) -> int:
    """Draw ``text`` left to right and return the width it occupies."""
    cursor = x
    for char in text:
        glyph = get_glyph(glyph_set, char)
        if glyph is None:
            continue
        draw_glyph(surface, glyph, cursor, y, intensity)
        cursor += glyph.width + CHAR_GAP
    if cursor == x:
        return 0
    return cursor - x - CHAR_GAP


def aligned_origin(
    text_width: int,
    text_h: int,
    box_width: int,
    box_height: int,
    h_align: str,
    v_align: str,
    padding: int = 0,
) -> tuple[int, int]:
    """Top-left corner that aligns a text box inside a padded container."""
    content_w = box_width - 2 * padding
    content_h = box_height - 2 * padding
    v_align = normalize_v_align(v_align)

    if h_align == "left":
        x = padding
    elif h_align == "right":
        x = padding + content_w - text_width
    elif h_align == "center":
        x = padding + (content_w - text_width) // 2
    else:
        raise ValueError(f"Unknown horizontal alignment '{h_align}'")

    if v_align == "top":
        y = padding
    elif v_align == "bottom":
        y = padding + content_h - text_h
    elif v_align == "middle":
        y = padding + (content_h - text_h) // 2
    else:
        raise ValueError(f"Unknown vertical alignment '{v_align}'")
    return x, y


def draw_aligned_text(
    surface: Surface,
    text: str,
    glyph_set: GlyphSet | None,
    h_align: str = "center",
    v_align: str = "middle",
    padding: int = 0,
    intensity: int = ON,
) -> int:
    """Draw ``text`` aligned inside ``surface`` minus ``padding`` on every side."""
    x, y = aligned_origin(
        measure_text(glyph_set, text),
        text_height(glyph_set),
        surface.width,
        surface.height,
        h_align,
        v_align,
        padding,
    )
    return draw_text(surface, text, x, y, glyph_set, intensity)


def draw_text_clipped(
    surface: Surface,
    text: str,
    x: int,
    y: int,
    glyph_set: GlyphSet | None,
    clip: tuple[int, int, int, int],
    intensity: int = ON,
) -> int:
    """Draw ``text`` restricted to ``clip`` (x, y, w, h); restores the previous clip."""
    previous = surface.clip
    surface.set_clip(*clip)
    try:
        return draw_text(surface, text, x, y, glyph_set, intensity)
    finally:
        surface.set_clip(previous.x, previous.y, previous.w, previous.h)


__all__ = [
    "CHAR_GAP",
    "H_ALIGNMENTS",
    "V_ALIGNMENTS",
    "aligned_origin",
    "draw_aligned_text",
    "draw_glyph",
    "draw_text",
    "draw_text_clipped",
    "measure_text",
    "normalize_v_align",
    "text_height",
]
