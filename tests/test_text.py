from __future__ import annotations

import pytest

from steelclock.rendering.fonts import FONT_3X5, FONT_5X7, ICONS_12X12, ICONS_16X16, get_font
from steelclock.rendering.glyphs import Glyph, build_glyph_set, get_glyph, get_icon
from steelclock.rendering.surface import ON, Surface
from steelclock.rendering.text import (
    aligned_origin,
    draw_aligned_text,
    draw_glyph,
    draw_text,
    draw_text_clipped,
    measure_text,
)


def _bbox_width(surface: Surface) -> int:
    columns = [x for x in range(surface.width) if any(surface.get_pixel(x, y) for y in range(surface.height))]
    if not columns:
        return 0
    return columns[-1] - columns[0] + 1


def test_glyph_from_rows() -> None:
    glyph = Glyph.from_rows(["#.", ".#", "#"])

    assert glyph.width == 2
    assert glyph.height == 3
    assert glyph.bits[2] == (True, False)


def test_get_glyph_has_no_fallback() -> None:
    assert get_glyph(FONT_5X7, "A") is not None
    assert get_glyph(FONT_5X7, "é") is None
    assert get_glyph(None, "A") is None


def test_measure_text_5x7() -> None:
    assert measure_text(FONT_5X7, "AB") == 11
    assert measure_text(FONT_5X7, "") == 0
    assert measure_text(FONT_5X7, "☃") == 0
    assert measure_text(FONT_5X7, "A☃B") == 11


def test_3x5_has_distinct_letters() -> None:
    assert FONT_3X5.glyphs["M"] != FONT_3X5.glyphs["N"]
    assert FONT_3X5.glyphs["U"] != FONT_3X5.glyphs["V"]
    assert measure_text(FONT_3X5, "CPU") == 11


def test_5x7_covers_printable_ascii() -> None:
    missing = [chr(code) for code in range(32, 127) if chr(code) not in FONT_5X7.glyphs]

    assert missing == []
    assert all(glyph.height == 7 and glyph.width == 5 for glyph in FONT_5X7.glyphs.values())


def test_draw_glyph_leaves_clear_bits_untouched() -> None:
    surface = Surface(3, 1, fill=50)
    glyph = Glyph.from_rows(["#.#"])

    draw_glyph(surface, glyph, 0, 0, ON)

    assert [surface.get_pixel(x, 0) for x in range(3)] == [ON, 50, ON]


@pytest.mark.parametrize("text", ["A", "AB", "Hello, World!", "1 2", "i", "  x  ", "☃"])
def test_draw_text_width_matches_measurement(text: str) -> None:
    surface = Surface(128, 10)

    advanced = draw_text(surface, text, 0, 0, FONT_5X7)

    assert advanced == measure_text(FONT_5X7, text)
    assert _bbox_width(surface) <= advanced


def test_draw_text_bbox_equals_measurement_for_solid_glyphs() -> None:
    glyphs = build_glyph_set("solid", 2, 2, {"a": ["##", "##"], "b": ["###", "###"]})
    surface = Surface(20, 2)

    advanced = draw_text(surface, "ab?a", 0, 0, glyphs)

    assert advanced == measure_text(glyphs, "ab?a") == 2 + 1 + 3 + 1 + 2
    assert _bbox_width(surface) == advanced


def test_draw_text_empty_string() -> None:
    surface = Surface(10, 10)

    assert draw_text(surface, "", 0, 0, FONT_5X7) == 0
    assert surface.count_on() == 0


def test_draw_text_with_missing_glyphs_draws_nothing() -> None:
    surface = Surface(20, 10)

    assert draw_text(surface, "abc", 0, 0, FONT_3X5) == 0
    assert surface.count_on() == 0


def test_aligned_origin() -> None:
    assert aligned_origin(10, 7, 40, 20, "left", "top", 2) == (2, 2)
    assert aligned_origin(10, 7, 40, 20, "right", "bottom", 2) == (28, 11)
    assert aligned_origin(10, 7, 40, 20, "center", "middle", 2) == (15, 6)
    assert aligned_origin(10, 7, 40, 20, "center", "center", 2) == (15, 6)


def test_aligned_origin_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        aligned_origin(1, 1, 10, 10, "justify", "top")


def test_draw_aligned_text_right() -> None:
    surface = Surface(30, 9)

    draw_aligned_text(surface, "I", FONT_5X7, "right", "top", padding=1)

    assert surface.get_pixel(27, 1) == ON
    assert surface.get_pixel(28, 1) == 0


def test_draw_text_clipped_restores_clip() -> None:
    surface = Surface(20, 10)
    surface.set_clip(0, 0, 15, 10)

    draw_text_clipped(surface, "MMM", 0, 0, FONT_5X7, (0, 0, 5, 7))

    assert all(surface.get_pixel(x, y) == 0 for x in range(5, 20) for y in range(10))
    assert surface.clip.w == 15


def test_icons() -> None:
    small = get_icon(ICONS_12X12, "warning")
    large = get_icon(ICONS_16X16, "warning")

    assert small is not None and (small.width, small.height) == (12, 12)
    assert large is not None and (large.width, large.height) == (16, 16)
    assert get_icon(ICONS_12X12, "missing") is None


def test_get_font() -> None:
    assert get_font(None) is FONT_5X7
    assert get_font("3x5") is FONT_3X5
    with pytest.raises(ValueError):
        get_font("comic")
