"""Rendering utilities for the OLED display."""

from steelclock.rendering.composer import compose_frame, order_widgets
from steelclock.rendering.emulator import FramePreviewWriter, save_frame
from steelclock.rendering.encoder import EncodeSizeError, decode_frame, encode_frame
from steelclock.rendering.fonts import FONT_3X5, FONT_5X7, get_font
from steelclock.rendering.glyphs import Glyph, GlyphSet, get_glyph, get_icon
from steelclock.rendering.surface import OFF, ON, Surface
from steelclock.rendering.text import draw_aligned_text, draw_text, measure_text

__all__ = [
    "EncodeSizeError",
    "FONT_3X5",
    "FONT_5X7",
    "FramePreviewWriter",
    "Glyph",
    "GlyphSet",
    "OFF",
    "ON",
    "Surface",
    "compose_frame",
    "decode_frame",
    "draw_aligned_text",
    "draw_text",
    "encode_frame",
    "get_font",
    "get_glyph",
    "get_icon",
    "measure_text",
    "order_widgets",
    "save_frame",
]
