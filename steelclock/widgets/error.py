"""Flashing warning widget, also used for widget types this platform cannot run."""

from __future__ import annotations

import time

from steelclock.config import WidgetConfig
from steelclock.rendering.fonts import FONT_3X5, ICONS_12X12, ICONS_16X16
from steelclock.rendering.glyphs import Glyph, get_icon
from steelclock.rendering.surface import ON, Surface
from steelclock.rendering.text import aligned_origin, draw_glyph, draw_text, measure_text
from steelclock.widgets.base import Clock, Widget
from steelclock.widgets.registry import WidgetFactory

DEFAULT_MESSAGE = "ERROR"
DEFAULT_FLASH_MS = 500
ICON_TEXT_GAP = 2


class ErrorWidget(Widget):
    """Warning icon plus message, toggled on and off every ``flash_ms``."""

    def __init__(
        self,
        config: WidgetConfig,
        clock: Clock = time.monotonic,
        message: str | None = None,
    ) -> None:
        super().__init__(config, clock)
        properties = config.properties
        self._message = str(message or properties.get("message", DEFAULT_MESSAGE)).upper()
        self._flash_seconds = int(properties.get("flash_ms", DEFAULT_FLASH_MS)) / 1000.0
        self._started = clock()

    @property
    def message(self) -> str:
        return self._message

    def flash_on(self) -> bool:
        if self._flash_seconds <= 0:
            return True
        phase = int((self._clock() - self._started) / self._flash_seconds)
        return phase % 2 == 0

    def render(self) -> Surface | None:
        if self.should_hide():
            return None
        canvas = self.create_canvas()
        if self.flash_on():
            self._draw_content(canvas)
        self.apply_border(canvas)
        return canvas

    def _draw_content(self, canvas: Surface) -> None:
        area = self.content_area
        text_w = measure_text(FONT_3X5, self._message)
        text_h = FONT_3X5.glyph_height
        icon = self._pick_icon(area.height)

        # Largest layout first: icon + text, then text, then icon.
        if icon is not None and icon.width + ICON_TEXT_GAP + text_w <= area.width:
            total_w = icon.width + ICON_TEXT_GAP + text_w
            x, y = aligned_origin(total_w, icon.height, canvas.width, canvas.height, "center", "middle", self.style.padding)
            draw_glyph(canvas, icon, x, y, ON)
            text_y = y + (icon.height - text_h) // 2
            draw_text(canvas, self._message, x + icon.width + ICON_TEXT_GAP, text_y, FONT_3X5, ON)
            return
        if text_w <= area.width and text_h <= area.height:
            x, y = aligned_origin(text_w, text_h, canvas.width, canvas.height, "center", "middle", self.style.padding)
            draw_text(canvas, self._message, x, y, FONT_3X5, ON)
            return
        if icon is not None:
            x, y = aligned_origin(icon.width, icon.height, canvas.width, canvas.height, "center", "middle", self.style.padding)
            draw_glyph(canvas, icon, x, y, ON)

    def _pick_icon(self, height: int) -> Glyph | None:
        for icon_set in (ICONS_16X16, ICONS_12X12):
            icon = get_icon(icon_set, "warning")
            if icon is not None and icon.height <= height:
                return icon
        return None


def unsupported_factory(type_name: str) -> WidgetFactory:
    """Factory for a widget type that needs a platform capture this build lacks."""

    def factory(config: WidgetConfig) -> Widget:
        return ErrorWidget(config, message=f"{type_name} unsupported")

    return factory


__all__ = ["ErrorWidget", "unsupported_factory"]
