"""Static and file-backed text widget with overflow scrolling."""

from __future__ import annotations

import logging
from pathlib import Path
import time

from steelclock.config import WidgetConfig
from steelclock.rendering.fonts import get_font
from steelclock.rendering.surface import ON, Surface
from steelclock.rendering.text import (
    CHAR_GAP,
    aligned_origin,
    draw_text_clipped,
    measure_text,
    normalize_v_align,
    text_height,
)
from steelclock.widgets.base import Clock, Widget
from steelclock.widgets.scroller import ScrollerConfig, TextScroller

logger = logging.getLogger(__name__)

# Below the 16 ms refresh floor, so a scroller advances on every frame.
SCROLL_UPDATE_SECONDS = 0.01


class TextWidget(Widget):
    """Shows a line of text, scrolling it when it overflows the content area.

    Properties: ``text`` or ``file``, ``font``, ``h_align``, ``v_align``,
    ``intensity`` and an optional ``scroll`` mapping (see
    :class:`ScrollerConfig`). Without ``scroll`` overflowing text is clipped.
    """

    def __init__(self, config: WidgetConfig, clock: Clock = time.monotonic) -> None:
        super().__init__(config, clock)
        properties = config.properties
        self._font = get_font(properties.get("font"))
        self._h_align = str(properties.get("h_align", "center"))
        self._v_align = normalize_v_align(str(properties.get("v_align", "middle")))
        self._intensity = int(properties.get("intensity", ON))
        self._static_text = str(properties.get("text", ""))
        file_path = properties.get("file")
        self._file = Path(file_path) if file_path else None
        scroll = properties.get("scroll")
        self._scroller = TextScroller(ScrollerConfig.from_properties(scroll), clock) if scroll else None
        self._text: str | None = None
        self._lines: list[str] = []
        self._next_read = 0.0

    @property
    def text(self) -> str:
        return self._text or ""

    def read_text(self) -> str:
        """Current source text; subclasses override this."""
        if self._file is None:
            return self._static_text
        try:
            return self._file.read_text(encoding="utf-8").rstrip("\n")
        except OSError as exc:
            logger.warning("Widget %s could not read %s: %s", self.name, self._file, exc)
            return self.text

    def update_interval(self) -> float:
        """Frame-rate updates while scrolling; the text itself is re-read at the configured interval."""
        interval = super().update_interval()
        if self._scroller is not None:
            return min(interval, SCROLL_UPDATE_SECONDS)
        return interval

    def update(self) -> None:
        now = self._clock()
        if self._scroller is None or self._text is None or now >= self._next_read:
            self._next_read = now + super().update_interval()
            self._refresh_text()
        if self._scroller is not None:
            content, container = self._extent()
            self._scroller.update(content, container, now)

    def _refresh_text(self) -> None:
        text = self.read_text()
        if text != self._text:
            self._text = text
            self._lines = text.split("\n") if self._vertical else [text.replace("\n", " ")]
            if self._scroller is not None:
                self._scroller.reset()
            self.trigger_reveal()

    def render(self) -> Surface | None:
        if self.should_hide():
            return None
        if self._text is None:
            self.update()
        canvas = self.create_canvas()
        area = self.content_area
        clip = (area.x, area.y, area.width, area.height)
        line_height = text_height(self._font)
        content, container = self._extent()

        if self._vertical:
            block_y = aligned_origin(0, content, canvas.width, canvas.height, "left", self._v_align, self.style.padding)[1]
            starts = self._scroller.positions(area.y, content, container) if content > container else [block_y]
            for start in starts:
                for index, line in enumerate(self._lines):
                    x = aligned_origin(
                        measure_text(self._font, line), line_height, canvas.width, canvas.height,
                        self._h_align, "top", self.style.padding,
                    )[0]
                    y = start + index * (line_height + CHAR_GAP)
                    draw_text_clipped(canvas, line, x, y, self._font, clip, self._intensity)
        else:
            line = self._lines[0] if self._lines else ""
            x, y = aligned_origin(
                content, line_height, canvas.width, canvas.height, self._h_align, self._v_align, self.style.padding
            )
            if content > container:
                starts = self._scroller.positions(area.x, content, container) if self._scroller else [area.x]
            else:
                starts = [x]
            for start in starts:
                draw_text_clipped(canvas, line, start, y, self._font, clip, self._intensity)

        self.apply_border(canvas)
        return canvas

    @property
    def _vertical(self) -> bool:
        return self._scroller is not None and not self._scroller.config.horizontal

    def _extent(self) -> tuple[int, int]:
        area = self.content_area
        if self._vertical:
            line_height = text_height(self._font)
            count = len(self._lines)
            content = count * (line_height + CHAR_GAP) - CHAR_GAP if count else 0
            return content, area.height
        line = self._lines[0] if self._lines else ""
        return measure_text(self._font, line), area.width


__all__ = ["SCROLL_UPDATE_SECONDS", "TextWidget"]
