"""Widget contract shared by every display widget."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import threading
import time
from typing import Callable

from steelclock.config import WidgetConfig, WidgetGeometry, WidgetStyle
from steelclock.rendering.surface import OFF, Surface

Clock = Callable[[], float]


@dataclass(frozen=True)
class ContentArea:
    """Drawable region of a widget after padding."""

    x: int
    y: int
    width: int
    height: int


class Widget(ABC):
    """Base class for widgets.

    Subclasses implement :meth:`render` and usually :meth:`update`. ``update``
    must not block; slow work belongs in a background thread started from
    :meth:`start` and stopped in :meth:`stop`. ``render`` returns ``None`` to
    hide the widget for the current frame.
    """

    def __init__(self, config: WidgetConfig, clock: Clock = time.monotonic) -> None:
        self._config = config
        self._clock = clock
        self._update_interval = config.update_interval
        self._auto_hide = config.auto_hide
        self._auto_hide_timeout = config.auto_hide_timeout
        self._visible_until: float | None = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._config.id

    @property
    def config(self) -> WidgetConfig:
        return self._config

    @property
    def geometry(self) -> WidgetGeometry:
        return self._config.geometry

    @property
    def style(self) -> WidgetStyle:
        return self._config.style

    def update_interval(self) -> float:
        """Seconds between :meth:`update` calls; re-read by the scheduler every tick."""
        return self._update_interval

    def start(self) -> None:
        """Start background work, if any."""

    def update(self) -> None:
        """Advance internal state."""

    @abstractmethod
    def render(self) -> Surface | None:
        """Produce this frame's surface, or ``None`` to stay hidden."""

    def stop(self) -> None:
        """Cancel background work and release resources."""

    @property
    def auto_hide(self) -> bool:
        return self._auto_hide

    def trigger_reveal(self) -> None:
        """Show an auto-hide widget for the configured timeout."""
        if not self._auto_hide:
            return
        with self._lock:
            self._visible_until = self._clock() + self._auto_hide_timeout

    def should_hide(self) -> bool:
        """True when auto-hide is on and the reveal window has passed or never opened."""
        if not self._auto_hide:
            return False
        with self._lock:
            visible_until = self._visible_until
        if visible_until is None:
            return True
        return self._clock() > visible_until

    @property
    def content_area(self) -> ContentArea:
        padding = self.style.padding
        geometry = self.geometry
        return ContentArea(
            x=padding,
            y=padding,
            width=max(0, geometry.w - 2 * padding),
            height=max(0, geometry.h - 2 * padding),
        )

    def create_canvas(self) -> Surface:
        """New widget-sized surface filled with the background.

        Transparent widgets get an ``OFF`` fill marked as the transparent
        value so the compositor lets lower widgets show through.
        """
        background = self.style.background
        if background is None:
            return Surface(self.geometry.w, self.geometry.h, fill=OFF, transparent=OFF)
        return Surface(self.geometry.w, self.geometry.h, fill=background)

    def apply_border(self, canvas: Surface) -> None:
        if self.style.border is not None:
            canvas.draw_border(self.style.border)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


__all__ = ["Clock", "ContentArea", "Widget"]
