"""Clock widget."""

from __future__ import annotations

import time
from typing import Callable

from steelclock.config import WidgetConfig
from steelclock.widgets.base import Clock
from steelclock.widgets.text import TextWidget

DEFAULT_FORMAT = "%H:%M:%S"


class ClockWidget(TextWidget):
    """Local time formatted with ``strftime`` (property ``format``)."""

    def __init__(
        self,
        config: WidgetConfig,
        clock: Clock = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(config, clock)
        self._format = str(config.properties.get("format", DEFAULT_FORMAT))
        self._wall_clock = wall_clock

    def read_text(self) -> str:
        return time.strftime(self._format, time.localtime(self._wall_clock()))


__all__ = ["ClockWidget"]
