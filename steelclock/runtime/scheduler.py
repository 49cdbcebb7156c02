"""Frame cadence and per-widget update scheduling."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Sequence

from steelclock.engine.transport import FrameSlot
from steelclock.rendering.composer import compose_frame, order_widgets
from steelclock.rendering.encoder import encode_frame
from steelclock.rendering.surface import OFF, Surface
from steelclock.widgets.base import Widget

logger = logging.getLogger(__name__)

FramePreview = Callable[[Surface], object]


class FrameScheduler:
    """Updates due widgets, composes a frame and hands its payload to the transport.

    ``update`` and ``render`` run on the thread calling :meth:`tick`, so
    widgets need no locking against the scheduler. A widget whose
    ``update`` raises keeps its previous state and is retried on its next
    deadline.
    """

    def __init__(
        self,
        widgets: Sequence[Widget],
        size: tuple[int, int],
        slot: FrameSlot,
        interval_seconds: float,
        background: int = OFF,
        preview: FramePreview | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._widgets = order_widgets(widgets)
        self._size = size
        self._slot = slot
        self._interval_seconds = interval_seconds
        self._background = background
        self._preview = preview
        self._clock = clock
        self._next_update: list[float | None] = [None] * len(self._widgets)
        self._frames = 0

    @property
    def widgets(self) -> list[Widget]:
        """Widgets in paint order."""
        return list(self._widgets)

    @property
    def frames_composed(self) -> int:
        return self._frames

    def update_due(self, now: float) -> None:
        for index, widget in enumerate(self._widgets):
            deadline = self._next_update[index]
            if deadline is not None and now < deadline:
                continue
            try:
                widget.update()
            except Exception:
                logger.exception("Widget %s failed to update", widget.name)
            self._next_update[index] = now + widget.update_interval()

    def tick(self, now: float | None = None) -> Surface:
        """Run one frame: update, compose, encode and enqueue."""
        now = self._clock() if now is None else now
        self.update_due(now)
        frame = compose_frame(self._widgets, self._size, self._background, ordered=True)
        self._slot.put(encode_frame(frame))
        self._frames += 1
        if self._preview is not None:
            self._preview(frame)
        return frame

    def run(self, stop_event: threading.Event, should_continue: Callable[[], bool] | None = None) -> None:
        """Tick at the frame cadence until ``stop_event`` is set or ``should_continue`` is False."""
        next_tick = self._clock()
        while not stop_event.is_set():
            if should_continue is not None and not should_continue():
                return
            self.tick()
            next_tick += self._interval_seconds
            delay = next_tick - self._clock()
            if delay < 0:
                # Late: skip missed ticks.
                next_tick = self._clock()
                delay = 0.0
            if stop_event.wait(delay):
                return


__all__ = ["FrameScheduler"]
