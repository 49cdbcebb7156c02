"""CPU and memory widgets backed by a threaded psutil poller."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
import threading
import time
from typing import Callable

import psutil

from steelclock.config import WidgetConfig
from steelclock.rendering.fonts import get_font
from steelclock.rendering.surface import ON, Surface
from steelclock.rendering.text import draw_aligned_text
from steelclock.widgets.base import Clock, Widget

logger = logging.getLogger(__name__)

MODE_TEXT = "text"
MODE_BAR = "bar"
MODE_GRAPH = "graph"
DISPLAY_MODES = (MODE_TEXT, MODE_BAR, MODE_GRAPH)

DEFAULT_POLL_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class MetricSample:
    """Snapshot of the latest sampler call."""

    value: float | None
    sampled_at: float
    error: str | None


class MetricPoller:
    """Background thread that calls ``sampler`` on a schedule."""

    def __init__(self, sampler: Callable[[], float], poll_interval_seconds: float) -> None:
        self._sampler = sampler
        self._poll_interval_seconds = poll_interval_seconds
        self._latest: MetricSample | None = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def get_latest(self) -> MetricSample | None:
        """Return the most recent sample, if any."""
        with self._lock:
            return self._latest

    def start(self) -> None:
        """Start the background sampling thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="metric-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        """Signal the sampling thread to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            sample = self._sample_once()
            with self._lock:
                self._latest = sample
            self._stop_event.wait(timeout=self._poll_interval_seconds)

    def _sample_once(self) -> MetricSample:
        try:
            value = float(self._sampler())
            return MetricSample(value=value, sampled_at=time.time(), error=None)
        except (psutil.Error, OSError) as exc:
            return MetricSample(value=None, sampled_at=time.time(), error=str(exc))


def cpu_percent() -> float:
    return psutil.cpu_percent(interval=None)


def memory_percent() -> float:
    return psutil.virtual_memory().percent


class MetricWidget(Widget):
    """Percentage metric rendered as text, a bar or a history graph.

    Properties: ``display_mode`` (text, bar, graph), ``font``,
    ``poll_interval`` and ``intensity``.
    """

    label = ""

    def __init__(
        self,
        config: WidgetConfig,
        sampler: Callable[[], float],
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__(config, clock)
        properties = config.properties
        self._mode = str(properties.get("display_mode", MODE_TEXT))
        if self._mode not in DISPLAY_MODES:
            raise ValueError(f"Unknown display_mode '{self._mode}' (valid: {', '.join(DISPLAY_MODES)})")
        self._font = get_font(properties.get("font"))
        self._intensity = int(properties.get("intensity", ON))
        poll_interval = float(properties.get("poll_interval", DEFAULT_POLL_INTERVAL_SECONDS))
        self._poller = MetricPoller(sampler, poll_interval)
        self._value: float | None = None
        self._history: deque[float] = deque(maxlen=max(1, self.content_area.width))
        self._last_error: str | None = None

    @property
    def value(self) -> float | None:
        return self._value

    def start(self) -> None:
        self._poller.start()

    def stop(self) -> None:
        self._poller.stop()

    def update(self) -> None:
        sample = self._poller.get_latest()
        if sample is None:
            return
        if sample.error is not None:
            if sample.error != self._last_error:
                logger.warning("Widget %s sampling failed: %s", self.name, sample.error)
                self._last_error = sample.error
            return
        if self._last_error is not None:
            logger.info("Widget %s sampling recovered", self.name)
            self._last_error = None
        self._value = max(0.0, min(100.0, sample.value))
        self._history.append(self._value)

    def render(self) -> Surface | None:
        if self.should_hide():
            return None
        canvas = self.create_canvas()
        if self._mode == MODE_TEXT:
            self._render_text(canvas)
        elif self._mode == MODE_BAR:
            self._render_bar(canvas)
        else:
            self._render_graph(canvas)
        self.apply_border(canvas)
        return canvas

    def _render_text(self, canvas: Surface) -> None:
        reading = "--" if self._value is None else f"{self._value:.0f}%"
        text = f"{self.label} {reading}" if self.label else reading
        draw_aligned_text(canvas, text, self._font, "center", "middle", self.style.padding, self._intensity)

    def _render_bar(self, canvas: Surface) -> None:
        area = self.content_area
        canvas.draw_rect(area.x, area.y, area.width, area.height, self._intensity)
        if self._value is None:
            return
        inner = max(0, area.width - 2)
        filled = int(round(inner * self._value / 100.0))
        canvas.fill_rect(area.x + 1, area.y + 1, filled, area.height - 2, self._intensity)

    def _render_graph(self, canvas: Surface) -> None:
        area = self.content_area
        if area.height <= 0:
            return
        start_x = area.x + area.width - len(self._history)
        bottom = area.y + area.height - 1
        previous = None
        for index, value in enumerate(self._history):
            x = start_x + index
            y = bottom - int(round((area.height - 1) * value / 100.0))
            if previous is None:
                canvas.set_pixel(x, y, self._intensity)
            else:
                canvas.draw_line(x - 1, previous, x, y, self._intensity)
            previous = y


class CPUWidget(MetricWidget):
    label = "CPU"

    def __init__(self, config: WidgetConfig, clock: Clock = time.monotonic) -> None:
        super().__init__(config, cpu_percent, clock)


class MemoryWidget(MetricWidget):
    label = "MEM"

    def __init__(self, config: WidgetConfig, clock: Clock = time.monotonic) -> None:
        super().__init__(config, memory_percent, clock)


__all__ = ["CPUWidget", "MemoryWidget", "MetricPoller", "MetricSample", "MetricWidget"]
