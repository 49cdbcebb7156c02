"""Scroll-offset state machine for text that overflows its widget."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Mapping

from steelclock.widgets.base import Clock

MODE_CONTINUOUS = "continuous"
MODE_BOUNCE = "bounce"
MODE_PAUSE_ENDS = "pause_ends"
SCROLL_MODES = (MODE_CONTINUOUS, MODE_BOUNCE, MODE_PAUSE_ENDS)

DIRECTION_LEFT = "left"
DIRECTION_RIGHT = "right"
DIRECTION_UP = "up"
DIRECTION_DOWN = "down"
SCROLL_DIRECTIONS = (DIRECTION_LEFT, DIRECTION_RIGHT, DIRECTION_UP, DIRECTION_DOWN)

DEFAULT_SPEED = 30.0
DEFAULT_GAP = 20
DEFAULT_PAUSE_MS = 1000


@dataclass(frozen=True)
class ScrollerConfig:
    """Speed in pixels per second; ``pause_ms`` applies at bounce and pause_ends extremes."""

    speed: float = DEFAULT_SPEED
    mode: str = MODE_CONTINUOUS
    direction: str = DIRECTION_LEFT
    gap: int = DEFAULT_GAP
    pause_ms: int = DEFAULT_PAUSE_MS

    def __post_init__(self) -> None:
        if self.mode not in SCROLL_MODES:
            raise ValueError(f"Unknown scroll mode '{self.mode}' (valid: {', '.join(SCROLL_MODES)})")
        if self.direction not in SCROLL_DIRECTIONS:
            raise ValueError(
                f"Unknown scroll direction '{self.direction}' (valid: {', '.join(SCROLL_DIRECTIONS)})"
            )
        if self.speed < 0:
            raise ValueError("Scroll speed must be non-negative")

    @property
    def horizontal(self) -> bool:
        return self.direction in (DIRECTION_LEFT, DIRECTION_RIGHT)

    @property
    def forward(self) -> bool:
        return self.direction in (DIRECTION_LEFT, DIRECTION_UP)

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any] | bool | None) -> ScrollerConfig:
        """Build from a ``scroll`` mapping; ``true`` selects the defaults."""
        if not isinstance(properties, Mapping):
            properties = {}
        return cls(
            speed=float(properties.get("speed", DEFAULT_SPEED)),
            mode=str(properties.get("mode", MODE_CONTINUOUS)),
            direction=str(properties.get("direction", DIRECTION_LEFT)),
            gap=int(properties.get("gap", DEFAULT_GAP)),
            pause_ms=int(properties.get("pause_ms", DEFAULT_PAUSE_MS)),
        )


class TextScroller:
    """Tracks a pixel offset that advances by ``speed * elapsed``.

    Continuous mode wraps at ``content + gap`` so two copies of the text
    cover the seam. Bounce reverses at both ends; pause_ends jumps back
    to the start. Both pause for ``pause_ms`` at each turn.
    """

    def __init__(self, config: ScrollerConfig, clock: Clock = time.monotonic) -> None:
        self._config = config
        self._clock = clock
        self._offset = 0.0
        self._last_update = clock()
        self._bounce_dir = 1
        self._pause_until = 0.0

    @property
    def config(self) -> ScrollerConfig:
        return self._config

    @property
    def offset(self) -> float:
        return self._offset

    def is_paused(self, now: float | None = None) -> bool:
        now = self._clock() if now is None else now
        return now < self._pause_until

    def reset(self) -> None:
        self._offset = 0.0
        self._bounce_dir = 1
        self._pause_until = 0.0
        self._last_update = self._clock()

    def update(self, content_size: int, container_size: int, now: float | None = None) -> float:
        """Advance and return the offset; content that fits never scrolls."""
        now = self._clock() if now is None else now
        if content_size <= container_size:
            self._offset = 0.0
            self._last_update = now
            return 0.0
        if now < self._pause_until:
            self._last_update = now
            return self._offset

        elapsed = max(0.0, now - self._last_update)
        self._last_update = now
        movement = self._config.speed * elapsed

        if self._config.mode == MODE_CONTINUOUS:
            self._advance_continuous(movement, content_size)
        elif self._config.mode == MODE_BOUNCE:
            self._advance_bounce(movement, content_size - container_size, now)
        else:
            self._advance_pause_ends(movement, content_size - container_size, now)
        return self._offset

    def positions(self, start: int, content_size: int, container_size: int) -> list[int]:
        """Draw origins for the text along the scroll axis."""
        if content_size <= container_size:
            return [start]
        offset = int(self._offset)
        if self._config.mode == MODE_CONTINUOUS:
            period = content_size + self._config.gap
            first = start - offset
            if self._config.forward:
                return [first, first + period]
            return [first, first - period]
        if self._config.mode == MODE_PAUSE_ENDS and not self._config.forward:
            return [start - (content_size - container_size) - offset]
        return [start - offset]

    def _advance_continuous(self, movement: float, content_size: int) -> None:
        period = float(content_size + self._config.gap)
        if self._config.forward:
            self._offset += movement
            if self._offset >= period:
                self._offset %= period
        else:
            self._offset -= movement
            if self._offset <= -period:
                self._offset = -((-self._offset) % period)

    def _advance_bounce(self, movement: float, max_offset: int, now: float) -> None:
        self._offset += movement * self._bounce_dir
        if self._offset >= max_offset:
            self._offset = float(max_offset)
            self._bounce_dir = -1
            self._pause_until = now + self._config.pause_ms / 1000.0
        elif self._offset <= 0:
            self._offset = 0.0
            self._bounce_dir = 1
            self._pause_until = now + self._config.pause_ms / 1000.0

    def _advance_pause_ends(self, movement: float, max_offset: int, now: float) -> None:
        if self._config.forward:
            self._offset += movement
            wrapped = self._offset >= max_offset
        else:
            self._offset -= movement
            wrapped = self._offset <= -max_offset
        if wrapped:
            self._offset = 0.0
            self._pause_until = now + self._config.pause_ms / 1000.0


__all__ = [
    "MODE_BOUNCE",
    "MODE_CONTINUOUS",
    "MODE_PAUSE_ENDS",
    "SCROLL_DIRECTIONS",
    "SCROLL_MODES",
    "ScrollerConfig",
    "TextScroller",
]
