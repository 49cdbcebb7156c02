"""Monochrome pixel surface shared by widgets and the compositor."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

OFF = 0
ON = 255


@dataclass(frozen=True)
class ClipRect:
    """Half-open clip rectangle in surface coordinates."""

    x: int
    y: int
    w: int
    h: int

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def intersect(self, other: ClipRect) -> ClipRect:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        return ClipRect(left, top, max(0, right - left), max(0, bottom - top))


class Surface:
    """1-byte-per-pixel frame buffer.

    Every drawing operation clips silently to the active clip rectangle,
    which is never larger than the surface itself. Pixels equal to
    ``transparent`` are skipped when this surface is blitted elsewhere.
    """

    def __init__(self, width: int, height: int, fill: int = OFF, transparent: int | None = None) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Surface size must be non-negative, got {width}x{height}.")
        self._width = width
        self._height = height
        self._pixels = np.full((height, width), _clamp(fill), dtype=np.uint8)
        self._bounds = ClipRect(0, 0, width, height)
        self._clip = self._bounds
        self.transparent = transparent

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def pixels(self) -> np.ndarray:
        """Row-major ``(height, width)`` uint8 view of the buffer."""
        return self._pixels

    @property
    def clip(self) -> ClipRect:
        return self._clip

    def set_clip(self, x: int, y: int, w: int, h: int) -> None:
        """Restrict drawing to a rectangle (intersected with the bounds)."""
        self._clip = ClipRect(x, y, w, h).intersect(self._bounds)

    def reset_clip(self) -> None:
        self._clip = self._bounds

    def get_pixel(self, x: int, y: int) -> int:
        if 0 <= x < self._width and 0 <= y < self._height:
            return int(self._pixels[y, x])
        return OFF

    def set_pixel(self, x: int, y: int, value: int) -> None:
        clip = self._clip
        if clip.x <= x < clip.right and clip.y <= y < clip.bottom:
            self._pixels[y, x] = _clamp(value)

    def fill(self, value: int) -> None:
        self.fill_rect(0, 0, self._width, self._height, value)

    def fill_rect(self, x: int, y: int, w: int, h: int, value: int) -> None:
        area = ClipRect(x, y, w, h).intersect(self._clip)
        if area.w == 0 or area.h == 0:
            return
        self._pixels[area.y : area.bottom, area.x : area.right] = _clamp(value)

    def draw_rect(self, x: int, y: int, w: int, h: int, value: int) -> None:
        """Draw a one-pixel rectangle outline."""
        if w <= 0 or h <= 0:
            return
        self.fill_rect(x, y, w, 1, value)
        self.fill_rect(x, y + h - 1, w, 1, value)
        self.fill_rect(x, y, 1, h, value)
        self.fill_rect(x + w - 1, y, 1, h, value)

    def draw_border(self, value: int) -> None:
        self.draw_rect(0, 0, self._width, self._height, value)

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, value: int) -> None:
        """Bresenham line, both endpoints inclusive."""
        dx = abs(x1 - x0)
        dy = -abs(y1 - y0)
        step_x = 1 if x0 < x1 else -1
        step_y = 1 if y0 < y1 else -1
        err = dx + dy
        x, y = x0, y0
        while True:
            self.set_pixel(x, y, value)
            if x == x1 and y == y1:
                break
            doubled = 2 * err
            if doubled >= dy:
                err += dy
                x += step_x
            if doubled <= dx:
                err += dx
                y += step_y

    def blit(self, src: Surface, dst_x: int, dst_y: int) -> None:
        """Copy the non-transparent pixels of ``src`` with its origin at (dst_x, dst_y)."""
        area = ClipRect(dst_x, dst_y, src.width, src.height).intersect(self._clip)
        if area.w == 0 or area.h == 0:
            return
        src_x = area.x - dst_x
        src_y = area.y - dst_y
        region = src.pixels[src_y : src_y + area.h, src_x : src_x + area.w]
        target = self._pixels[area.y : area.bottom, area.x : area.right]
        if src.transparent is None:
            target[...] = region
        else:
            mask = region != src.transparent
            target[mask] = region[mask]

    def copy(self) -> Surface:
        clone = Surface(self._width, self._height, transparent=self.transparent)
        clone._pixels[...] = self._pixels
        return clone

    def count_on(self, threshold: int = 128) -> int:
        """Number of pixels at or above ``threshold``."""
        return int(np.count_nonzero(self._pixels >= threshold))

    def tobytes(self) -> bytes:
        return self._pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Surface):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._pixels, other._pixels))

    def __repr__(self) -> str:
        return f"Surface({self._width}x{self._height})"


def _clamp(value: int) -> int:
    return max(OFF, min(ON, int(value)))


__all__ = ["ClipRect", "OFF", "ON", "Surface"]
