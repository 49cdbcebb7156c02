"""Frame output helpers for previewing the OLED on disk."""

from __future__ import annotations

import logging
from pathlib import Path
import time
from typing import Callable

from PIL import Image

from steelclock.rendering.encoder import THRESHOLD
from steelclock.rendering.surface import Surface

logger = logging.getLogger(__name__)

PREVIEW_SCALE = 4
PREVIEW_MIN_INTERVAL_SECONDS = 1.0


def surface_to_image(surface: Surface, scale: int = PREVIEW_SCALE) -> Image.Image:
    """Convert a surface to a black/white PIL image, scaled by ``scale``."""
    mono = (surface.pixels >= THRESHOLD).astype("uint8") * 255
    image = Image.fromarray(mono)
    if scale != 1:
        image = image.resize((surface.width * scale, surface.height * scale), Image.NEAREST)
    return image


def save_frame(surface: Surface, path: str = "emulator_output/frame.png", scale: int = PREVIEW_SCALE) -> None:
    """Save a frame to disk as a PNG image."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    surface_to_image(surface, scale).save(output_path, format="PNG")


class FramePreviewWriter:
    """Writes at most one preview PNG per ``min_interval`` seconds."""

    def __init__(
        self,
        path: str,
        min_interval: float = PREVIEW_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._path = path
        self._min_interval = min_interval
        self._clock = clock
        self._last_write: float | None = None

    def __call__(self, frame: Surface) -> bool:
        now = self._clock()
        if self._last_write is not None and now - self._last_write < self._min_interval:
            return False
        self._last_write = now
        try:
            save_frame(frame, self._path)
        except OSError as exc:
            logger.warning("Could not write preview %s: %s", self._path, exc)
            return False
        return True


__all__ = ["FramePreviewWriter", "save_frame", "surface_to_image"]
