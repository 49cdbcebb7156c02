"""Frame compositor for the OLED display."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from steelclock.rendering.surface import OFF, Surface

if TYPE_CHECKING:
    from steelclock.widgets.base import Widget

logger = logging.getLogger(__name__)


def order_widgets(widgets: Iterable[Widget]) -> list[Widget]:
    """Ascending z-order; ties keep configuration order."""
    return sorted(widgets, key=lambda widget: widget.geometry.z_order)


def compose_frame(
    widgets: Sequence[Widget],
    size: tuple[int, int],
    background: int = OFF,
    ordered: bool = False,
) -> Surface:
    """Render every visible widget into a new device-sized frame.

    Widgets that return ``None`` or raise are left out of this frame.
    Pass ``ordered=True`` when ``widgets`` is already sorted by z-order.
    """
    width, height = size
    frame = Surface(width, height, fill=background)
    for widget in widgets if ordered else order_widgets(widgets):
        try:
            image = widget.render()
        except Exception:
            logger.exception("Widget %s failed to render", widget.name)
            continue
        if image is None:
            continue
        geometry = widget.geometry
        frame.blit(image, geometry.x, geometry.y)
    return frame


__all__ = ["compose_frame", "order_widgets"]
