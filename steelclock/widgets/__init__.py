"""Display widgets and the widget registry."""

from steelclock.widgets.base import ContentArea, Widget
from steelclock.widgets.clock import ClockWidget
from steelclock.widgets.error import ErrorWidget, unsupported_factory
from steelclock.widgets.hacker_code import HackerCodeWidget
from steelclock.widgets.registry import RegistryError, WidgetRegistry
from steelclock.widgets.scroller import ScrollerConfig, TextScroller
from steelclock.widgets.system import CPUWidget, MemoryWidget
from steelclock.widgets.text import TextWidget

UNSUPPORTED_TYPES = ("audio_visualizer",)


def register_builtin_widgets(registry: WidgetRegistry) -> WidgetRegistry:
    """Register every built-in widget type on ``registry``."""
    registry.register("clock", ClockWidget)
    registry.register("text", TextWidget)
    registry.register("cpu", CPUWidget)
    registry.register("memory", MemoryWidget)
    registry.register("hacker_code", HackerCodeWidget)
    registry.register("error", ErrorWidget)
    for type_name in UNSUPPORTED_TYPES:
        registry.register(type_name, unsupported_factory(type_name))
    return registry


def default_registry() -> WidgetRegistry:
    return register_builtin_widgets(WidgetRegistry())


__all__ = [
    "CPUWidget",
    "ClockWidget",
    "ContentArea",
    "ErrorWidget",
    "HackerCodeWidget",
    "MemoryWidget",
    "RegistryError",
    "ScrollerConfig",
    "TextScroller",
    "TextWidget",
    "Widget",
    "WidgetRegistry",
    "default_registry",
    "register_builtin_widgets",
]
