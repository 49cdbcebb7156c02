"""Widget type registry."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from steelclock.config import ConfigError, WidgetConfig
from steelclock.widgets.base import Widget

logger = logging.getLogger(__name__)

WidgetFactory = Callable[[WidgetConfig], Widget]


class RegistryError(ConfigError):
    """Raised for duplicate registrations and unknown widget types."""


class WidgetRegistry:
    """Maps configuration ``type`` strings to widget factories."""

    def __init__(self) -> None:
        self._factories: dict[str, WidgetFactory] = {}

    def register(self, type_name: str, factory: WidgetFactory) -> None:
        if type_name in self._factories:
            raise RegistryError(f"Widget type '{type_name}' is already registered")
        self._factories[type_name] = factory

    def types(self) -> list[str]:
        """Registered type names, sorted."""
        return sorted(self._factories)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._factories

    def create(self, config: WidgetConfig) -> Widget:
        """Instantiate one widget from its configuration."""
        factory = self._factories.get(config.type)
        if factory is None:
            raise RegistryError(
                f"Unknown widget type '{config.type}' for widget '{config.id}' "
                f"(valid: {', '.join(self.types())})"
            )
        try:
            return factory(config)
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid properties for widget '{config.id}': {exc}") from exc

    def create_all(self, configs: Iterable[WidgetConfig]) -> list[Widget]:
        """Create every enabled widget in configuration order."""
        widgets = []
        for config in configs:
            if not config.enabled:
                logger.info("Skipping disabled widget %s", config.id)
                continue
            widgets.append(self.create(config))
        return widgets


__all__ = ["RegistryError", "WidgetFactory", "WidgetRegistry"]
