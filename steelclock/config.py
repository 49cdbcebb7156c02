"""Configuration loader for the SteelClock display app."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any, Mapping

from dotenv import load_dotenv
import yaml

DEFAULT_CONFIG_PATH = "config/config.yaml"

DEFAULT_GAME_NAME = "STEELCLOCK"
DEFAULT_GAME_DISPLAY_NAME = "SteelClock"
DEFAULT_DEVELOPER = "steelclock"
DEFAULT_EVENT_NAME = "STEELCLOCK_DISPLAY"
DEFAULT_DEINITIALIZE_TIMER_MS = 15000
MIN_DEINITIALIZE_TIMER_MS = 1000
MAX_DEINITIALIZE_TIMER_MS = 60000

DEFAULT_WIDTH = 128
DEFAULT_HEIGHT = 40
DEFAULT_REFRESH_RATE_MS = 33
MIN_REFRESH_RATE_MS = 16

DEFAULT_UPDATE_INTERVAL = 1.0
DEFAULT_AUTO_HIDE_TIMEOUT = 2.0

MIN_EVENT_BATCH_SIZE = 1
MAX_EVENT_BATCH_SIZE = 100

H_ALIGN_NAMES = ("left", "center", "right")
V_ALIGN_NAMES = ("top", "middle", "center", "bottom")

ENV_CORE_PROPS = "STEELCLOCK_CORE_PROPS"
ENV_LOG_LEVEL = "STEELCLOCK_LOG_LEVEL"


class ConfigError(ValueError):
    """Raised when the configuration file is missing or invalid."""


@dataclass(frozen=True)
class GameConfig:
    """Engine registration identity."""

    name: str = DEFAULT_GAME_NAME
    display_name: str = DEFAULT_GAME_DISPLAY_NAME
    developer: str = DEFAULT_DEVELOPER
    event_name: str = DEFAULT_EVENT_NAME
    deinitialize_timer_ms: int = DEFAULT_DEINITIALIZE_TIMER_MS
    unregister_on_exit: bool = True


@dataclass(frozen=True)
class DisplayConfig:
    """Device frame size and cadence."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    background: int = 0
    refresh_rate_ms: int = DEFAULT_REFRESH_RATE_MS
    preview_path: str | None = None


@dataclass(frozen=True)
class EngineConfig:
    """Discovery, transport and reconnect tuning."""

    core_props_path: str | None = None
    request_timeout_seconds: float = 0.5
    failure_threshold: int = 5
    failure_window_seconds: float = 30.0
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 30.0
    max_discovery_attempts: int = 10
    event_batching: bool = False
    event_batch_size: int = 10
    deduplicate_frames: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    log_dir: str | None = None


@dataclass(frozen=True)
class WidgetGeometry:
    """Position of a widget surface inside the frame."""

    x: int
    y: int
    w: int
    h: int
    z_order: int = 0


@dataclass(frozen=True)
class WidgetStyle:
    """Background and border intensities; ``None`` means transparent / no border."""

    background: int | None = 0
    border: int | None = None
    padding: int = 0


@dataclass(frozen=True)
class WidgetConfig:
    """One widget entry from the ``widgets`` list."""

    type: str
    id: str
    geometry: WidgetGeometry
    style: WidgetStyle = field(default_factory=WidgetStyle)
    enabled: bool = True
    update_interval: float = DEFAULT_UPDATE_INTERVAL
    auto_hide: bool = False
    auto_hide_timeout: float = DEFAULT_AUTO_HIDE_TIMEOUT
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    game: GameConfig
    display: DisplayConfig
    engine: EngineConfig
    log: LoggingConfig
    widgets: tuple[WidgetConfig, ...]


def _require_key(mapping: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ConfigError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' config must be a mapping")
    return value


def _int(value: Any, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{context} must be an integer, got {value!r}")
    return value


def _number(value: Any, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{context} must be a number, got {value!r}")
    return float(value)


def _intensity(value: Any, context: str, none_names: tuple[str, ...]) -> int | None:
    if value is None or value == -1:
        return None
    if isinstance(value, str):
        if value.lower() in none_names:
            return None
        raise ConfigError(f"{context} must be 0..255 or one of {', '.join(none_names)}, got {value!r}")
    intensity = _int(value, context)
    if not 0 <= intensity <= 255:
        raise ConfigError(f"{context} must be within 0..255, got {intensity}")
    return intensity


def parse_game(section: Mapping[str, Any]) -> GameConfig:
    game = GameConfig(
        name=str(section.get("name", DEFAULT_GAME_NAME)),
        display_name=str(section.get("display_name", DEFAULT_GAME_DISPLAY_NAME)),
        developer=str(section.get("developer", DEFAULT_DEVELOPER)),
        event_name=str(section.get("event_name", DEFAULT_EVENT_NAME)),
        deinitialize_timer_ms=_int(
            section.get("deinitialize_timer_ms", DEFAULT_DEINITIALIZE_TIMER_MS), "game.deinitialize_timer_ms"
        ),
        unregister_on_exit=bool(section.get("unregister_on_exit", True)),
    )
    if not game.name:
        raise ConfigError("game.name must not be empty")
    if game.name == game.display_name:
        raise ConfigError("game.name and game.display_name must differ; the engine rejects identical values")
    timer = game.deinitialize_timer_ms
    if timer != 0 and not MIN_DEINITIALIZE_TIMER_MS <= timer <= MAX_DEINITIALIZE_TIMER_MS:
        raise ConfigError(
            f"game.deinitialize_timer_ms must be 0 or within "
            f"{MIN_DEINITIALIZE_TIMER_MS}..{MAX_DEINITIALIZE_TIMER_MS}, got {timer}"
        )
    return game


def parse_display(section: Mapping[str, Any]) -> DisplayConfig:
    width = _int(section.get("width", DEFAULT_WIDTH), "display.width")
    height = _int(section.get("height", DEFAULT_HEIGHT), "display.height")
    if width <= 0 or height <= 0:
        raise ConfigError(f"display size must be positive, got {width}x{height}")
    background = _intensity(section.get("background", 0), "display.background", ())
    refresh = _int(section.get("refresh_rate_ms", DEFAULT_REFRESH_RATE_MS), "display.refresh_rate_ms")
    preview_path = section.get("preview_path")
    return DisplayConfig(
        width=width,
        height=height,
        background=background if background is not None else 0,
        refresh_rate_ms=max(MIN_REFRESH_RATE_MS, refresh),
        preview_path=str(preview_path) if preview_path else None,
    )


def parse_engine(section: Mapping[str, Any]) -> EngineConfig:
    defaults = EngineConfig()
    engine = EngineConfig(
        core_props_path=os.environ.get(ENV_CORE_PROPS) or section.get("core_props_path"),
        request_timeout_seconds=_number(
            section.get("request_timeout_seconds", defaults.request_timeout_seconds), "engine.request_timeout_seconds"
        ),
        failure_threshold=_int(section.get("failure_threshold", defaults.failure_threshold), "engine.failure_threshold"),
        failure_window_seconds=_number(
            section.get("failure_window_seconds", defaults.failure_window_seconds), "engine.failure_window_seconds"
        ),
        backoff_base_seconds=_number(
            section.get("backoff_base_seconds", defaults.backoff_base_seconds), "engine.backoff_base_seconds"
        ),
        backoff_max_seconds=_number(
            section.get("backoff_max_seconds", defaults.backoff_max_seconds), "engine.backoff_max_seconds"
        ),
        max_discovery_attempts=_int(
            section.get("max_discovery_attempts", defaults.max_discovery_attempts), "engine.max_discovery_attempts"
        ),
        event_batching=bool(section.get("event_batching", defaults.event_batching)),
        event_batch_size=_int(section.get("event_batch_size", defaults.event_batch_size), "engine.event_batch_size"),
        deduplicate_frames=bool(section.get("deduplicate_frames", defaults.deduplicate_frames)),
    )
    if not MIN_EVENT_BATCH_SIZE <= engine.event_batch_size <= MAX_EVENT_BATCH_SIZE:
        raise ConfigError(
            f"engine.event_batch_size must be within {MIN_EVENT_BATCH_SIZE}..{MAX_EVENT_BATCH_SIZE}, "
            f"got {engine.event_batch_size}"
        )
    if engine.failure_threshold < 1:
        raise ConfigError("engine.failure_threshold must be at least 1")
    if engine.max_discovery_attempts < 1:
        raise ConfigError("engine.max_discovery_attempts must be at least 1")
    return engine


def parse_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = os.environ.get(ENV_LOG_LEVEL) or section.get("level", "INFO")
    log_dir = section.get("log_dir")
    return LoggingConfig(level=str(level).upper(), log_dir=str(log_dir) if log_dir else None)


def parse_widget(entry: Any, index: int) -> WidgetConfig:
    """Validate one widget descriptor."""
    context = f"widgets[{index}]"
    if not isinstance(entry, dict):
        raise ConfigError(f"{context} must be a mapping")
    widget_type = str(_require_key(entry, "type", context))
    widget_id = str(entry.get("id") or f"{widget_type}_{index}")
    context = f"widget '{widget_id}'"

    position = _require_key(entry, "position", context)
    if not isinstance(position, dict):
        raise ConfigError(f"{context} position must be a mapping")
    geometry = WidgetGeometry(
        x=_int(_require_key(position, "x", f"{context} position"), f"{context} x"),
        y=_int(_require_key(position, "y", f"{context} position"), f"{context} y"),
        w=_int(_require_key(position, "w", f"{context} position"), f"{context} w"),
        h=_int(_require_key(position, "h", f"{context} position"), f"{context} h"),
        z_order=_int(position.get("z_order", 0), f"{context} z_order"),
    )
    if geometry.x < 0 or geometry.y < 0:
        raise ConfigError(f"{context} position must be non-negative, got ({geometry.x}, {geometry.y})")
    if geometry.w <= 0 or geometry.h <= 0:
        raise ConfigError(f"{context} size must be positive, got {geometry.w}x{geometry.h}")

    style_section = entry.get("style") or {}
    if not isinstance(style_section, dict):
        raise ConfigError(f"{context} style must be a mapping")
    style = WidgetStyle(
        background=_intensity(style_section.get("background", 0), f"{context} background", ("transparent",)),
        border=_intensity(style_section.get("border"), f"{context} border", ("none",)),
        padding=_int(style_section.get("padding", 0), f"{context} padding"),
    )
    if style.padding < 0:
        raise ConfigError(f"{context} padding must be non-negative")

    properties = entry.get("properties") or {}
    if not isinstance(properties, dict):
        raise ConfigError(f"{context} properties must be a mapping")
    h_align = properties.get("h_align")
    if h_align is not None and h_align not in H_ALIGN_NAMES:
        raise ConfigError(f"{context} h_align must be one of {', '.join(H_ALIGN_NAMES)}, got {h_align!r}")
    v_align = properties.get("v_align")
    if v_align is not None and v_align not in V_ALIGN_NAMES:
        raise ConfigError(f"{context} v_align must be one of {', '.join(V_ALIGN_NAMES)}, got {v_align!r}")

    # "update_interval" is accepted as a shorter alias.
    update_interval = _number(
        entry.get("update_interval_seconds", entry.get("update_interval", DEFAULT_UPDATE_INTERVAL)),
        f"{context} update_interval_seconds",
    )
    if update_interval <= 0:
        raise ConfigError(f"{context} update_interval_seconds must be positive")
    auto_hide_timeout = _number(
        entry.get("auto_hide_timeout", DEFAULT_AUTO_HIDE_TIMEOUT), f"{context} auto_hide_timeout"
    )

    return WidgetConfig(
        type=widget_type,
        id=widget_id,
        geometry=geometry,
        style=style,
        enabled=bool(entry.get("enabled", True)),
        update_interval=update_interval,
        auto_hide=bool(entry.get("auto_hide", False)),
        auto_hide_timeout=auto_hide_timeout,
        properties=dict(properties),
    )


def parse_config(data: Any) -> AppConfig:
    """Build an :class:`AppConfig` from an already-decoded mapping."""
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    widget_entries = _require_key(data, "widgets", "top-level")
    if not isinstance(widget_entries, list):
        raise ConfigError("'widgets' config must be a list")
    widgets = tuple(parse_widget(entry, index) for index, entry in enumerate(widget_entries))

    seen: set[str] = set()
    for widget in widgets:
        if widget.id in seen:
            raise ConfigError(f"Duplicate widget id '{widget.id}'")
        seen.add(widget.id)

    return AppConfig(
        game=parse_game(_section(data, "game")),
        display=parse_display(_section(data, "display")),
        engine=parse_engine(_section(data, "engine")),
        log=parse_logging(_section(data, "logging")),
        widgets=widgets,
    )


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Config file could not be read: {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file is not valid YAML: {exc}") from exc
    return parse_config(data)


__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "DisplayConfig",
    "EngineConfig",
    "GameConfig",
    "LoggingConfig",
    "WidgetConfig",
    "WidgetGeometry",
    "WidgetStyle",
    "load_config",
    "parse_config",
    "parse_widget",
]
