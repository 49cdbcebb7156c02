from __future__ import annotations

import textwrap

import pytest

from steelclock.config import AppConfig, ConfigError, WidgetGeometry, load_config, parse_config


VALID_YAML = """
game:
  name: DEMO
  display_name: Demo
  developer: X
  deinitialize_timer_ms: 5000

display:
  refresh_rate_ms: 50

engine:
  event_batching: true
  event_batch_size: 5

logging:
  level: "debug"
  log_dir: "logs/"

widgets:
  - type: clock
    id: clock
    position: {x: 0, y: 0, w: 128, h: 20, z_order: 2}
    style: {background: transparent, border: 255, padding: 1}
    update_interval: 0.5
    properties:
      format: "%H:%M"
      v_align: center
  - type: text
    position: {x: 0, y: 20, w: 128, h: 20}
    enabled: false
"""


def _write_yaml(tmp_path, contents: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(contents))
    return str(path)


def _minimal(**sections) -> dict:
    data = {"widgets": []}
    data.update(sections)
    return data


def test_load_config_valid(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("STEELCLOCK_CORE_PROPS", raising=False)
    monkeypatch.delenv("STEELCLOCK_LOG_LEVEL", raising=False)
    path = _write_yaml(tmp_path, VALID_YAML)

    config = load_config(path)

    assert isinstance(config, AppConfig)
    assert config.game.name == "DEMO"
    assert config.game.deinitialize_timer_ms == 5000
    assert config.display.width == 128
    assert config.display.refresh_rate_ms == 50
    assert config.engine.event_batching is True
    assert config.engine.event_batch_size == 5
    assert config.log.level == "DEBUG"

    clock, text = config.widgets
    assert clock.geometry == WidgetGeometry(x=0, y=0, w=128, h=20, z_order=2)
    assert clock.style.background is None
    assert clock.style.border == 255
    assert clock.style.padding == 1
    assert clock.update_interval == 0.5
    assert clock.properties["format"] == "%H:%M"
    assert text.id == "text_1"
    assert text.enabled is False
    assert text.style.border is None


def test_defaults() -> None:
    config = parse_config(_minimal())

    assert config.game.name == "STEELCLOCK"
    assert config.game.display_name == "SteelClock"
    assert config.game.event_name == "STEELCLOCK_DISPLAY"
    assert (config.display.width, config.display.height) == (128, 40)
    assert config.engine.failure_threshold == 5
    assert config.engine.backoff_max_seconds == 30.0
    assert config.widgets == ()


def test_load_config_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "does_not_exist.yaml"))


def test_load_config_directory_path(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config(str(tmp_path))


def test_load_config_invalid_yaml(tmp_path) -> None:
    path = _write_yaml(tmp_path, "widgets: [unclosed\n")

    with pytest.raises(ConfigError):
        load_config(path)


def test_top_level_must_be_mapping() -> None:
    with pytest.raises(ConfigError):
        parse_config(["not", "a", "mapping"])


def test_widgets_key_required() -> None:
    with pytest.raises(ConfigError, match="widgets"):
        parse_config({"game": {}})


def test_section_must_be_mapping() -> None:
    with pytest.raises(ConfigError):
        parse_config(_minimal(display=[1, 2]))


def test_game_name_must_differ_from_display_name() -> None:
    with pytest.raises(ConfigError):
        parse_config(_minimal(game={"name": "SAME", "display_name": "SAME"}))


@pytest.mark.parametrize("timer", [500, 60001])
def test_deinitialize_timer_bounds(timer: int) -> None:
    with pytest.raises(ConfigError):
        parse_config(_minimal(game={"deinitialize_timer_ms": timer}))


def test_deinitialize_timer_zero_allowed() -> None:
    assert parse_config(_minimal(game={"deinitialize_timer_ms": 0})).game.deinitialize_timer_ms == 0


@pytest.mark.parametrize("size", [0, 101])
def test_event_batch_size_bounds(size: int) -> None:
    with pytest.raises(ConfigError):
        parse_config(_minimal(engine={"event_batch_size": size}))


def test_refresh_rate_has_floor() -> None:
    assert parse_config(_minimal(display={"refresh_rate_ms": 1})).display.refresh_rate_ms == 16


def test_duplicate_widget_ids_rejected() -> None:
    widget = {"type": "clock", "id": "a", "position": {"x": 0, "y": 0, "w": 1, "h": 1}}

    with pytest.raises(ConfigError, match="Duplicate"):
        parse_config({"widgets": [widget, dict(widget)]})


@pytest.mark.parametrize(
    "position",
    [
        {"x": -1, "y": 0, "w": 10, "h": 10},
        {"x": 0, "y": 0, "w": 0, "h": 10},
        {"x": 0, "y": 0, "w": 10},
    ],
)
def test_invalid_geometry_rejected(position: dict) -> None:
    with pytest.raises(ConfigError):
        parse_config({"widgets": [{"type": "clock", "position": position}]})


def test_geometry_past_frame_edge_accepted() -> None:
    config = parse_config({"widgets": [{"type": "clock", "position": {"x": 127, "y": 0, "w": 10, "h": 10}}]})

    assert config.widgets[0].geometry.x == 127


@pytest.mark.parametrize(
    "style",
    [{"background": 256}, {"border": "thick"}, {"background": "none"}],
)
def test_invalid_style_rejected(style: dict) -> None:
    widget = {"type": "clock", "position": {"x": 0, "y": 0, "w": 1, "h": 1}, "style": style}

    with pytest.raises(ConfigError):
        parse_config({"widgets": [widget]})


def test_unknown_alignment_rejected() -> None:
    widget = {"type": "clock", "position": {"x": 0, "y": 0, "w": 1, "h": 1}, "properties": {"h_align": "middle"}}

    with pytest.raises(ConfigError):
        parse_config({"widgets": [widget]})


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("STEELCLOCK_CORE_PROPS", "/tmp/coreProps.json")
    monkeypatch.setenv("STEELCLOCK_LOG_LEVEL", "warning")

    config = parse_config(_minimal(logging={"level": "INFO"}))

    assert config.engine.core_props_path == "/tmp/coreProps.json"
    assert config.log.level == "WARNING"


def test_update_interval_seconds_key() -> None:
    widget = {"type": "clock", "position": {"x": 0, "y": 0, "w": 1, "h": 1}, "update_interval_seconds": 0.25}

    config = parse_config({"widgets": [widget]})

    assert config.widgets[0].update_interval == 0.25


def test_update_interval_seconds_wins_over_alias() -> None:
    widget = {
        "type": "clock",
        "position": {"x": 0, "y": 0, "w": 1, "h": 1},
        "update_interval_seconds": 2,
        "update_interval": 0.5,
    }

    config = parse_config({"widgets": [widget]})

    assert config.widgets[0].update_interval == 2.0


def test_update_interval_seconds_must_be_positive() -> None:
    widget = {"type": "clock", "position": {"x": 0, "y": 0, "w": 1, "h": 1}, "update_interval_seconds": 0}

    with pytest.raises(ConfigError):
        parse_config({"widgets": [widget]})
