from __future__ import annotations

import logging
import textwrap
from unittest.mock import patch

import pytest

from steelclock.app import build_widgets, main, parse_args, setup_logging
from steelclock.config import LoggingConfig, parse_config
from steelclock.runtime.supervisor import ExitCode
from steelclock.widgets import ClockWidget, TextWidget


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def test_parse_args_defaults() -> None:
    args = parse_args([])

    assert args.config == "config/config.yaml"
    assert args.log_level is None


def test_setup_logging_writes_log_file(tmp_path) -> None:
    setup_logging(LoggingConfig(level="INFO", log_dir=str(tmp_path / "logs")), "debug")

    logging.getLogger("steelclock.test").debug("hello")

    assert logging.getLogger().level == logging.DEBUG
    assert "hello" in (tmp_path / "logs" / "steelclock.log").read_text(encoding="utf-8")


def test_build_widgets() -> None:
    config = parse_config(
        {
            "widgets": [
                {"type": "clock", "id": "c", "position": {"x": 0, "y": 0, "w": 64, "h": 20}},
                {"type": "text", "id": "t", "position": {"x": 64, "y": 0, "w": 64, "h": 20}},
            ]
        }
    )

    widgets = build_widgets(config)

    assert isinstance(widgets[0], ClockWidget)
    assert isinstance(widgets[1], TextWidget)


def test_main_missing_config_exits_with_config_code(tmp_path) -> None:
    assert main(["--config", str(tmp_path / "missing.yaml")]) == ExitCode.CONFIG


def test_main_unknown_widget_type_exits_with_config_code(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        textwrap.dedent(
            """
            widgets:
              - type: weather
                position: {x: 0, y: 0, w: 10, h: 10}
            """
        )
    )

    assert main(["--config", str(path)]) == ExitCode.CONFIG


def test_main_runs_supervisor(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("widgets: []\n")

    with patch("steelclock.app.Supervisor") as supervisor_cls, patch("signal.signal"):
        supervisor_cls.return_value.run.return_value = ExitCode.OK
        assert main(["--config", str(path)]) == 0

    supervisor_cls.assert_called_once()
