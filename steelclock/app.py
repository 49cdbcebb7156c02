"""Command-line entry point for the SteelClock display app."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import signal
import sys
import threading
from typing import Any, Sequence

from steelclock.config import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, LoggingConfig, load_config
from steelclock.runtime.supervisor import ExitCode, Supervisor
from steelclock.widgets import Widget, default_registry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "steelclock.log"


def setup_logging(config: LoggingConfig, level_override: str | None = None) -> None:
    """Log to stdout, and to ``<log_dir>/steelclock.log`` when a directory is configured."""
    level_name = (level_override or config.level).upper()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_widgets(config: AppConfig) -> list[Widget]:
    """Instantiate the configured widgets through the built-in registry."""
    return default_registry().create_all(config.widgets)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="steelclock", description="Drive a SteelSeries OLED through GameSense.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the YAML configuration file")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the display until interrupted; returns the process exit code."""
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        setup_logging(LoggingConfig(), args.log_level)
        logger.error("Configuration error: %s", exc)
        return int(ExitCode.CONFIG)

    setup_logging(config.log, args.log_level)
    try:
        widgets = build_widgets(config)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return int(ExitCode.CONFIG)
    logger.info("Loaded %s widgets from %s", len(widgets), args.config)

    stop_event = threading.Event()

    def signal_handler(signum: int, frame: Any) -> None:
        logger.info("Received signal: %s", signum)
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, signal_handler)

    supervisor = Supervisor(config, widgets, stop_event)
    exit_code = supervisor.run()
    logger.info("Exiting with code %s", int(exit_code))
    return int(exit_code)


__all__ = ["build_widgets", "main", "parse_args", "setup_logging"]
