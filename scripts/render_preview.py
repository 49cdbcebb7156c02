"""Render a preview frame from a config file's widgets."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from steelclock.app import build_widgets
from steelclock.config import load_config
from steelclock.rendering import compose_frame, save_frame


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="config/config.yaml")
    parser.add_argument("--output", default="emulator_output/frame.png")
    parser.add_argument("--scale", type=int, default=4)
    parser.add_argument("--updates", type=int, default=1, help="update() calls per widget before rendering")
    args = parser.parse_args()

    config = load_config(args.config)
    widgets = build_widgets(config)
    for _ in range(max(0, args.updates)):
        for widget in widgets:
            widget.update()

    frame = compose_frame(widgets, (config.display.width, config.display.height), config.display.background)
    save_frame(frame, args.output, scale=args.scale)
    print("preview_written", {"path": args.output, "widgets": len(widgets), "lit": frame.count_on()}, flush=True)

    for widget in widgets:
        widget.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
