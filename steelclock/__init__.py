"""SteelClock: widget frames for SteelSeries OLED displays over GameSense."""

__version__ = "0.1.0"

__all__ = ["__version__"]
