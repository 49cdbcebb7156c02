"""Locate the engine's loopback address from its coreProps.json descriptor."""

from __future__ import annotations

import json
import os
from pathlib import Path
import sys

CORE_PROPS_SUBPATH = Path("SteelSeries") / "SteelSeries Engine 3" / "coreProps.json"
WINDOWS_FALLBACK_PATH = Path("C:/ProgramData") / CORE_PROPS_SUBPATH
MACOS_PATH = Path("/Library/Application Support/SteelSeries Engine 3/coreProps.json")


class DiscoveryError(RuntimeError):
    """Raised when the engine descriptor is missing or malformed."""


def candidate_paths(override: str | None = None) -> list[Path]:
    """Descriptor locations to try, most specific first."""
    if override:
        return [Path(override)]
    paths = []
    program_data = os.environ.get("PROGRAMDATA")
    if program_data:
        paths.append(Path(program_data) / CORE_PROPS_SUBPATH)
    if sys.platform == "darwin":
        paths.append(MACOS_PATH)
    paths.append(WINDOWS_FALLBACK_PATH)
    return paths


def find_core_props(override: str | None = None) -> Path:
    for path in candidate_paths(override):
        if path.is_file():
            return path
    raise DiscoveryError("Cannot find coreProps.json; is SteelSeries Engine 3 running?")


def parse_address(address: object) -> str:
    """Validate a ``host:port`` address with a numeric port."""
    if not isinstance(address, str) or not address:
        raise DiscoveryError("No 'address' field in coreProps.json")
    parts = address.split(":")
    if len(parts) != 2 or not parts[0]:
        raise DiscoveryError(f"Invalid address format: {address}")
    if not parts[1].isdigit():
        raise DiscoveryError(f"Invalid port number: {parts[1]}")
    return address


def discover_address(override: str | None = None) -> str:
    """Read the descriptor and return the engine's ``host:port``."""
    path = find_core_props(override)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            props = json.load(handle)
    except OSError as exc:
        raise DiscoveryError(f"Failed to read {path}: {exc}") from exc
    except ValueError as exc:
        raise DiscoveryError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(props, dict):
        raise DiscoveryError(f"{path} must contain a JSON object")
    return parse_address(props.get("address"))


__all__ = ["DiscoveryError", "candidate_paths", "discover_address", "find_core_props", "parse_address"]
