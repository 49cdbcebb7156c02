"""GameSense engine discovery, client and transport."""

from steelclock.engine.client import GameSenseClient, GameSenseError
from steelclock.engine.discovery import DiscoveryError, discover_address
from steelclock.engine.transport import FailureTracker, FrameSlot, HeartbeatWorker, TransportWorker, heartbeat_interval

__all__ = [
    "DiscoveryError",
    "FailureTracker",
    "FrameSlot",
    "GameSenseClient",
    "GameSenseError",
    "HeartbeatWorker",
    "TransportWorker",
    "discover_address",
    "heartbeat_interval",
]
