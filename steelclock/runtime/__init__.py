"""Scheduling and supervision of the render/transport loop."""

from steelclock.runtime.backoff import Backoff
from steelclock.runtime.scheduler import FrameScheduler
from steelclock.runtime.supervisor import ExitCode, State, Supervisor

__all__ = ["Backoff", "ExitCode", "FrameScheduler", "State", "Supervisor"]
