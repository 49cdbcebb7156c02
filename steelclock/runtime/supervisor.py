"""Top-level state machine: discovery, registration, run loop, reconnect and shutdown."""

from __future__ import annotations

from enum import Enum, IntEnum
import logging
import threading
import time
from typing import Callable, Sequence

from steelclock.config import AppConfig
from steelclock.engine.client import GameSenseClient, GameSenseError
from steelclock.engine.discovery import DiscoveryError, discover_address
from steelclock.engine.transport import (
    FailureTracker,
    FrameSlot,
    HeartbeatWorker,
    TransportWorker,
    heartbeat_interval,
)
from steelclock.rendering.emulator import FramePreviewWriter
from steelclock.rendering.encoder import EncodeSizeError
from steelclock.runtime.backoff import Backoff
from steelclock.runtime.scheduler import FrameScheduler
from steelclock.widgets.base import Widget

logger = logging.getLogger(__name__)


class State(Enum):
    INIT = "init"
    RUN = "run"
    BACKOFF = "backoff"
    SHUTDOWN = "shutdown"
    DONE = "done"


class ExitCode(IntEnum):
    OK = 0
    CONFIG = 2
    DISCOVERY = 3


ClientFactory = Callable[[str], GameSenseClient]


class Supervisor:
    """Owns the engine session, the transport threads and the frame scheduler.

    ``stop_event`` is the cancellation token shared with every thread; set
    it (for example from a signal handler) to shut down at the next tick.
    """

    def __init__(
        self,
        config: AppConfig,
        widgets: Sequence[Widget],
        stop_event: threading.Event | None = None,
        client_factory: ClientFactory | None = None,
        discover: Callable[[str | None], str] = discover_address,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._widgets = list(widgets)
        self.stop_event = stop_event or threading.Event()
        self._client_factory = client_factory or self._default_client
        self._discover = discover
        self._clock = clock
        engine = config.engine
        self._backoff = Backoff(engine.backoff_base_seconds, engine.backoff_max_seconds)
        self._tracker = FailureTracker(engine.failure_threshold, engine.failure_window_seconds, clock)
        self._discovery_failures = 0
        self._client: GameSenseClient | None = None
        self._state = State.INIT
        self.history: list[State] = [State.INIT]

    @property
    def state(self) -> State:
        return self._state

    def run(self) -> ExitCode:
        """Run until cancelled, until discovery keeps failing or until a widget cannot start."""
        exit_code = ExitCode.OK
        try:
            if not self._start_widgets():
                exit_code = ExitCode.CONFIG
            while exit_code is ExitCode.OK and not self.stop_event.is_set():
                if self._state is State.INIT:
                    exit_code = self._step_init()
                elif self._state is State.RUN:
                    self._step_run()
                elif self._state is State.BACKOFF:
                    self._step_backoff()
        except EncodeSizeError as exc:
            logger.error("Frame encoding failed: %s", exc)
            exit_code = ExitCode.CONFIG
        finally:
            self._shutdown()
        return exit_code

    def _start_widgets(self) -> bool:
        for widget in self._widgets:
            try:
                widget.start()
            except Exception:
                logger.exception("Widget %s failed to start", widget.name)
                return False
        return True

    def _transition(self, state: State) -> None:
        if state is not self._state:
            logger.info("Supervisor %s -> %s", self._state.name, state.name)
        self._state = state
        self.history.append(state)

    def _default_client(self, address: str) -> GameSenseClient:
        return GameSenseClient(address, self._config.game.name, self._config.engine.request_timeout_seconds)

    def _step_init(self) -> ExitCode:
        try:
            self._client = self._connect()
        except DiscoveryError as exc:
            self._discovery_failures += 1
            logger.warning(
                "Engine discovery failed (%s/%s): %s",
                self._discovery_failures,
                self._config.engine.max_discovery_attempts,
                exc,
            )
            if self._discovery_failures >= self._config.engine.max_discovery_attempts:
                logger.error("Giving up after %s discovery attempts", self._discovery_failures)
                return ExitCode.DISCOVERY
            self._transition(State.BACKOFF)
            return ExitCode.OK
        except GameSenseError as exc:
            logger.warning("Engine registration failed (%s, status=%s): %s", exc.path, exc.status, exc)
            self._transition(State.BACKOFF)
            return ExitCode.OK
        self._discovery_failures = 0
        self._transition(State.RUN)
        return ExitCode.OK

    def _connect(self) -> GameSenseClient:
        game = self._config.game
        address = self._discover(self._config.engine.core_props_path)
        logger.info("Engine found at %s", address)
        client = self._client_factory(address)
        try:
            client.register_game(game.display_name, game.developer, game.deinitialize_timer_ms)
            client.bind_screen_event(game.event_name)
        except GameSenseError:
            client.close()
            raise
        logger.info("Registered game %s with event %s", game.name, game.event_name)
        return client

    def _step_run(self) -> None:
        client = self._client
        engine = self._config.engine
        display = self._config.display
        self._tracker.reset()

        batching = engine.event_batching and client.supports_multiple_events()
        if engine.event_batching and not batching:
            logger.info("Engine does not support batched events; sending frames one at a time")
        slot = FrameSlot()
        transport = TransportWorker(
            client,
            self._config.game.event_name,
            slot,
            self._tracker,
            batching=batching,
            batch_size=engine.event_batch_size,
            deduplicate=engine.deduplicate_frames,
        )
        heartbeat = HeartbeatWorker(client, heartbeat_interval(self._config.game.deinitialize_timer_ms), self._tracker)
        preview = FramePreviewWriter(display.preview_path) if display.preview_path else None
        scheduler = FrameScheduler(
            self._widgets,
            (display.width, display.height),
            slot,
            display.refresh_rate_ms / 1000.0,
            background=display.background,
            preview=preview,
            clock=self._clock,
        )

        transport.start()
        heartbeat.start()
        try:
            scheduler.run(self.stop_event, should_continue=lambda: not self._tracker.tripped.is_set())
        finally:
            heartbeat.stop()
            transport.stop()
            if slot.dropped:
                logger.info("Session ended: %s frames sent, %s dropped", transport.frames_sent, slot.dropped)

        if transport.frames_sent:
            self._backoff.reset()
        if self.stop_event.is_set():
            return
        logger.warning("Transport failure threshold reached; reconnecting")
        client.close()
        self._client = None
        self._transition(State.BACKOFF)

    def _step_backoff(self) -> None:
        delay = self._backoff.next_delay()
        logger.info("Backing off for %.1fs", delay)
        if self.stop_event.wait(delay):
            return
        self._transition(State.INIT)

    def _shutdown(self) -> None:
        self._transition(State.SHUTDOWN)
        for widget in self._widgets:
            try:
                widget.stop()
            except Exception:
                logger.exception("Widget %s failed to stop", widget.name)
        client = self._client
        if client is not None:
            if self._config.game.unregister_on_exit:
                try:
                    client.remove_game()
                    logger.info("Removed game %s", self._config.game.name)
                except GameSenseError as exc:
                    logger.warning("Could not remove game (%s, status=%s): %s", exc.path, exc.status, exc)
            client.close()
            self._client = None
        self._transition(State.DONE)


__all__ = ["ExitCode", "State", "Supervisor"]
