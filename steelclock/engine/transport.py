"""Threaded frame delivery and heartbeats against the engine."""

from __future__ import annotations

from collections import deque
import logging
import threading
import time
from typing import Callable

from steelclock.engine.client import GameSenseClient, GameSenseError

logger = logging.getLogger(__name__)

MAX_HEARTBEAT_INTERVAL_SECONDS = 10.0
SLOT_POLL_SECONDS = 0.1


def heartbeat_interval(deinitialize_timer_ms: int) -> float:
    """Smaller of 10 s and half the engine's deinitialize timer."""
    if deinitialize_timer_ms <= 0:
        return MAX_HEARTBEAT_INTERVAL_SECONDS
    return min(MAX_HEARTBEAT_INTERVAL_SECONDS, deinitialize_timer_ms / 2000.0)


class FrameSlot:
    """Single-frame mailbox; a newer frame replaces an undelivered one."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._payload: bytes | None = None
        self._dropped = 0

    @property
    def dropped(self) -> int:
        with self._cond:
            return self._dropped

    def put(self, payload: bytes) -> bool:
        """Store ``payload``; returns False when it replaced an older frame."""
        with self._cond:
            replaced = self._payload is not None
            if replaced:
                self._dropped += 1
            self._payload = payload
            self._cond.notify()
            return not replaced

    def take(self, timeout: float | None = None) -> bytes | None:
        """Wait up to ``timeout`` for a frame and remove it."""
        with self._cond:
            if self._payload is None:
                self._cond.wait(timeout)
            payload = self._payload
            self._payload = None
            return payload

    def take_nowait(self) -> bytes | None:
        with self._cond:
            payload = self._payload
            self._payload = None
            return payload

    def clear(self) -> None:
        with self._cond:
            self._payload = None


class FailureTracker:
    """Trips after ``threshold`` consecutive failures inside ``window_seconds``."""

    def __init__(
        self,
        threshold: int = 5,
        window_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._threshold = threshold
        self._window_seconds = window_seconds
        self._clock = clock
        self._failures: deque[float] = deque()
        self._lock = threading.Lock()
        self.tripped = threading.Event()

    @property
    def consecutive_failures(self) -> int:
        with self._lock:
            return len(self._failures)

    def record_failure(self) -> bool:
        """Count one failure; returns True once the tracker has tripped."""
        now = self._clock()
        with self._lock:
            self._failures.append(now)
            while self._failures and now - self._failures[0] > self._window_seconds:
                self._failures.popleft()
            if len(self._failures) >= self._threshold:
                self.tripped.set()
        return self.tripped.is_set()

    def record_success(self) -> None:
        with self._lock:
            self._failures.clear()

    def reset(self) -> None:
        with self._lock:
            self._failures.clear()
            self.tripped.clear()


class TransportWorker:
    """Background thread that delivers the freshest frame from a :class:`FrameSlot`.

    With batching on, a collector thread drains the slot into a pending
    list of at most ``batch_size`` frames while a request is in flight,
    and the sender posts everything pending as one batch.
    """

    def __init__(
        self,
        client: GameSenseClient,
        event: str,
        slot: FrameSlot,
        tracker: FailureTracker,
        batching: bool = False,
        batch_size: int = 10,
        deduplicate: bool = False,
    ) -> None:
        self._client = client
        self._event = event
        self._slot = slot
        self._tracker = tracker
        self._batching = batching
        self._batch_size = batch_size
        self._deduplicate = deduplicate
        self._last_sent: bytes | None = None
        self._sent = 0
        self._failed = 0
        self._skipped = 0
        self._pending: deque[bytes] = deque(maxlen=max(1, batch_size))
        self._pending_cond = threading.Condition()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._collector: threading.Thread | None = None

    @property
    def frames_sent(self) -> int:
        return self._sent

    @property
    def frames_failed(self) -> int:
        return self._failed

    @property
    def frames_skipped(self) -> int:
        return self._skipped

    def start(self) -> None:
        """Start the delivery thread, and the collector when batching."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        if self._batching:
            self._collector = threading.Thread(target=self._collect_loop, name="frame-collector", daemon=True)
            self._collector.start()
            target = self._batch_loop
        else:
            target = self._run_loop
        self._thread = threading.Thread(target=target, name="frame-transport", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 2.0) -> None:
        """Stop after at most one in-flight request."""
        self._stop_event.set()
        with self._pending_cond:
            self._pending_cond.notify_all()
        for thread in (self._collector, self._thread):
            if thread is not None:
                thread.join(timeout)
        self._collector = None
        self._thread = None

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            payload = self._slot.take(timeout=SLOT_POLL_SECONDS)
            if payload is not None:
                self.deliver([payload])

    def _collect_loop(self) -> None:
        while not self._stop_event.is_set():
            payload = self._slot.take(timeout=SLOT_POLL_SECONDS)
            if payload is None:
                continue
            with self._pending_cond:
                self._pending.append(payload)
                self._pending_cond.notify()

    def _batch_loop(self) -> None:
        while not self._stop_event.is_set():
            with self._pending_cond:
                if not self._pending:
                    self._pending_cond.wait(SLOT_POLL_SECONDS)
                batch = list(self._pending)
                self._pending.clear()
            if batch:
                self.deliver(batch)

    def deliver(self, batch: list[bytes]) -> bool:
        """Send ``batch`` with one retry on network errors; returns True on success."""
        if self._deduplicate:
            batch = [payload for payload in batch if payload != self._last_sent]
            if not batch:
                self._skipped += 1
                return True
        for attempt in (1, 2):
            try:
                if len(batch) > 1:
                    self._client.send_multiple_frames(self._event, batch)
                else:
                    self._client.send_frame(self._event, batch[0])
            except GameSenseError as exc:
                if exc.retryable and attempt == 1:
                    continue
                self._failed += 1
                tripped = self._tracker.record_failure()
                logger.warning(
                    "Frame dropped (%s, status=%s): %s%s",
                    exc.path,
                    exc.status,
                    exc,
                    "; failure threshold reached" if tripped else "",
                )
                return False
            self._sent += len(batch)
            self._last_sent = batch[-1]
            self._tracker.record_success()
            return True
        return False


class HeartbeatWorker:
    """Background thread that keeps the game registration alive."""

    def __init__(self, client: GameSenseClient, interval_seconds: float, tracker: FailureTracker) -> None:
        self._client = client
        self._interval_seconds = interval_seconds
        self._tracker = tracker
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the heartbeat thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="engine-heartbeat", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 2.0) -> None:
        """Signal the heartbeat thread to stop."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run_loop(self) -> None:
        while not self._stop_event.wait(timeout=self._interval_seconds):
            self.beat()

    def beat(self) -> bool:
        try:
            self._client.heartbeat()
        except GameSenseError as exc:
            self._tracker.record_failure()
            logger.warning("Heartbeat failed (%s, status=%s): %s", exc.path, exc.status, exc)
            return False
        return True


__all__ = [
    "FailureTracker",
    "FrameSlot",
    "HeartbeatWorker",
    "TransportWorker",
    "heartbeat_interval",
]
