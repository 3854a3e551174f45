"""Thread-backed 1 Hz countdown used as the workflow's timer port."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_TICK_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True)
class CountdownSnapshot:
    """Immutable view of the active countdown."""
    run_id: int
    phase: str
    duration_seconds: int
    remaining_seconds: int


@dataclass(frozen=True)
class CountdownTick:
    """Tick payload emitted whenever the remaining whole seconds change."""
    snapshot: CountdownSnapshot
    completed: bool = False


@dataclass
class _Run:
    run_id: int
    phase: str
    duration_seconds: int
    started_at_monotonic: float
    on_done: Callable[[], None]
    on_tick: Optional[Callable[[int], None]]
    stop_event: threading.Event
    last_emitted_remaining: Optional[int] = None


class CountdownTimer:
    """Single-slot countdown with monotonic timing.

    Starting a countdown replaces the previous one. A stopped or replaced
    countdown never calls its `on_done`; a countdown that reaches zero calls
    it exactly once, from the worker thread.
    """

    def __init__(
        self,
        *,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        autostart: bool = True,
        name: str = "countdown",
        logger: Optional[logging.Logger] = None,
    ):
        if tick_interval_seconds <= 0:
            raise ValueError("tick_interval_seconds must be greater than zero")

        self._tick_interval_seconds = float(tick_interval_seconds)
        self._autostart = autostart
        self._name = name
        self._logger = logger or logging.getLogger("countdown")
        self._lock = threading.Lock()
        self._run: Optional[_Run] = None
        self._last_run_id = 0
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._run is not None

    @property
    def last_run_id(self) -> int:
        with self._lock:
            return self._last_run_id

    def snapshot(self) -> Optional[CountdownSnapshot]:
        with self._lock:
            run = self._run
            if run is None:
                return None
            return self._snapshot_locked(run, time.monotonic())

    def remaining_seconds(self) -> Optional[int]:
        snapshot = self.snapshot()
        return snapshot.remaining_seconds if snapshot is not None else None

    def start(
        self,
        phase: str,
        duration_seconds: int,
        *,
        on_done: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
    ) -> int:
        stop_event = threading.Event()
        with self._lock:
            self._cancel_locked()
            self._last_run_id += 1
            run = _Run(
                run_id=self._last_run_id,
                phase=phase,
                duration_seconds=max(0, int(duration_seconds)),
                started_at_monotonic=time.monotonic(),
                on_done=on_done,
                on_tick=on_tick,
                stop_event=stop_event,
            )
            self._run = run

        self._logger.info(
            "Countdown started: phase=%s duration=%ss run=%d",
            phase,
            run.duration_seconds,
            run.run_id,
        )
        if self._autostart:
            self._thread = threading.Thread(
                target=self._worker,
                args=(stop_event,),
                daemon=True,
                name=f"{self._name}-{run.run_id}",
            )
            self._thread.start()
        return run.run_id

    def stop(self) -> None:
        with self._lock:
            run = self._run
            self._cancel_locked()
        if run is not None:
            self._logger.info("Countdown stopped: phase=%s run=%d", run.phase, run.run_id)

    def close(self, timeout_seconds: float = 2.0) -> None:
        self.stop()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout_seconds)
        self._thread = None

    def poll(self) -> Optional[CountdownTick]:
        """Emit a tick when the remaining seconds changed; completes at zero."""
        with self._lock:
            run = self._run
            if run is None:
                return None

            now = time.monotonic()
            remaining = self._remaining_locked(run, now)
            if remaining <= 0:
                run.last_emitted_remaining = 0
                snapshot = self._snapshot_locked(run, now)
                self._run = None
                run.stop_event.set()
                tick = CountdownTick(snapshot=snapshot, completed=True)
            elif run.last_emitted_remaining == remaining:
                return None
            else:
                run.last_emitted_remaining = remaining
                tick = CountdownTick(snapshot=self._snapshot_locked(run, now))

        if run.on_tick is not None:
            run.on_tick(tick.snapshot.remaining_seconds)
        if tick.completed:
            self._logger.info("Countdown completed: phase=%s run=%d", run.phase, run.run_id)
            run.on_done()
        return tick

    def _worker(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                tick = self.poll()
            except Exception as error:
                self._logger.error("Countdown callback failed: %s", error, exc_info=True)
                tick = None
            if tick is not None and tick.completed:
                return
            if stop_event.wait(self._tick_interval_seconds):
                return

    def _cancel_locked(self) -> None:
        if self._run is not None:
            self._run.stop_event.set()
            self._run = None

    def _snapshot_locked(self, run: _Run, now: float) -> CountdownSnapshot:
        return CountdownSnapshot(
            run_id=run.run_id,
            phase=run.phase,
            duration_seconds=run.duration_seconds,
            remaining_seconds=self._remaining_locked(run, now),
        )

    @staticmethod
    def _remaining_locked(run: _Run, now: float) -> int:
        elapsed = max(0.0, now - run.started_at_monotonic)
        remaining = int(math.ceil(run.duration_seconds - elapsed))
        return max(0, min(run.duration_seconds, remaining))
