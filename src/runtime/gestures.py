"""Raw key-down/key-up classification into short, double and long presses."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Mapping, Optional, Protocol

from contracts.ui_protocol import GESTURE_DOUBLE, GESTURE_LONG, GESTURE_SHORT

DEFAULT_LONG_PRESS_MS = 2000
DEFAULT_DOUBLE_PRESS_MS = 320
SINGLE_PRESS_GRACE_MS = 20

Settings = Optional[Mapping[str, Any]]
GestureCallback = Callable[[str, Settings], None]


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def thread_scheduler(delay_seconds: float, callback: Callable[[], None]) -> Cancellable:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


class PressClassifier:
    """Classifies presses of one key.

    A long press fires from a watchdog as soon as the key has been held for
    `long_press_ms`; the key-up that follows is swallowed. A second tap
    inside `double_press_ms` is a double press and cancels the pending
    single press, which is otherwise emitted once the window closed.
    """

    def __init__(
        self,
        on_gesture: GestureCallback,
        *,
        long_press_ms: int = DEFAULT_LONG_PRESS_MS,
        double_press_ms: int = DEFAULT_DOUBLE_PRESS_MS,
        scheduler: Scheduler = thread_scheduler,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if long_press_ms <= 0:
            raise ValueError("long_press_ms must be greater than zero")
        if double_press_ms < 0:
            raise ValueError("double_press_ms must be >= 0")

        self._on_gesture = on_gesture
        self._long_press_ms = int(long_press_ms)
        self._double_press_ms = int(double_press_ms)
        self._scheduler = scheduler
        self._clock = clock
        self._logger = logger or logging.getLogger("gestures")
        self._lock = threading.Lock()
        self._key_down_at: Optional[float] = None
        self._long_press_timer: Optional[Cancellable] = None
        self._long_press_fired = False
        self._last_tap_at: Optional[float] = None
        self._single_press_timer: Optional[Cancellable] = None
        self._single_press_generation = 0
        self._key_down_generation = 0

    def key_down(self, settings: Settings = None) -> None:
        with self._lock:
            self._key_down_at = self._clock()
            self._cancel_long_press_locked()
            self._long_press_fired = False
            self._key_down_generation += 1
            generation = self._key_down_generation
            self._long_press_timer = self._scheduler(
                self._long_press_ms / 1000,
                lambda: self._long_press_elapsed(generation, settings),
            )
        self._logger.debug("Key down")

    def key_up(self, settings: Settings = None) -> None:
        with self._lock:
            started_at = self._key_down_at
            self._key_down_at = None
            self._cancel_long_press_locked()
            if self._long_press_fired:
                self._long_press_fired = False
                return

            now = self._clock()
            elapsed_ms = (now - started_at) * 1000 if started_at is not None else 0.0
            if elapsed_ms >= self._long_press_ms:
                gesture = GESTURE_LONG
            else:
                previous = self._last_tap_at
                within_window = (
                    previous is not None
                    and (now - previous) * 1000 <= self._double_press_ms
                )
                self._cancel_single_press_locked()
                if within_window:
                    self._last_tap_at = None
                    gesture = GESTURE_DOUBLE
                else:
                    self._last_tap_at = now
                    self._single_press_generation += 1
                    generation = self._single_press_generation
                    self._single_press_timer = self._scheduler(
                        (self._double_press_ms + SINGLE_PRESS_GRACE_MS) / 1000,
                        lambda: self._single_press_elapsed(generation, settings),
                    )
                    self._logger.debug("Key up after %.0fms; waiting for a second tap", elapsed_ms)
                    return

        self._emit(gesture, settings)

    def cancel(self) -> None:
        """Drop every pending press without emitting it."""
        with self._lock:
            self._cancel_long_press_locked()
            self._cancel_single_press_locked()
            self._key_down_at = None
            self._last_tap_at = None
            self._long_press_fired = False

    def _long_press_elapsed(self, generation: int, settings: Settings) -> None:
        with self._lock:
            if (
                self._key_down_at is None
                or self._long_press_timer is None
                or generation != self._key_down_generation
            ):
                return
            self._long_press_timer = None
            self._long_press_fired = True
            self._cancel_single_press_locked()
            self._last_tap_at = None
        self._logger.debug("Long press watchdog fired")
        self._emit(GESTURE_LONG, settings)

    def _single_press_elapsed(self, generation: int, settings: Settings) -> None:
        with self._lock:
            if self._single_press_timer is None or generation != self._single_press_generation:
                return
            self._single_press_timer = None
            self._last_tap_at = None
        self._emit(GESTURE_SHORT, settings)

    def _emit(self, gesture: str, settings: Settings) -> None:
        self._logger.debug("Gesture: %s", gesture)
        try:
            self._on_gesture(gesture, settings)
        except Exception as error:
            self._logger.error("Gesture handler failed for %s: %s", gesture, error, exc_info=True)

    def _cancel_long_press_locked(self) -> None:
        if self._long_press_timer is not None:
            self._long_press_timer.cancel()
            self._long_press_timer = None

    def _cancel_single_press_locked(self) -> None:
        if self._single_press_timer is not None:
            self._single_press_timer.cancel()
            self._single_press_timer = None
