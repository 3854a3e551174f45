"""Completion and reset feedback: ring animation and sound run side by side."""

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from pomodoro.constants import EFFECT_WORK
from pomodoro.settings import WorkflowSettings

COMPLETION_FRAME_INTERVAL_MS = 100
COMPLETION_ROTATION_STEP_DEG = 20
RESET_FLASH_FRAMES = 4
RESET_FLASH_INTERVAL_MS = 120
COMPLETION_PLAYBACK_ID = "timer-completion"


class FeedbackDisplay(Protocol):
    def show_completion_frame(self, kind: str, angle_deg: int) -> None:
        ...

    def show_reset_frame(self, flash_on: bool) -> None:
        ...

    def restore_last_frame(self) -> None:
        ...


class FeedbackSoundPlayer(Protocol):
    def play_file(self, path: str, playback_id: str) -> None:
        ...

    def play_reset_cue(self) -> None:
        ...


@dataclass(frozen=True)
class EffectsDependencies:
    """Collaborators shared by the feedback effects of one button instance."""
    display: FeedbackDisplay
    sound_player: Optional[FeedbackSoundPlayer]
    executor: concurrent.futures.Executor
    settings: Callable[[], WorkflowSettings]
    logger: logging.Logger
    sleep: Callable[[float], None] = time.sleep


class CompletionEffects:
    """Plays completion and reset feedback for one button instance.

    A completion runs the ring animation and the end sound as two tasks and
    calls `on_finished(generation)` once both are done, so the effective hold
    is the longer of the configured hold and the sound. The generation is the
    one the caller stamped the completion with. Reset feedback is
    fire-and-continue.
    """

    def __init__(self, dependencies: EffectsDependencies, on_finished: Callable[[int], None]):
        self._deps = dependencies
        self._on_finished = on_finished
        self._joiner = concurrent.futures.ThreadPoolExecutor(
            max_workers=2,
            thread_name_prefix="effects-join",
        )

    def show_completion_with_sound(
        self,
        kind: str,
        hold_ms: int,
        generation: int = 0,
    ) -> concurrent.futures.Future:
        return self._joiner.submit(
            self._run_completion,
            kind,
            max(0, int(hold_ms)),
            generation,
        )

    def show_reset_feedback(self) -> None:
        deps = self._deps
        flash = deps.executor.submit(self._flash_reset)
        flash.add_done_callback(self._log_failure("Reset flash"))

        settings = deps.settings()
        if settings.enable_sound and deps.sound_player is not None:
            cue = deps.executor.submit(deps.sound_player.play_reset_cue)
            cue.add_done_callback(self._log_failure("Reset sound"))

    def close(self) -> None:
        self._joiner.shutdown(wait=False)

    def _run_completion(self, kind: str, hold_ms: int, generation: int) -> None:
        deps = self._deps
        deps.logger.debug("Completion effects started: kind=%s hold=%dms", kind, hold_ms)
        tasks = {
            deps.executor.submit(self._animate_completion, kind, hold_ms): "animation",
            deps.executor.submit(self._play_completion_sound, kind): "sound",
        }
        done, _ = concurrent.futures.wait(tasks)
        for future in done:
            error = future.exception()
            if error is not None:
                deps.logger.error(
                    "Completion %s failed: %s",
                    tasks[future],
                    error,
                    exc_info=error,
                )

        deps.logger.debug("Completion effects finished: kind=%s", kind)
        try:
            self._on_finished(generation)
        except Exception as error:
            deps.logger.error("Completion callback failed: %s", error, exc_info=True)

    def _animate_completion(self, kind: str, hold_ms: int) -> None:
        deps = self._deps
        deadline = time.monotonic() + hold_ms / 1000
        angle = 0
        while True:
            angle = (angle + COMPLETION_ROTATION_STEP_DEG) % 360
            try:
                deps.display.show_completion_frame(kind, angle)
            except Exception as error:
                deps.logger.warning("Completion frame failed: %s", error)

            left = deadline - time.monotonic()
            if left <= 0:
                return
            deps.sleep(min(COMPLETION_FRAME_INTERVAL_MS / 1000, left))

    def _play_completion_sound(self, kind: str) -> None:
        deps = self._deps
        settings = deps.settings()
        if not settings.enable_sound or deps.sound_player is None:
            return

        if kind == EFFECT_WORK:
            path = settings.work_end_sound_path
        else:
            path = settings.break_end_sound_path
        if path:
            deps.sound_player.play_file(path, COMPLETION_PLAYBACK_ID)

    def _flash_reset(self) -> None:
        deps = self._deps
        for frame in range(RESET_FLASH_FRAMES):
            deps.display.show_reset_frame(flash_on=frame % 2 == 0)
            deps.sleep(RESET_FLASH_INTERVAL_MS / 1000)
        deps.display.restore_last_frame()

    def _log_failure(self, label: str) -> Callable[[concurrent.futures.Future], None]:
        def callback(future: concurrent.futures.Future) -> None:
            error = future.exception()
            if error is not None:
                self._deps.logger.error("%s failed: %s", label, error, exc_info=error)

        return callback
