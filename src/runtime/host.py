"""Routes UI client messages to per-instance workflow controllers."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from contracts.ui_protocol import (
    CLIENT_APPEAR,
    CLIENT_DISAPPEAR,
    CLIENT_KEY_DOWN,
    CLIENT_KEY_UP,
    CLIENT_PRESS,
    CLIENT_PREVIEW_SOUND,
    CLIENT_SETTINGS,
    CLIENT_STOP_SOUND,
    DEFAULT_INSTANCE_ID,
    EVENT_ERROR,
    EVENT_PLAYBACK_STARTED,
    EVENT_PLAYBACK_STOPPED,
    GESTURE_DOUBLE,
    GESTURE_LONG,
    GESTURE_SHORT,
)
from pomodoro import DEFAULT_SETTINGS, WorkflowSettings

from .controller import WorkflowController
from .countdown import CountdownTimer
from .display import ButtonDisplay
from .effects import CompletionEffects, EffectsDependencies, FeedbackSoundPlayer
from .gestures import (
    DEFAULT_DOUBLE_PRESS_MS,
    DEFAULT_LONG_PRESS_MS,
    PressClassifier,
    Scheduler,
    thread_scheduler,
)
from .ui import RuntimeUIPublisher
PREVIEW_PLAYBACK_ID = "preview"


def _default_countdown(instance_id: str) -> CountdownTimer:
    return CountdownTimer(name=f"countdown-{instance_id}")


@dataclass
class ButtonInstance:
    controller: WorkflowController
    classifier: PressClassifier
    countdown: CountdownTimer
    display: ButtonDisplay


class ButtonHost:
    """Owns the controller and press classifier of every visible button."""

    def __init__(
        self,
        ui: RuntimeUIPublisher,
        *,
        executor: concurrent.futures.Executor,
        sound_player: Optional[FeedbackSoundPlayer] = None,
        default_settings: WorkflowSettings = DEFAULT_SETTINGS,
        long_press_ms: int = DEFAULT_LONG_PRESS_MS,
        double_press_ms: int = DEFAULT_DOUBLE_PRESS_MS,
        countdown_factory: Callable[[str], CountdownTimer] = _default_countdown,
        scheduler: Scheduler = thread_scheduler,
        logger: Optional[logging.Logger] = None,
    ):
        self._ui = ui
        self._executor = executor
        self._sound_player = sound_player
        self._default_settings = default_settings
        self._long_press_ms = long_press_ms
        self._double_press_ms = double_press_ms
        self._countdown_factory = countdown_factory
        self._scheduler = scheduler
        self._logger = logger or logging.getLogger("host")
        self._instances: dict[str, ButtonInstance] = {}
        self._lock = threading.Lock()

    @property
    def instance_ids(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._instances)

    def instance(self, instance_id: str) -> Optional[ButtonInstance]:
        with self._lock:
            return self._instances.get(instance_id)

    def handle_message(self, message: Mapping[str, Any]) -> None:
        message_type = message.get("type")
        instance_id = str(message.get("instance") or DEFAULT_INSTANCE_ID)
        raw_settings = message.get("settings")
        settings = raw_settings if isinstance(raw_settings, Mapping) else None

        if message_type == CLIENT_APPEAR:
            self._get_or_create(instance_id).controller.appear(settings)
        elif message_type == CLIENT_DISAPPEAR:
            existing = self.instance(instance_id)
            if existing is not None:
                existing.controller.disappear()
        elif message_type == CLIENT_KEY_DOWN:
            self._get_or_create(instance_id).classifier.key_down(settings)
        elif message_type == CLIENT_KEY_UP:
            self._get_or_create(instance_id).classifier.key_up(settings)
        elif message_type == CLIENT_PRESS:
            self.dispatch_gesture(instance_id, str(message.get("gesture", "")), settings)
        elif message_type == CLIENT_SETTINGS:
            self._get_or_create(instance_id).controller.settings_changed(settings)
        elif message_type == CLIENT_PREVIEW_SOUND:
            self._preview_sound(
                instance_id,
                str(message.get("file_path") or ""),
                str(message.get("playback_id") or PREVIEW_PLAYBACK_ID),
            )
        elif message_type == CLIENT_STOP_SOUND:
            self._stop_sound(
                instance_id,
                str(message.get("playback_id") or PREVIEW_PLAYBACK_ID),
            )
        else:
            self._logger.warning("Ignoring UI message of unknown type: %r", message_type)

    def dispatch_gesture(
        self,
        instance_id: str,
        gesture: str,
        settings: Optional[Mapping[str, Any]] = None,
    ) -> None:
        controller = self._get_or_create(instance_id).controller
        if gesture == GESTURE_SHORT:
            controller.short_press(settings)
        elif gesture == GESTURE_DOUBLE:
            controller.double_press(settings)
        elif gesture == GESTURE_LONG:
            controller.long_press(settings)
        else:
            self._logger.warning("[%s] Ignoring unknown gesture: %r", instance_id, gesture)

    def shutdown(self) -> None:
        with self._lock:
            instances = list(self._instances.items())
            self._instances.clear()
        for instance_id, instance in instances:
            self._dispose(instance_id, instance)
        self._logger.info("Button host stopped (%d instance(s) disposed)", len(instances))

    def _get_or_create(self, instance_id: str) -> ButtonInstance:
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                instance = self._create(instance_id)
                self._instances[instance_id] = instance
                self._logger.info("Button instance created: %s", instance_id)
            return instance

    def _create(self, instance_id: str) -> ButtonInstance:
        display = ButtonDisplay(instance_id, self._ui)
        countdown = self._countdown_factory(instance_id)
        holder: dict[str, WorkflowController] = {}

        def effects_factory(on_finished: Callable[[int], None]) -> CompletionEffects:
            dependencies = EffectsDependencies(
                display=display,
                sound_player=self._sound_player,
                executor=self._executor,
                settings=lambda: holder["controller"].settings,
                logger=logging.getLogger("effects"),
            )
            return CompletionEffects(dependencies, on_finished)

        controller = WorkflowController(
            instance_id,
            countdown=countdown,
            display=display,
            effects_factory=effects_factory,
            default_settings=self._default_settings,
        )
        holder["controller"] = controller
        display.set_cycle_label(controller.cycle_label)

        classifier = PressClassifier(
            lambda gesture, settings: self.dispatch_gesture(instance_id, gesture, settings),
            long_press_ms=self._long_press_ms,
            double_press_ms=self._double_press_ms,
            scheduler=self._scheduler,
        )
        return ButtonInstance(
            controller=controller,
            classifier=classifier,
            countdown=countdown,
            display=display,
        )

    def _dispose(self, instance_id: str, instance: ButtonInstance) -> None:
        instance.classifier.cancel()
        instance.controller.dispose()
        instance.countdown.close()
        self._logger.info("Button instance disposed: %s", instance_id)

    def _preview_sound(self, instance_id: str, file_path: str, playback_id: str) -> None:
        player = self._sound_player
        if player is None or not file_path:
            self._ui.publish(EVENT_PLAYBACK_STOPPED, instance=instance_id, playback_id=playback_id)
            return

        self._ui.publish(EVENT_PLAYBACK_STARTED, instance=instance_id, playback_id=playback_id)

        def play() -> None:
            try:
                player.play_file(file_path, playback_id)
            except Exception as error:
                self._logger.error("Sound preview failed for %s: %s", file_path, error)
                self._ui.publish(EVENT_ERROR, instance=instance_id, message=str(error))
            finally:
                self._ui.publish(
                    EVENT_PLAYBACK_STOPPED,
                    instance=instance_id,
                    playback_id=playback_id,
                )

        self._executor.submit(play)

    def _stop_sound(self, instance_id: str, playback_id: str) -> None:
        stop = getattr(self._sound_player, "stop", None)
        if stop is not None:
            try:
                stop()
            except Exception as error:
                self._logger.error("Stopping sound %s failed: %s", playback_id, error)
        self._ui.publish(EVENT_PLAYBACK_STOPPED, instance=instance_id, playback_id=playback_id)
