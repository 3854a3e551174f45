import unittest
from typing import Callable

from contracts.ui_protocol import GESTURE_DOUBLE, GESTURE_LONG, GESTURE_SHORT
from runtime.gestures import PressClassifier


class _Handle:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _FakeScheduler:
    def __init__(self):
        self.handles: list[_Handle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(delay, callback)
        self.handles.append(handle)
        return handle

    def pending(self) -> list[_Handle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def fire_pending(self) -> None:
        for handle in self.pending():
            handle.cancelled = True
            handle.callback()


class _Clock:
    def __init__(self):
        self.now = 10.0

    def __call__(self) -> float:
        return self.now


class PressClassifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = _FakeScheduler()
        self.clock = _Clock()
        self.gestures: list[tuple] = []
        self.classifier = PressClassifier(
            lambda gesture, settings: self.gestures.append((gesture, settings)),
            long_press_ms=2000,
            double_press_ms=320,
            scheduler=self.scheduler,
            clock=self.clock,
        )

    def _tap(self, hold: float = 0.1, settings=None) -> None:
        self.classifier.key_down(settings)
        self.clock.now += hold
        self.classifier.key_up(settings)

    def test_single_tap_is_emitted_after_double_press_window(self) -> None:
        self._tap(settings={"work_duration": "10:00"})

        self.assertEqual([], self.gestures)
        single = self.scheduler.pending()[-1]
        self.assertAlmostEqual(0.34, single.delay)

        self.scheduler.fire_pending()

        self.assertEqual([(GESTURE_SHORT, {"work_duration": "10:00"})], self.gestures)

    def test_second_tap_inside_window_is_double_press(self) -> None:
        self._tap()
        pending_single = self.scheduler.pending()[-1]
        self.clock.now += 0.2
        self._tap()

        self.assertEqual([(GESTURE_DOUBLE, None)], self.gestures)
        self.assertTrue(pending_single.cancelled)

        pending_single.callback()
        self.assertEqual([(GESTURE_DOUBLE, None)], self.gestures)

    def test_taps_outside_window_are_two_short_presses(self) -> None:
        self._tap()
        self.clock.now += 0.5
        self.scheduler.fire_pending()
        self._tap()
        self.scheduler.fire_pending()

        self.assertEqual([GESTURE_SHORT, GESTURE_SHORT], [gesture for gesture, _ in self.gestures])

    def test_long_press_fires_while_held_and_release_is_swallowed(self) -> None:
        self.classifier.key_down()
        watchdog = self.scheduler.pending()[-1]
        self.assertAlmostEqual(2.0, watchdog.delay)

        self.clock.now += 2.0
        self.scheduler.fire_pending()
        self.assertEqual([(GESTURE_LONG, None)], self.gestures)

        self.clock.now += 1.0
        self.classifier.key_up()
        self.scheduler.fire_pending()
        self.assertEqual([(GESTURE_LONG, None)], self.gestures)

    def test_release_after_threshold_without_watchdog_is_long_press(self) -> None:
        self.classifier.key_down()
        self.clock.now += 2.5
        self.classifier.key_up()

        self.assertEqual([(GESTURE_LONG, None)], self.gestures)
        self.assertEqual([], self.scheduler.pending())

    def test_stale_watchdog_of_previous_key_down_is_ignored(self) -> None:
        self.classifier.key_down()
        stale = self.scheduler.pending()[-1]
        self.classifier.key_up()
        self.classifier.key_down()

        stale.callback()

        self.assertEqual([], self.gestures)

    def test_cancel_drops_pending_presses(self) -> None:
        self._tap()
        self.classifier.cancel()

        self.assertEqual([], self.scheduler.pending())
        self.assertEqual([], self.gestures)

    def test_handler_errors_are_logged(self) -> None:
        def failing(gesture, settings):
            raise RuntimeError("boom")

        classifier = PressClassifier(failing, scheduler=self.scheduler, clock=self.clock)
        classifier.key_down()
        self.clock.now += 3.0

        with self.assertLogs("gestures", level="ERROR"):
            classifier.key_up()

    def test_rejects_invalid_thresholds(self) -> None:
        with self.assertRaises(ValueError):
            PressClassifier(lambda gesture, settings: None, long_press_ms=0)
        with self.assertRaises(ValueError):
            PressClassifier(lambda gesture, settings: None, double_press_ms=-1)


if __name__ == "__main__":
    unittest.main()
