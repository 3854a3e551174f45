import unittest

from contracts.ui_protocol import EVENT_BUTTON
from runtime.display import PAUSE_BLINK_COLOR, PHASE_COLORS, ButtonDisplay
from runtime.messages import cycle_label, format_time, status_message
from runtime.ui import RuntimeUIPublisher


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def publish_state(self, state: str, *, message=None, **payload):
        raise AssertionError("button frames never publish runtime state")


class ButtonDisplayTests(unittest.TestCase):
    def setUp(self) -> None:
        self.server = _UIServerStub()
        self.display = ButtonDisplay(
            "button-1",
            RuntimeUIPublisher(self.server),
            cycle_label=lambda: "2/4",
        )

    def _frames(self) -> list[dict[str, object]]:
        return [payload for kind, payload in self.server.events if kind == EVENT_BUTTON]

    def test_full_frame_carries_phase_color_title_and_progress(self) -> None:
        self.display.show_full("shortBreak", 300)

        frame = self._frames()[-1]
        self.assertEqual("button-1", frame["instance"])
        self.assertEqual("full", frame["mode"])
        self.assertEqual("5:00", frame["title"])
        self.assertEqual(PHASE_COLORS["shortBreak"], frame["color"])
        self.assertEqual(1.0, frame["progress"])
        self.assertEqual("2/4", frame["cycle"])
        self.assertEqual("Short break ready (5:00)", frame["message"])

    def test_running_frame_progress_is_remaining_fraction(self) -> None:
        self.display.update_running(750, 1500, "work")

        frame = self._frames()[-1]
        self.assertEqual("running", frame["mode"])
        self.assertEqual(0.5, frame["progress"])
        self.assertEqual("12:30", frame["title"])

    def test_paused_frame_blinks(self) -> None:
        self.display.show_paused(930, 1500, "work")

        frame = self._frames()[-1]
        self.assertEqual("paused", frame["mode"])
        self.assertEqual(PAUSE_BLINK_COLOR, frame["blink_color"])
        self.assertEqual("15:30", frame["title"])

    def test_hidden_display_publishes_nothing_but_remembers_last_frame(self) -> None:
        self.display.set_visible(False)
        self.display.update_running(60, 300, "shortBreak")
        self.assertEqual([], self._frames())

        self.display.set_visible(True)
        self.display.restore_last_frame()

        frame = self._frames()[-1]
        self.assertEqual("running", frame["mode"])
        self.assertEqual(60, frame["remaining_seconds"])

    def test_transient_frames_do_not_replace_last_countdown_frame(self) -> None:
        self.display.show_paused(100, 1500, "work")
        self.display.show_completion_frame("work", 40)
        self.display.show_reset_frame(flash_on=True)

        self.display.restore_last_frame()

        modes = [frame["mode"] for frame in self._frames()]
        self.assertEqual(["paused", "completion", "reset", "paused"], modes)
        self.assertEqual(40, self._frames()[1]["angle"])


class ButtonMessageTests(unittest.TestCase):
    def test_format_time(self) -> None:
        self.assertEqual("25:00", format_time(1500))
        self.assertEqual("0:09", format_time(9))
        self.assertEqual("0:00", format_time(-5))
        self.assertEqual("100:00", format_time(6000))

    def test_cycle_label_is_one_based_and_capped(self) -> None:
        self.assertEqual("1/4", cycle_label(0, 4))
        self.assertEqual("4/4", cycle_label(3, 4))
        self.assertEqual("4/4", cycle_label(4, 4))
        self.assertEqual("1/1", cycle_label(0, 0))

    def test_status_message_per_mode(self) -> None:
        self.assertEqual("Focus running (1:05 left)", status_message("running", "work", 65))
        self.assertEqual("Long break paused (2:00 left)", status_message("paused", "longBreak", 120))
        self.assertEqual("Reset", status_message("reset", "work", 0))


if __name__ == "__main__":
    unittest.main()
