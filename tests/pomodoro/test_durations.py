import unittest

from pomodoro import WorkflowSettings, parse_duration_seconds, seconds_for


class ParseDurationSecondsTests(unittest.TestCase):
    def test_clock_strings_are_minutes_and_seconds(self) -> None:
        self.assertEqual(1500, parse_duration_seconds("25:00"))
        self.assertEqual(90, parse_duration_seconds("1:30"))
        self.assertEqual(300, parse_duration_seconds("05:00"))
        self.assertEqual(5, parse_duration_seconds("0:05"))

    def test_numbers_are_minutes_rounded_to_the_nearest_second(self) -> None:
        self.assertEqual(1500, parse_duration_seconds(25))
        self.assertEqual(90, parse_duration_seconds(1.5))
        self.assertEqual(90, parse_duration_seconds("1.5"))
        # 0.0125 min = 0.75 s -> 1 s, 0.0075 min = 0.45 s -> 0 s
        self.assertEqual(1, parse_duration_seconds(0.0125))
        self.assertEqual(0, parse_duration_seconds(0.0075))

    def test_half_second_rounds_up(self) -> None:
        # 0.025 min is exactly 1.5 s.
        self.assertEqual(2, parse_duration_seconds(0.025))

    def test_malformed_input_degrades_to_zero(self) -> None:
        self.assertEqual(0, parse_duration_seconds("abc"))
        self.assertEqual(0, parse_duration_seconds(""))
        self.assertEqual(0, parse_duration_seconds(None))
        self.assertEqual(0, parse_duration_seconds(True))
        self.assertEqual(0, parse_duration_seconds(["25"]))
        self.assertEqual(0, parse_duration_seconds(float("nan")))
        self.assertEqual(0, parse_duration_seconds(float("inf")))

    def test_non_numeric_clock_components_count_as_zero(self) -> None:
        self.assertEqual(30, parse_duration_seconds("x:30"))
        self.assertEqual(120, parse_duration_seconds("2:zz"))
        self.assertEqual(0, parse_duration_seconds(":"))

    def test_negative_values_clamp_to_zero(self) -> None:
        self.assertEqual(0, parse_duration_seconds(-5))
        self.assertEqual(0, parse_duration_seconds("-1:00"))
        self.assertEqual(0, parse_duration_seconds("-3"))


class SecondsForTests(unittest.TestCase):
    def test_resolves_each_phase_from_settings(self) -> None:
        settings = WorkflowSettings(
            work_duration="1:30",
            short_break_duration=2,
            long_break_duration="10:00",
        )

        self.assertEqual(90, seconds_for("work", settings))
        self.assertEqual(120, seconds_for("shortBreak", settings))
        self.assertEqual(600, seconds_for("longBreak", settings))

    def test_unknown_phase_is_zero(self) -> None:
        self.assertEqual(0, seconds_for("lunch", WorkflowSettings()))


if __name__ == "__main__":
    unittest.main()
