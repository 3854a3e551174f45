import unittest

from pomodoro import DEFAULT_SETTINGS, WorkflowSettings, normalize_settings


class NormalizeSettingsTests(unittest.TestCase):
    def test_empty_payload_returns_defaults(self) -> None:
        self.assertIs(DEFAULT_SETTINGS, normalize_settings(None))
        self.assertIs(DEFAULT_SETTINGS, normalize_settings({}))

    def test_defaults_match_documented_values(self) -> None:
        self.assertEqual("25:00", DEFAULT_SETTINGS.work_duration)
        self.assertEqual("05:00", DEFAULT_SETTINGS.short_break_duration)
        self.assertEqual("10:00", DEFAULT_SETTINGS.long_break_duration)
        self.assertEqual(4, DEFAULT_SETTINGS.cycles_before_long_break)
        self.assertTrue(DEFAULT_SETTINGS.pause_at_phase_boundary)
        self.assertFalse(DEFAULT_SETTINGS.enable_sound)
        self.assertEqual(3000, DEFAULT_SETTINGS.completion_hold_ms)

    def test_string_flags_and_numbers_are_accepted(self) -> None:
        settings = normalize_settings(
            {
                "work_duration": "50:00",
                "cycles_before_long_break": "3",
                "pause_at_phase_boundary": "false",
                "enable_sound": "true",
                "completion_hold_seconds": "1.5",
                "work_end_sound_path": " /tmp/work.wav ",
            }
        )

        self.assertEqual("50:00", settings.work_duration)
        self.assertEqual(3, settings.cycles_before_long_break)
        self.assertIs(False, settings.pause_at_phase_boundary)
        self.assertTrue(settings.enable_sound)
        self.assertEqual(1500, settings.completion_hold_ms)
        self.assertEqual("/tmp/work.wav", settings.work_end_sound_path)

    def test_unusable_values_fall_back_per_field(self) -> None:
        defaults = WorkflowSettings(cycles_before_long_break=2, completion_hold_seconds=1.0)
        settings = normalize_settings(
            {
                "cycles_before_long_break": 0,
                "completion_hold_seconds": -4,
                "pause_at_phase_boundary": "maybe",
                "enable_sound": 1,
                "short_break_duration": True,
            },
            defaults=defaults,
        )

        self.assertEqual(2, settings.cycles_before_long_break)
        self.assertEqual(1.0, settings.completion_hold_seconds)
        self.assertTrue(settings.pause_at_phase_boundary)
        self.assertFalse(settings.enable_sound)
        self.assertEqual(defaults.short_break_duration, settings.short_break_duration)

    def test_blank_sound_path_clears_the_default(self) -> None:
        defaults = WorkflowSettings(break_end_sound_path="/sounds/break.wav")
        settings = normalize_settings({"break_end_sound_path": "  "}, defaults=defaults)
        self.assertIsNone(settings.break_end_sound_path)

    def test_malformed_duration_is_kept_and_resolves_later(self) -> None:
        settings = normalize_settings({"work_duration": "abc"})
        self.assertEqual("abc", settings.work_duration)


if __name__ == "__main__":
    unittest.main()
