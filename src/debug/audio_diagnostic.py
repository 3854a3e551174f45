"""Diagnostic tool to check feedback sounds on the configured output device."""

import logging
import sys

import sounddevice as sd

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from audio import AudioError, SoundPlayer, completion_chime
from audio.output import SoundDeviceAudioOutput


def setup_logging():
    """Configure console logging for the diagnostic tool."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
    )


def main():
    """List output devices and play every feedback sound once."""
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        app_config = load_app_config(str(resolve_config_path()))
    except AppConfigurationError as e:
        print(f"Error: {e}")
        return 1

    print("=== Feedback Sound Diagnostic Tool ===\n")
    print("Available output devices:")
    print(sd.query_devices())
    device = app_config.audio.output_device
    print(f"\nUsing output device: {device if device is not None else 'system default'}\n")

    player = SoundPlayer(
        SoundDeviceAudioOutput(output_device_index=device),
        logger=logger,
    )
    pomodoro = app_config.pomodoro
    sounds = [
        ("reset cue", None),
        ("completion chime", None),
        ("work end sound", pomodoro.work_end_sound_path),
        ("break end sound", pomodoro.break_end_sound_path),
    ]

    failures = 0
    for label, path in sounds:
        try:
            if label == "reset cue":
                print(f"▶ Playing {label}...")
                player.play_reset_cue()
            elif label == "completion chime":
                print(f"▶ Playing {label}...")
                player.play_clip(completion_chime(), "diagnostic")
            elif path:
                print(f"▶ Playing {label}: {path}")
                player.play_file(path, "diagnostic")
            else:
                print(f"- Skipping {label} (not configured)")
        except AudioError as error:
            failures += 1
            print(f"✗ {label} failed: {error}")

    if failures:
        print(f"\n{failures} sound(s) failed.")
        return 1

    print("\n✓ All configured sounds played.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
