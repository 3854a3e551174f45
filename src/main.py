import concurrent.futures
import logging
import signal
import sys
import threading
from typing import Optional

from app_config import (
    AppConfig,
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)
from audio import AudioError, SoundPlayer
from contracts.ui_protocol import STATE_ERROR, STATE_IDLE
from pomodoro import WorkflowSettings
from runtime import ButtonHost, RuntimeUIPublisher
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_button")


def setup_signal_handlers(shutdown: threading.Event, logger: logging.Logger) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        shutdown.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def workflow_defaults(app_config: AppConfig) -> WorkflowSettings:
    pomodoro = app_config.pomodoro
    return WorkflowSettings(
        work_duration=pomodoro.work_duration,
        short_break_duration=pomodoro.short_break_duration,
        long_break_duration=pomodoro.long_break_duration,
        cycles_before_long_break=pomodoro.cycles_before_long_break,
        pause_at_phase_boundary=pomodoro.pause_at_phase_boundary,
        enable_sound=pomodoro.enable_sound,
        work_end_sound_path=pomodoro.work_end_sound_path,
        break_end_sound_path=pomodoro.break_end_sound_path,
        completion_hold_seconds=pomodoro.completion_hold_seconds,
    )


def create_sound_player(app_config: AppConfig, logger: logging.Logger) -> Optional[SoundPlayer]:
    if not app_config.audio.enabled:
        logger.info("Audio disabled via [audio].enabled=false")
        return None

    try:
        # Loads PortAudio; only imported when sound output is wanted.
        from audio.output import SoundDeviceAudioOutput
    except OSError as error:
        logger.warning("Audio output unavailable, continuing without sound: %s", error)
        return None

    output = SoundDeviceAudioOutput(
        output_device_index=app_config.audio.output_device,
        logger=logging.getLogger("audio"),
    )
    return SoundPlayer(output, logger=logging.getLogger("audio"))


def main() -> int:
    """Main entry point."""
    logger = setup_logging()

    try:
        app_config = load_app_config(str(resolve_config_path()))
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except (AppConfigurationError, ServerConfigurationError) as error:
        logger.error("Configuration error: %s", error)
        return 1

    logger.info("Loaded config: %s", app_config.source_file)

    ui_server: Optional[UIServer] = None
    if ui_server_config.enabled:
        ui_server = UIServer(
            config=ui_server_config,
            logger=logging.getLogger("ui_server"),
        )
    else:
        logger.info("UI server disabled via [ui_server].enabled=false")

    ui = RuntimeUIPublisher(ui_server)
    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=4,
        thread_name_prefix="feedback",
    )
    host = ButtonHost(
        ui,
        executor=executor,
        sound_player=create_sound_player(app_config, logger),
        default_settings=workflow_defaults(app_config),
        long_press_ms=app_config.input.long_press_ms,
        double_press_ms=app_config.input.double_press_ms,
        logger=logging.getLogger("host"),
    )

    shutdown = threading.Event()
    setup_signal_handlers(shutdown, logger)

    try:
        if ui_server is not None:
            ui_server.set_message_handler(host.handle_message)
            ui_server.start()
            logger.info(
                "Open http://%s:%d to use the timer button.",
                ui_server.host,
                ui_server.port,
            )
        ui.publish_state(STATE_IDLE, message="Ready")

        while not shutdown.wait(0.25):
            if ui_server is not None and not ui_server.is_running:
                logger.error("UI server stopped unexpectedly")
                ui.publish_state(STATE_ERROR, message="UI server stopped unexpectedly")
                return 1
        return 0

    except KeyboardInterrupt:
        logger.info("Stopping by user request.")
        return 0

    except (AudioError, RuntimeError) as error:
        logger.error("Runtime error: %s", error, exc_info=True)
        return 1

    finally:
        logger.info("Disposing button instances...")
        host.shutdown()
        executor.shutdown(wait=False, cancel_futures=True)
        if ui_server is not None:
            logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                logger.error("Error stopping UI server: %s", error, exc_info=True)


if __name__ == "__main__":
    sys.exit(main())
