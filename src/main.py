import logging
import signal
import sys
from dataclasses import replace
from typing import Optional

from app_config import AppConfigurationError, load_app_config
from app_config_parser import resolve_log_level
from audio import AudioConfig, AudioConfigurationError
from contracts.ui_protocol import COMMAND_SHUTDOWN
from routine import (
    DEFAULT_ROUTINE,
    InvalidDefinitionError,
    RoutineTimings,
    load_routine_file,
)
from runtime import EngineOptions, RuntimeEngine
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("stretch_timer")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Route SIGTERM and SIGINT into the engine's command queue."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("stretch_timer").info(
            "%s received, stopping...", signal.Signals(signum).name
        )
        engine.submit(COMMAND_SHUTDOWN)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def create_audio_output(audio_config: AudioConfig, logger: logging.Logger):
    """Open the sound device, or return None so the routine runs silently."""
    if not audio_config.enabled:
        return None
    try:
        from audio.output import SoundDeviceAudioOutput
    except (ImportError, OSError) as error:
        # sounddevice raises OSError when the PortAudio library is missing.
        logger.warning("Audio cues disabled, sound device unavailable: %s", error)
        return None
    return SoundDeviceAudioOutput(
        output_device_index=audio_config.output_device_index,
        logger=logging.getLogger("audio.output"),
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Run the stretch routine timer until it completes or is interrupted."""
    args = sys.argv[1:] if argv is None else argv
    logger = setup_logging(level=logging.INFO)

    try:
        app_config = load_app_config(args[0] if args else None)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1
    logging.getLogger().setLevel(resolve_log_level(app_config.runtime.log_level))
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", app_config.source_file)

    routine_settings = app_config.routine
    try:
        stretches = (
            load_routine_file(routine_settings.file)
            if routine_settings.file
            else DEFAULT_ROUTINE
        )
        timings = RoutineTimings(
            stretch_transition_seconds=routine_settings.stretch_transition_seconds,
            side_transition_seconds=routine_settings.side_transition_seconds,
        )
    except InvalidDefinitionError as error:
        logger.error("Routine definition error: %s", error)
        return 1
    logger.info("Loaded routine with %d stretches", len(stretches))

    try:
        audio_config = AudioConfig.from_settings(app_config.audio)
    except AudioConfigurationError as error:
        logger.error("Audio configuration error: %s", error)
        return 1

    ui_server: Optional[UIServer] = None
    options = EngineOptions(
        auto_start=routine_settings.auto_start,
        exit_on_complete=routine_settings.exit_on_complete,
        progress_interval_seconds=app_config.runtime.progress_interval_seconds,
    )
    if app_config.ui_server.enabled:
        try:
            server_config = UIServerConfig.from_settings(app_config.ui_server)
        except ServerConfigurationError as error:
            logger.error("UI server configuration error: %s", error)
            return 1
        if not server_config.uses_bundled_page:
            logger.info("Serving custom UI page: %s", server_config.index_file)
        ui_server = UIServer(config=server_config, logger=logging.getLogger("ui_server"))
    elif not options.auto_start:
        logger.info("UI server disabled; starting the routine immediately")
        options = replace(options, auto_start=True)

    engine = RuntimeEngine(
        stretches,
        timings=timings,
        ui_server=ui_server,
        audio_output=create_audio_output(audio_config, logger),
        audio_config=audio_config,
        options=options,
        logger=logging.getLogger("runtime"),
    )

    try:
        if ui_server is not None:
            ui_server.set_command_handler(engine.submit)
            try:
                ui_server.start()
            except RuntimeError as error:
                logger.error("UI server failed to start: %s", error)
                return 1
            logger.info(
                "Open http://%s:%d to follow the routine",
                ui_server.host,
                ui_server.port,
            )
        setup_signal_handlers(engine)
        return engine.run()
    finally:
        if ui_server:
            logger.info("Stopping UI server...")
            ui_server.stop(timeout_seconds=5.0)


if __name__ == "__main__":
    sys.exit(main())
