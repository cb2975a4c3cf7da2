import logging
import signal
import sys
from typing import Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from idle import build_idle_detector
from runtime import EventJournal, RuntimeBootstrap, RuntimeEngine
from server import ServerConfigurationError, UIServer, UIServerConfig
from timekeeper import BreakScheduler, ScheduleConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("eagleeye")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("eagleeye").info("%s received, stopping...", signal_name)
        engine.request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def main() -> int:
    """Run the break reminder scheduler."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config()
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(app_config.runtime.log_level)
    if app_config.source_file:
        logger.info("Loaded config: %s", app_config.source_file)
    else:
        logger.info("No config file at %s; using defaults", config_path)

    schedule = ScheduleConfig.from_settings(app_config.schedule, app_config.idle)
    idle_detector = build_idle_detector(
        enabled=schedule.idle.enabled,
        logger=logging.getLogger("idle"),
    )
    scheduler = BreakScheduler(
        schedule,
        tick_interval_seconds=app_config.runtime.tick_interval_seconds,
        idle_detector=idle_detector,
        logger=logging.getLogger("timekeeper"),
    )

    # Optional websocket bridge for overlay and tray clients
    ui_server: Optional[UIServer] = None
    ui_server_config: Optional[UIServerConfig] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")

    if ui_server_config and ui_server_config.enabled:
        ui_server = UIServer(
            config=ui_server_config,
            logger=logging.getLogger("ui_server"),
        )

    journal: Optional[EventJournal] = None
    if app_config.runtime.journal_file:
        journal = EventJournal(
            app_config.runtime.journal_file,
            logger=logging.getLogger("runtime.journal"),
        )
        logger.info("Recording events to %s", journal.path)

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            scheduler=scheduler,
            ui_server=ui_server,
            journal=journal,
        )
    )

    if ui_server is not None:
        ui_server.set_command_handler(engine.handle_command)
        try:
            logger.info("Starting UI server...")
            ui_server.start(timeout_seconds=5.0)
            logger.info(
                "UI server ready at ws://%s:%d%s",
                ui_server.host,
                ui_server.port,
                ui_server.websocket_path,
            )
        except Exception as error:
            logger.error("UI server startup failed: %s", error)
            logger.warning("Continuing without UI server.")

    setup_signal_handlers(engine)
    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
