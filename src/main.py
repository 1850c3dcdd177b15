import logging
import signal
import sys
import time
from pathlib import Path

if __package__ is None or __package__ == "":
    sys.path.insert(0, str(Path(__file__).resolve().parent))

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from runtime import RuntimeBootstrap, RuntimeEngine
from server import ServerConfigurationError, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_sync")


def main() -> int:
    """Run the tracker, tick scheduler, and UI server until interrupted."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        logger.info("Loaded runtime config: %s", config_path)
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        return 1

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            ui_server_config=ui_server_config,
        )
    )

    shutdown = False

    def handle_signal(signum, frame) -> None:
        del frame
        nonlocal shutdown
        logger.info("Signal %s received, stopping.", signal.Signals(signum).name)
        shutdown = True

    try:
        engine.start()
        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)
        logger.info("Press Ctrl+C to stop.")

        while not shutdown:
            time.sleep(0.2)

    except KeyboardInterrupt:
        logger.info("Stopping by user request.")
    except RuntimeError as error:
        logger.error("Startup failed: %s", error)
        return 1
    finally:
        engine.stop()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
