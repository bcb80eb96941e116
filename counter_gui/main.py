"""
Counter GUI - PySide6 client for the counter backend.

This module provides the entry point that:
- Configures logging and loads configuration (JSON file, env vars, defaults)
- Wires CounterApiClient and CounterController through the ServiceContainer
- Shows CounterWindow and initializes the counter once the event loop runs

Architecture:
- Services: CounterApiClient (HTTP), CounterController (state machine)
- Models: Counter, ControllerState (immutable, changed through reduce())
- CounterWindow: thin view re-rendered on every state change

Dependencies:
- PySide6: GUI framework
- requests: HTTP client for the backend
"""
import os
import sys
import logging
import argparse

from PySide6 import QtCore, QtWidgets

from counter_gui.config import ConfigManager, configure_logging

configure_logging()  # Uses LOG_LEVEL env var or defaults to 'INFO'

logger = logging.getLogger(__name__)

from counter_gui.counter_window import CounterWindow
from counter_gui.exceptions import ConfigurationError
from counter_gui.services.service_container import ServiceContainer


def main(argv=None):
    """Main entry point for the Counter GUI application.

    Parses --config/--backend-url, creates the QApplication and main window,
    then enters the Qt event loop.
    """
    parser = argparse.ArgumentParser(description='Counter GUI')
    parser.add_argument('--config', help='Path to a JSON config file')
    parser.add_argument('--backend-url', help='Override the backend base URL')
    args, qt_args = parser.parse_known_args(argv if argv is not None else sys.argv[1:])

    config_manager = ConfigManager(config_file=args.config)
    if args.backend_url:
        config_manager.backend_settings.base_url = args.backend_url
    configure_logging(config_manager.app_settings.log_level)

    logger.info(f"Starting counter GUI (cwd={os.getcwd()}, backend={config_manager.backend_settings.base_url})")
    container = ServiceContainer()
    try:
        container.initialize_services(config_manager)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration ({e.setting_name}={e.setting_value!r}): {e}")
        return 2

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([sys.argv[0]] + qt_args)
    win = CounterWindow(config_manager=config_manager, service_container=container)
    win.show()
    # initialize after the window is on screen so the "Initializing" page is visible
    QtCore.QTimer.singleShot(0, win.start)
    logger.info('GUI shown; entering Qt event loop')
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
