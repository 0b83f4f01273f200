"""
Playful Environment Designer - Main Entry Point

Sketch playful, climate-adaptive interventions over a site photo and turn
them into concept images.

Usage:
    python -m playful_environment.main
"""

import os
import sys
from PyQt6.QtWidgets import QApplication

from .config import Config, FeatureFlags, ServiceSettings
from .events.event_bus import get_event_bus
from .services import CollaboratorServices
from .utils.logging_config import LoggingConfig


def setup_application() -> QApplication:
    """
    Initialize and configure the Qt application

    Returns:
        Configured QApplication instance
    """
    app = QApplication(sys.argv)

    # Set application metadata
    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(Config.APP_VERSION)
    app.setOrganizationName(Config.APP_AUTHOR)
    app.setStyle("Fusion")

    # Initialize event bus (singleton)
    get_event_bus()

    return app


def main():
    """
    Main entry point for Playful Environment Designer

    Creates the application, sets up the main window, and runs the event loop.
    """
    # Setup logging first
    LoggingConfig.setup_logging(
        Config.get_log_dir(),
        console_level=LoggingConfig.parse_level(os.environ.get("PLAYFUL_LOG_LEVEL")),
    )

    logger = LoggingConfig.get_logger(__name__)
    logger.info(f"Starting {Config.APP_NAME} {Config.APP_VERSION}...")

    flags = FeatureFlags.from_environment()
    settings = ServiceSettings.from_environment()
    services = CollaboratorServices.from_settings(settings)
    logger.info(f"Features: {flags}")
    for name, service in (("OpenAI", services.suggestions), ("Gemini", services.concepts),
                          ("Airtable", services.interventions)):
        if not service.is_configured:
            logger.warning(f"{name} credentials are not configured")

    app = setup_application()

    # Create and show main window
    from .widgets.main_window import MainWindow
    window = MainWindow(flags=flags, services=services)
    window.show()

    logger.info("Application started successfully!")

    # Run event loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
