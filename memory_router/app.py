"""Application entry point and setup for Memory Router."""

import logging
import sys

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from memory_router.core.config import load_config
from memory_router.core.controller import RoundController
from memory_router.core.history import ScoreHistory
from memory_router.core.preferences import PreferencesStore
from memory_router.ui.audio import AudioCues
from memory_router.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load config and stores, build the controller and window, and start the event loop."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Memory Router")
    app.setApplicationDisplayName("Memory Router")

    app_font = QFont("monospace")
    app_font.setStyleHint(QFont.Monospace)
    app_font.setPointSize(11)
    app.setFont(app_font)

    config = load_config()
    scoring = config.scoring
    history = ScoreHistory(limit=scoring.history_limit)
    preferences = PreferencesStore()
    audio = AudioCues(enabled=preferences.preferences.sound_on)

    controller = RoundController(config=config, history=history)
    window = MainWindow(
        controller=controller,
        history=history,
        preferences=preferences,
        audio=audio,
    )
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1200, geometry.width()), min(800, geometry.height()))
    window.show()
    logging.info("Memory Router ready (scores in %s)", history.file_path)

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
