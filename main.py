#!/usr/bin/env python3
"""
Network Topology Editor - Main Entry Point

A pannable, zoomable canvas for laying out network devices and the
links between them, optionally over an uploaded map image.

Usage:
    python main.py
    python main.py --debug              # Enable debug logging
    python main.py --config PATH        # Use another settings file
    python main.py --store PATH         # Keep the topology in another file
"""

import sys
import logging
import argparse
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QPalette, QColor

from services import (
    JsonFileKeyValueStore, PersistenceAdapter, TopologyEditor,
    get_settings, shortcuts_from_settings,
)
from views.main_window import MainWindow


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Log startup message
    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def setup_application() -> QApplication:
    """Configure the Qt application."""
    # High DPI support
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Network Topology Editor")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("topology-editor")

    # Set default font
    font = QFont("SF Pro Display", 10)
    if not font.exactMatch():
        font = QFont("Segoe UI", 10)
    if not font.exactMatch():
        font = QFont("Helvetica Neue", 10)
    app.setFont(font)

    # Dark palette to match the canvas
    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor("#111827"))
    palette.setColor(QPalette.ColorRole.WindowText, QColor("#F9FAFB"))
    palette.setColor(QPalette.ColorRole.Base, QColor("#1F2937"))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor("#374151"))
    palette.setColor(QPalette.ColorRole.Text, QColor("#E5E7EB"))
    palette.setColor(QPalette.ColorRole.Button, QColor("#1F2937"))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor("#E5E7EB"))
    palette.setColor(QPalette.ColorRole.Highlight, QColor("#0369A1"))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)

    return app


def create_editor(settings_manager, store_path: str = None) -> TopologyEditor:
    """Build the editor and its persistence from the current settings."""
    store = JsonFileKeyValueStore(store_path or settings_manager.get_store_path())
    persistence = PersistenceAdapter(store, key_prefix=settings_manager.storage.key_prefix)

    editor_settings = settings_manager.editor
    editor = TopologyEditor(
        persistence=persistence,
        zoom_intensity=editor_settings.zoom_intensity,
        link_hit_width=editor_settings.link_hit_width,
        shortcuts=shortcuts_from_settings(settings_manager.shortcuts),
    )
    editor.load()
    return editor


def main():
    """Main entry point."""
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Network Topology Editor')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', metavar='PATH', help='Settings file to use')
    parser.add_argument('--store', metavar='PATH', help='Topology store file to use')
    args = parser.parse_args()

    # Setup logging
    setup_logging(debug=args.debug)

    settings_manager = get_settings(args.config)
    editor = create_editor(settings_manager, args.store)

    app = setup_application()

    # Create and show main window
    window = MainWindow(editor, settings_manager)
    window.show()

    # Run event loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
