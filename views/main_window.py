"""
Main application window.

Assembles the tool palette, the topology canvas and the property
panel around one TopologyEditor.
"""

import base64
import logging
import mimetypes
from pathlib import Path
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QToolBar, QLabel,
    QSplitter, QMessageBox, QFileDialog
)

from models import ToolMode
from services import TopologyEditor, EditorChange, SettingsManager
from .topology_canvas import TopologyCanvas
from .tool_palette import ToolPalette
from .property_panel import PropertyPanel

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.svg);;All Files (*)"


def image_file_to_data_url(path: str) -> str:
    """
    Read an image file and encode it as a base64 data URL.

    Raises:
        OSError: if the file cannot be read
        ValueError: if the file is not a recognizable image
    """
    mime, _ = mimetypes.guess_type(path)
    if not mime or not mime.startswith("image/"):
        raise ValueError(f"Not an image file: {Path(path).name}")

    raw = Path(path).read_bytes()
    if not QPixmap().loadFromData(raw):
        raise ValueError(f"Could not decode image: {Path(path).name}")

    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


class MainWindow(QMainWindow):
    """Main application window for the topology editor."""

    def __init__(self, editor: TopologyEditor, settings_manager: SettingsManager):
        super().__init__()
        self.editor = editor
        self.settings_manager = settings_manager

        self._setup_window()
        self._setup_menu()
        self._setup_toolbar()
        self._setup_central_widget()
        self._setup_status_bar()
        self._connect_signals()

        # Restore window geometry
        self._load_window_settings()

    def _load_window_settings(self):
        """Restore window geometry and state."""
        geometry, state = self.settings_manager.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        if state:
            self.restoreState(state)

    def _save_window_settings(self):
        """Save window geometry and state."""
        self.settings_manager.save_window_geometry(
            self.saveGeometry(),
            self.saveState()
        )

    def closeEvent(self, event):
        """Handle window close - save settings."""
        self._save_window_settings()
        super().closeEvent(event)

    def _setup_window(self):
        """Configure window properties."""
        self.setWindowTitle("Network Topology Editor")
        self.setMinimumSize(1000, 700)
        self.resize(1400, 900)

        self.setStyleSheet("""
            QMainWindow {
                background: #111827;
            }
            QSplitter::handle {
                background: #374151;
            }
            QSplitter::handle:horizontal {
                width: 1px;
            }
        """)

    def _setup_menu(self):
        """Create menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        upload_action = QAction("&Upload Background Map...", self)
        upload_action.setShortcut(QKeySequence.StandardKey.Open)
        upload_action.triggered.connect(self._on_upload_background)
        file_menu.addAction(upload_action)

        remove_bg_action = QAction("&Remove Background Map", self)
        remove_bg_action.triggered.connect(self._on_remove_background)
        file_menu.addAction(remove_bg_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Edit menu; single-key shortcuts are handled by the canvas
        edit_menu = menubar.addMenu("&Edit")

        delete_action = QAction("&Delete Selected", self)
        delete_action.triggered.connect(lambda: self.editor.delete_selected())
        edit_menu.addAction(delete_action)

        edit_menu.addSeparator()

        clear_action = QAction("&Clear All...", self)
        clear_action.triggered.connect(self._on_clear_all)
        edit_menu.addAction(clear_action)

        # View menu
        view_menu = menubar.addMenu("&View")

        reset_view_action = QAction("&Reset View", self)
        reset_view_action.setShortcut("Ctrl+R")
        reset_view_action.triggered.connect(lambda: self.editor.reset_view())
        view_menu.addAction(reset_view_action)

        self._overlay_action = QAction("Show &Hints", self)
        self._overlay_action.setCheckable(True)
        self._overlay_action.setChecked(self.settings_manager.editor.show_hint_overlay)
        self._overlay_action.toggled.connect(self._on_toggle_overlay)
        view_menu.addAction(self._overlay_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    def _setup_toolbar(self):
        """Create the map/view toolbar."""
        toolbar = QToolBar("Map", self)
        toolbar.setMovable(False)
        toolbar.setStyleSheet("""
            QToolBar {
                background: #1f2937;
                border-bottom: 1px solid #374151;
                padding: 6px 12px;
                spacing: 8px;
            }
            QToolButton {
                color: #e5e7eb;
                padding: 6px 12px;
                border-radius: 6px;
            }
            QToolButton:hover {
                background: #374151;
            }
        """)

        toolbar.addAction("Upload Map", self._on_upload_background)
        toolbar.addAction("Remove Map", self._on_remove_background)
        toolbar.addSeparator()
        toolbar.addAction("Reset View", lambda: self.editor.reset_view())
        toolbar.addSeparator()
        toolbar.addAction("Clear All", self._on_clear_all)

        self.addToolBar(toolbar)

    def _setup_central_widget(self):
        """Create the main layout with all panels."""
        central = QWidget()
        self.setCentralWidget(central)

        layout = QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        splitter = QSplitter(Qt.Orientation.Horizontal)

        # Left panel - Tools and devices
        self.tool_palette = ToolPalette()
        splitter.addWidget(self.tool_palette)

        # Center - Topology canvas
        editor_settings = self.settings_manager.editor
        self.canvas = TopologyCanvas(
            self.editor,
            grid_spacing=editor_settings.grid_spacing,
            show_overlay=editor_settings.show_hint_overlay,
        )
        splitter.addWidget(self.canvas)

        # Right panel - Properties
        self.property_panel = PropertyPanel(self.editor)
        splitter.addWidget(self.property_panel)

        splitter.setSizes([240, 900, 300])
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        splitter.setStretchFactor(2, 0)

        layout.addWidget(splitter)

    def _setup_status_bar(self):
        status = self.statusBar()
        status.setStyleSheet("QStatusBar { background: #1f2937; color: #9ca3af; }")

        self._counts_label = QLabel()
        status.addPermanentWidget(self._counts_label)
        self._update_counts()

    def _connect_signals(self):
        self.tool_palette.toolSelected.connect(self._on_tool_selected)
        self.canvas.editorChanged.connect(self._on_editor_changed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_tool_selected(self, mode: ToolMode):
        self.editor.set_tool_mode(mode)
        self.canvas.setFocus()

    def _on_editor_changed(self, change: EditorChange):
        if change & EditorChange.TOOL:
            self.tool_palette.set_active_mode(self.editor.tool_mode)
        if change & EditorChange.GRAPH:
            self._update_counts()

    def _update_counts(self):
        graph = self.editor.graph
        self._counts_label.setText(f"Devices: {len(graph.nodes)}  |  Links: {len(graph.links)}")

    def _on_toggle_overlay(self, checked: bool):
        self.canvas.set_show_overlay(checked)
        self.settings_manager.editor.show_hint_overlay = checked
        self.settings_manager.save()

    def _on_upload_background(self):
        """Pick an image file and use it as the background map."""
        path, _ = QFileDialog.getOpenFileName(self, "Upload Background Map", "", IMAGE_FILTER)
        if not path:
            return

        try:
            data_url = image_file_to_data_url(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Background upload failed: {e}")
            QMessageBox.warning(self, "Upload Failed", f"Could not load the image:\n{e}")
            return

        self.editor.set_background_image(data_url)
        self.statusBar().showMessage(f"Background map: {Path(path).name}", 3000)

    def _on_remove_background(self):
        if self.editor.background_image is None:
            return
        self.editor.set_background_image(None)
        self.statusBar().showMessage("Background map removed", 2000)

    def _on_clear_all(self):
        """Clear the topology after confirmation."""
        reply = QMessageBox.question(
            self,
            "Clear All",
            "Remove every device and link? The background map and view are reset too.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )

        if reply == QMessageBox.StandardButton.Yes:
            self.editor.clear_all()
            self.statusBar().showMessage("Topology cleared", 2000)

    def _on_about(self):
        QMessageBox.about(
            self,
            "About Network Topology Editor",
            "Network Topology Editor\n\n"
            "Place devices, connect them with links and lay them out\n"
            "over a map. Changes are saved automatically."
        )
