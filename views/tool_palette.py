"""
Tool palette.

Buttons for the interaction tools (select, pan, link) and one
button per device type. Clicking a device arms the add-device tool;
the next click on empty canvas places it.
"""

from typing import Optional
from PyQt6.QtCore import Qt, QSize, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel,
    QPushButton, QFrame, QScrollArea, QButtonGroup
)

from models import (
    ToolKind, ToolMode,
    DEVICE_PALETTE_ORDER, DEVICE_DESCRIPTIONS,
)
from .device_icons import device_icon


ACCENT = "#38bdf8"


def _button_style(accent: str = ACCENT) -> str:
    return f"""
        QPushButton {{
            background: #1f2937;
            color: #e5e7eb;
            border: 2px solid #374151;
            border-radius: 10px;
            text-align: left;
            padding: 8px 10px;
        }}
        QPushButton:hover {{
            border-color: {accent};
            background: #273244;
        }}
        QPushButton:checked {{
            border-color: {accent};
            background: #0c4a6e;
        }}
    """


class ToolButton(QPushButton):
    """A checkable button for one ToolMode."""

    tool_selected = pyqtSignal(object)

    def __init__(self, mode: ToolMode, title: str, subtitle: str = "", parent=None):
        super().__init__(parent)
        self.mode = mode
        self.setCheckable(True)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setStyleSheet(_button_style())
        self.setToolTip(subtitle or title)

        if mode.kind == ToolKind.ADD_DEVICE:
            self.setIcon(device_icon(mode.device_type, color="#22c55e"))
            self.setIconSize(QSize(24, 24))
            self.setFixedHeight(44)
        else:
            self.setFixedHeight(36)

        self.setText(f"  {title}")
        self.clicked.connect(lambda: self.tool_selected.emit(self.mode))


class ToolPalette(QWidget):
    """
    Palette panel with tool modes and device types.
    """

    toolSelected = pyqtSignal(object)

    # Tool -> (title, shortcut hint)
    TOOLS = [
        (ToolMode.select(), "Select & Move", "V"),
        (ToolMode.pan(), "Pan View", "Space"),
        (ToolMode.link(), "Connect Link", "L"),
    ]

    def __init__(self, parent=None):
        super().__init__(parent)
        self._buttons: dict[ToolMode, ToolButton] = {}
        self._group = QButtonGroup(self)
        self._group.setExclusive(True)
        self._setup_ui()

    def _setup_ui(self):
        self.setMinimumWidth(220)
        self.setStyleSheet("background: #111827;")

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        outer.addWidget(scroll)

        content = QWidget()
        layout = QVBoxLayout(content)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)
        scroll.setWidget(content)

        layout.addWidget(self._title("Tools"))
        for mode, title, key in self.TOOLS:
            layout.addWidget(self._add_button(mode, f"{title}  ({key})", f"Shortcut: {key}"))

        layout.addSpacing(12)
        layout.addWidget(self._title("Devices"))

        subtitle = QLabel("Click a device, then click the canvas")
        subtitle.setStyleSheet("color: #6B7280; font-size: 11px; margin-bottom: 4px;")
        layout.addWidget(subtitle)

        for device_type in DEVICE_PALETTE_ORDER:
            layout.addWidget(self._add_button(
                ToolMode.add_device(device_type),
                device_type.label,
                DEVICE_DESCRIPTIONS[device_type],
            ))

        layout.addStretch()

        help_text = QLabel("Link tool: click two devices\nto connect them")
        help_text.setAlignment(Qt.AlignmentFlag.AlignCenter)
        help_text.setStyleSheet("""
            color: #9CA3AF;
            font-size: 11px;
            padding: 12px;
            background: #1f2937;
            border-radius: 6px;
        """)
        layout.addWidget(help_text)

        self.set_active_mode(ToolMode.select())

    def _title(self, text: str) -> QLabel:
        label = QLabel(text)
        font = QFont("SF Pro Display", 13)
        font.setWeight(QFont.Weight.Bold)
        label.setFont(font)
        label.setStyleSheet("color: #f9fafb;")
        return label

    def _add_button(self, mode: ToolMode, title: str, subtitle: str) -> ToolButton:
        btn = ToolButton(mode, title, subtitle)
        btn.tool_selected.connect(self.toolSelected)
        self._group.addButton(btn)
        self._buttons[mode] = btn
        return btn

    def set_active_mode(self, mode: ToolMode):
        """Reflect the editor's tool without emitting toolSelected."""
        btn: Optional[ToolButton] = self._buttons.get(mode)
        if btn is not None and not btn.isChecked():
            btn.setChecked(True)
