"""
Property panel for editing the selected device or link.

Edits go straight through the TopologyEditor command API, so they
are persisted and repainted like any other change.
"""

from typing import Optional
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QColor
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QLineEdit, QComboBox, QSlider,
    QScrollArea, QFrame, QPushButton, QColorDialog
)

from models import (
    NetworkNode, NetworkLink, NodeStatus,
    DEVICE_PALETTE_ORDER, DEFAULT_LINK_WIDTH,
)
from services import TopologyEditor, EditorChange

MIN_LINK_WIDTH = 1
MAX_LINK_WIDTH = 8


class SectionHeader(QLabel):
    """Styled section header."""

    def __init__(self, text: str, parent=None):
        super().__init__(text, parent)
        font = QFont("SF Pro Display", 11)
        font.setWeight(QFont.Weight.DemiBold)
        self.setFont(font)
        self.setStyleSheet("""
            QLabel {
                color: #e5e7eb;
                padding: 2px 0 4px 0;
                border-bottom: 1px solid #374151;
                margin-top: 8px;
            }
        """)


def input_style() -> str:
    """Common input widget styling."""
    return """
        QLineEdit, QComboBox {
            border: 1px solid #374151;
            border-radius: 6px;
            padding: 2px 4px;
            background: #1f2937;
            color: #f3f4f6;
            min-height: 20px;
        }
        QLineEdit:focus, QComboBox:focus {
            border-color: #38bdf8;
            outline: none;
        }
        QComboBox::drop-down {
            border: none;
            padding-right: 8px;
        }
    """


def delete_button_style() -> str:
    return """
        QPushButton {
            background: #7f1d1d;
            color: #fecaca;
            border: 1px solid #991b1b;
            border-radius: 6px;
            padding: 6px;
        }
        QPushButton:hover {
            background: #991b1b;
        }
    """


class NodePropertiesWidget(QWidget):
    """Name, address, status and type of one device."""

    def __init__(self, editor: TopologyEditor, parent=None):
        super().__init__(parent)
        self._editor = editor
        self._node_id: Optional[str] = None
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(SectionHeader("Device"))

        form = QFormLayout()
        form.setContentsMargins(0, 8, 0, 12)
        form.setSpacing(4)
        form.setLabelAlignment(Qt.AlignmentFlag.AlignRight)

        self._name_edit = QLineEdit()
        self._name_edit.setPlaceholderText("Device name")
        self._name_edit.setStyleSheet(input_style())
        self._name_edit.editingFinished.connect(self._on_name_changed)
        form.addRow("Name:", self._name_edit)

        self._ip_edit = QLineEdit()
        self._ip_edit.setPlaceholderText("192.168.1.1")
        self._ip_edit.setStyleSheet(input_style())
        self._ip_edit.editingFinished.connect(self._on_ip_changed)
        form.addRow("IP:", self._ip_edit)

        self._status_combo = QComboBox()
        for status in NodeStatus:
            self._status_combo.addItem(status.value.title(), status)
        self._status_combo.setStyleSheet(input_style())
        self._status_combo.currentIndexChanged.connect(self._on_status_changed)
        form.addRow("Status:", self._status_combo)

        self._type_combo = QComboBox()
        for device_type in DEVICE_PALETTE_ORDER:
            self._type_combo.addItem(device_type.label, device_type)
        self._type_combo.setStyleSheet(input_style())
        self._type_combo.currentIndexChanged.connect(self._on_type_changed)
        form.addRow("Type:", self._type_combo)

        self._position_label = QLabel()
        self._position_label.setStyleSheet("color: #9CA3AF; font-size: 11px;")
        form.addRow("Position:", self._position_label)

        # ID (read-only)
        self._id_label = QLabel()
        self._id_label.setStyleSheet("color: #9CA3AF; font-family: monospace; font-size: 11px;")
        form.addRow("ID:", self._id_label)

        layout.addLayout(form)

        delete_btn = QPushButton("Delete Device")
        delete_btn.setStyleSheet(delete_button_style())
        delete_btn.clicked.connect(self._on_delete)
        layout.addWidget(delete_btn)

    def set_node(self, node: Optional[NetworkNode]):
        self._node_id = node.id if node else None
        if node is None:
            return

        for widget in (self._name_edit, self._ip_edit, self._status_combo, self._type_combo):
            widget.blockSignals(True)

        if not self._name_edit.hasFocus():
            self._name_edit.setText(node.name)
        if not self._ip_edit.hasFocus():
            self._ip_edit.setText(node.ip)
        self._status_combo.setCurrentIndex(self._status_combo.findData(node.status))
        self._type_combo.setCurrentIndex(self._type_combo.findData(node.type))
        self._position_label.setText(f"{node.x:.0f}, {node.y:.0f}")
        self._id_label.setText(node.id)

        for widget in (self._name_edit, self._ip_edit, self._status_combo, self._type_combo):
            widget.blockSignals(False)

    def _on_name_changed(self):
        if self._node_id:
            self._editor.update_node(self._node_id, name=self._name_edit.text())

    def _on_ip_changed(self):
        if self._node_id:
            self._editor.update_node(self._node_id, ip=self._ip_edit.text().strip())

    def _on_status_changed(self, idx):
        status = self._status_combo.currentData()
        if self._node_id and status is not None:
            self._editor.update_node(self._node_id, status=status)

    def _on_type_changed(self, idx):
        device_type = self._type_combo.currentData()
        if self._node_id and device_type is not None:
            self._editor.update_node(self._node_id, type=device_type)

    def _on_delete(self):
        if self._node_id:
            self._editor.remove_node(self._node_id)


class LinkPropertiesWidget(QWidget):
    """Label, color and width of one link."""

    def __init__(self, editor: TopologyEditor, parent=None):
        super().__init__(parent)
        self._editor = editor
        self._link_id: Optional[str] = None
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(SectionHeader("Link"))

        form = QFormLayout()
        form.setContentsMargins(0, 8, 0, 12)
        form.setSpacing(4)
        form.setLabelAlignment(Qt.AlignmentFlag.AlignRight)

        self._label_edit = QLineEdit()
        self._label_edit.setPlaceholderText("e.g. 1G uplink")
        self._label_edit.setStyleSheet(input_style())
        self._label_edit.editingFinished.connect(self._on_label_changed)
        form.addRow("Label:", self._label_edit)

        self._color_btn = QPushButton()
        self._color_btn.setFixedHeight(24)
        self._color_btn.clicked.connect(self._on_pick_color)
        form.addRow("Color:", self._color_btn)

        width_row = QHBoxLayout()
        self._width_slider = QSlider(Qt.Orientation.Horizontal)
        self._width_slider.setRange(MIN_LINK_WIDTH, MAX_LINK_WIDTH)
        self._width_slider.valueChanged.connect(self._on_width_changed)
        width_row.addWidget(self._width_slider)
        self._width_label = QLabel()
        self._width_label.setStyleSheet("color: #e5e7eb; min-width: 28px;")
        width_row.addWidget(self._width_label)
        form.addRow("Width:", width_row)

        self._endpoints_label = QLabel()
        self._endpoints_label.setStyleSheet("color: #9CA3AF; font-size: 11px;")
        self._endpoints_label.setWordWrap(True)
        form.addRow("Connects:", self._endpoints_label)

        self._id_label = QLabel()
        self._id_label.setStyleSheet("color: #9CA3AF; font-family: monospace; font-size: 11px;")
        form.addRow("ID:", self._id_label)

        layout.addLayout(form)

        delete_btn = QPushButton("Delete Link")
        delete_btn.setStyleSheet(delete_button_style())
        delete_btn.clicked.connect(self._on_delete)
        layout.addWidget(delete_btn)

    def set_link(self, link: Optional[NetworkLink]):
        self._link_id = link.id if link else None
        if link is None:
            return

        self._label_edit.blockSignals(True)
        self._width_slider.blockSignals(True)

        if not self._label_edit.hasFocus():
            self._label_edit.setText(link.label or "")
        self._set_color_swatch(link.stroke_color)
        self._width_slider.setValue(int(link.stroke_width))
        self._width_label.setText(f"{link.stroke_width:g}px")

        graph = self._editor.graph
        source = graph.get_node(link.source)
        target = graph.get_node(link.target)
        self._endpoints_label.setText(
            f"{source.name if source else link.source}  ↔  {target.name if target else link.target}"
        )
        self._id_label.setText(link.id)

        self._label_edit.blockSignals(False)
        self._width_slider.blockSignals(False)

    def _set_color_swatch(self, color: str):
        self._color_btn.setText(color)
        self._color_btn.setStyleSheet(f"""
            QPushButton {{
                background: {color};
                color: #111827;
                border: 1px solid #374151;
                border-radius: 6px;
            }}
        """)

    def _on_label_changed(self):
        if self._link_id:
            text = self._label_edit.text().strip()
            self._editor.update_link(self._link_id, label=text or None)

    def _on_pick_color(self):
        link = self._editor.graph.get_link(self._link_id) if self._link_id else None
        if link is None:
            return
        color = QColorDialog.getColor(QColor(link.stroke_color), self, "Link Color")
        if color.isValid():
            self._editor.update_link(self._link_id, color=color.name())

    def _on_width_changed(self, value: int):
        if self._link_id:
            self._editor.update_link(self._link_id, width=value or DEFAULT_LINK_WIDTH)

    def _on_delete(self):
        if self._link_id:
            self._editor.remove_link(self._link_id)


class PropertyPanel(QWidget):
    """Main property panel that switches between node and link editors."""

    def __init__(self, editor: TopologyEditor, parent=None):
        super().__init__(parent)
        self._editor = editor
        self._setup_ui()
        self._editor.add_listener(self._on_editor_changed)
        self.refresh()

    def _setup_ui(self):
        self.setMinimumWidth(260)
        self.setMaximumWidth(360)
        self.setStyleSheet("background: #111827;")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(0)

        title = QLabel("Properties")
        title_font = QFont("SF Pro Display", 14)
        title_font.setWeight(QFont.Weight.Bold)
        title.setFont(title_font)
        title.setStyleSheet("color: #f9fafb; padding-bottom: 12px;")
        layout.addWidget(title)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)

        self._content = QWidget()
        self._content_layout = QVBoxLayout(self._content)
        self._content_layout.setContentsMargins(0, 0, 0, 0)

        self._node_props = NodePropertiesWidget(self._editor)
        self._node_props.hide()
        self._content_layout.addWidget(self._node_props)

        self._link_props = LinkPropertiesWidget(self._editor)
        self._link_props.hide()
        self._content_layout.addWidget(self._link_props)

        self._empty_label = QLabel("Select a device or link\nto view and edit properties")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet("color: #9CA3AF; font-size: 13px; padding: 4px 2px;")
        self._content_layout.addWidget(self._empty_label)

        self._content_layout.addStretch()

        scroll.setWidget(self._content)
        layout.addWidget(scroll)

    def _on_editor_changed(self, change: EditorChange):
        if change & (EditorChange.SELECTION | EditorChange.GRAPH):
            self.refresh()

    def refresh(self):
        node = self._editor.selected_node
        link = self._editor.selected_link

        self._node_props.setVisible(node is not None)
        self._link_props.setVisible(node is None and link is not None)
        self._empty_label.setVisible(node is None and link is None)

        self._node_props.set_node(node)
        self._link_props.set_link(None if node is not None else link)
