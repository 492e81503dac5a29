"""
Topology canvas for visual network editing.

A plain QWidget that paints the RenderFrame produced by the render
layer and forwards raw input to the TopologyEditor. The widget keeps no
topology state of its own: it repaints whenever the editor announces a
change.
"""

import base64
import logging
from typing import Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, QTimer, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QBrush, QColor, QFont, QPixmap,
    QWheelEvent, QMouseEvent, QKeyEvent
)
from PyQt6.QtWidgets import QWidget

from services import TopologyEditor, EditorChange, PointerButton
from models import ToolKind
from .render_layer import (
    COLORS, RenderFrame, BackgroundPrimitive, LinkPrimitive, NodePrimitive,
    PendingLinkMarker, HintOverlay, build_editor_frame, STATUS_DOT_SIZE,
)
from .device_icons import paint_device_icon

# Setup logger for this module
logger = logging.getLogger(__name__)


MOUSE_BUTTONS = {
    Qt.MouseButton.LeftButton: PointerButton.LEFT,
    Qt.MouseButton.MiddleButton: PointerButton.MIDDLE,
    Qt.MouseButton.RightButton: PointerButton.RIGHT,
}

# Keys whose shortcut name is not just their text
KEY_NAMES = {
    Qt.Key.Key_Space: "Space",
    Qt.Key.Key_Delete: "Delete",
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Escape: "Escape",
}

PULSE_INTERVAL_MS = 60
PULSE_STEPS = 20


def decode_data_url(data_url: str) -> Optional[QPixmap]:
    """Decode a base64 data URL into a pixmap, or None if it is not one."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        return None
    try:
        raw = base64.b64decode(payload, validate=True)
    except ValueError:
        return None

    pixmap = QPixmap()
    if not pixmap.loadFromData(raw):
        return None
    return pixmap


class TopologyCanvas(QWidget):
    """
    Interactive canvas for one TopologyEditor.

    Paint order follows the render frame: background, links, nodes,
    pending-link marker, then the screen-space hint overlay.
    """

    # Emitted after every editor change so side panels can refresh
    editorChanged = pyqtSignal(object)

    def __init__(self, editor: TopologyEditor, grid_spacing: int = 20,
                 show_overlay: bool = True, parent=None):
        super().__init__(parent)
        self.editor = editor
        self.grid_spacing = grid_spacing
        self.show_overlay = show_overlay

        self._frame: Optional[RenderFrame] = None
        self._background_source: Optional[str] = None
        self._background_pixmap: Optional[QPixmap] = None
        self._pulse_step = 0

        self._pulse_timer = QTimer(self)
        self._pulse_timer.setInterval(PULSE_INTERVAL_MS)
        self._pulse_timer.timeout.connect(self._on_pulse)

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(400, 300)
        self.setAutoFillBackground(False)

        self.editor.add_listener(self._on_editor_changed)
        self._rebuild_frame()

    # ------------------------------------------------------------------
    # Editor wiring
    # ------------------------------------------------------------------

    def _on_editor_changed(self, change: EditorChange):
        self._rebuild_frame()
        self._update_cursor()
        self.update()
        self.editorChanged.emit(change)

    def _rebuild_frame(self):
        self._frame = build_editor_frame(
            self.editor, grid_spacing=self.grid_spacing, show_overlay=self.show_overlay
        )

        if any(prim.pulsing for prim in self._frame.nodes):
            if not self._pulse_timer.isActive():
                self._pulse_timer.start()
        elif self._pulse_timer.isActive():
            self._pulse_timer.stop()
            self._pulse_step = 0

    def _on_pulse(self):
        self._pulse_step = (self._pulse_step + 1) % PULSE_STEPS
        self.update()

    def _pulse_alpha(self) -> float:
        half = PULSE_STEPS / 2
        return 0.35 + 0.65 * abs(self._pulse_step - half) / half

    def _update_cursor(self):
        state = self.editor.state
        if state.is_panning:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        elif state.tool_mode.kind == ToolKind.PAN:
            self.setCursor(Qt.CursorShape.OpenHandCursor)
        elif state.tool_mode.kind in (ToolKind.LINK, ToolKind.ADD_DEVICE):
            self.setCursor(Qt.CursorShape.CrossCursor)
        else:
            self.setCursor(Qt.CursorShape.ArrowCursor)

    def set_show_overlay(self, show: bool):
        self.show_overlay = show
        self._rebuild_frame()
        self.update()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        painter.fillRect(self.rect(), QColor(COLORS["canvas"]))

        frame = self._frame
        if frame is None:
            painter.end()
            return

        # World layers share one transform
        painter.save()
        painter.translate(frame.translate_x, frame.translate_y)
        painter.scale(frame.scale, frame.scale)

        self._draw_background(painter, frame.background)
        for link in frame.links:
            self._draw_link(painter, link)
        for node in frame.nodes:
            self._draw_node(painter, node)
        if frame.pending_marker is not None:
            self._draw_pending_marker(painter, frame.pending_marker)

        painter.restore()

        if frame.overlay is not None and frame.overlay.visible:
            self._draw_overlay(painter, frame.overlay)

        painter.end()

    def _background(self, data_url: str) -> Optional[QPixmap]:
        if data_url != self._background_source:
            self._background_source = data_url
            self._background_pixmap = decode_data_url(data_url)
            if self._background_pixmap is None:
                logger.warning("Background image could not be decoded")
        return self._background_pixmap

    def _draw_background(self, painter: QPainter, bg: BackgroundPrimitive):
        painter.save()
        painter.setOpacity(bg.opacity)

        if bg.is_image:
            pixmap = self._background(bg.image)
            if pixmap is not None:
                painter.drawPixmap(QPointF(0, 0), pixmap)
            painter.restore()
            return

        # Dot grid, clipped to what is visible
        visible = self._visible_world_rect().intersected(QRectF(0, 0, bg.extent, bg.extent))
        if visible.isEmpty():
            painter.restore()
            return

        spacing = bg.grid_spacing
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(bg.dot_color)))

        x = int(visible.left()) - (int(visible.left()) % spacing)
        while x <= visible.right():
            y = int(visible.top()) - (int(visible.top()) % spacing)
            while y <= visible.bottom():
                painter.drawEllipse(QPointF(x, y), 1, 1)
                y += spacing
            x += spacing

        painter.restore()

    def _visible_world_rect(self) -> QRectF:
        viewport = self.editor.viewport
        x1, y1 = viewport.screen_to_world(0, 0)
        x2, y2 = viewport.screen_to_world(self.width(), self.height())
        return QRectF(QPointF(x1, y1), QPointF(x2, y2))

    def _draw_link(self, painter: QPainter, link: LinkPrimitive):
        painter.save()
        painter.setOpacity(link.opacity)
        pen = QPen(QColor(link.color), link.width)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        painter.setPen(pen)
        painter.drawLine(QPointF(link.x1, link.y1), QPointF(link.x2, link.y2))
        painter.restore()

        if link.badge is not None:
            badge = link.badge
            x, y, w, h = badge.rect
            painter.setPen(QPen(QColor(badge.border), 1))
            painter.setBrush(QBrush(QColor(badge.fill)))
            painter.drawRoundedRect(QRectF(x, y, w, h), 4, 4)

            font = QFont("SF Pro Display")
            font.setPixelSize(10)
            font.setWeight(QFont.Weight.Bold)
            painter.setFont(font)
            painter.setPen(QColor("white"))
            painter.drawText(QRectF(x, y, w, h), Qt.AlignmentFlag.AlignCenter, badge.text)

    def _draw_node(self, painter: QPainter, node: NodePrimitive):
        cx, cy = node.center
        painter.save()

        # Scale about the node center
        painter.translate(cx, cy)
        painter.scale(node.scale, node.scale)
        painter.translate(-cx, -cy)

        box = QRectF(node.x, node.y, node.size, node.size)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(node.fill)))
        painter.drawRoundedRect(box, 8, 8)

        if node.ring_color is not None:
            ring = QColor(node.ring_color)
            if node.pulsing:
                ring.setAlphaF(self._pulse_alpha())
            painter.setPen(QPen(ring, 2))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRoundedRect(box.adjusted(-2, -2, 2, 2), 9, 9)

        icon_size = node.size * 2 / 3
        icon_rect = QRectF(cx - icon_size / 2, cy - icon_size / 2, icon_size, icon_size)
        paint_device_icon(painter, node.device_type, icon_rect, QColor(node.tint))

        # Status dot, top-right corner
        dot = QRectF(node.x + node.size - STATUS_DOT_SIZE + 4, node.y - 4,
                     STATUS_DOT_SIZE, STATUS_DOT_SIZE)
        painter.setPen(QPen(QColor(COLORS["canvas"]), 2))
        painter.setBrush(QBrush(QColor(node.status_color)))
        painter.drawEllipse(dot)

        painter.restore()

        self._draw_caption(painter, node)

    def _draw_caption(self, painter: QPainter, node: NodePrimitive):
        cx = node.center[0]
        top = node.y + node.size + 8

        for text, pixel_size, bold, color in (
            (node.name, 10, True, "white"),
            (node.ip, 9, False, "#d1d5db"),
        ):
            font = QFont("SF Pro Display")
            font.setPixelSize(pixel_size)
            if bold:
                font.setWeight(QFont.Weight.Bold)
            painter.setFont(font)

            width = painter.fontMetrics().horizontalAdvance(text) + 12
            height = pixel_size + 6
            rect = QRectF(cx - width / 2, top, width, height)

            painter.setPen(QPen(QColor(COLORS["badge_border"]), 1))
            bg = QColor("#111827")
            bg.setAlphaF(0.9)
            painter.setBrush(QBrush(bg))
            painter.drawRoundedRect(rect, 3, 3)

            painter.setPen(QColor(color))
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)
            top += height + 2

    def _draw_pending_marker(self, painter: QPainter, marker: PendingLinkMarker):
        color = QColor(marker.color)
        color.setAlphaF(0.75 * self._pulse_alpha())
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(color))
        painter.drawEllipse(QPointF(marker.cx, marker.cy), marker.radius, marker.radius)

    def _draw_overlay(self, painter: QPainter, overlay: HintOverlay):
        font = QFont("SF Pro Display")
        font.setPixelSize(11)
        painter.setFont(font)
        metrics = painter.fontMetrics()

        lines = [f"Mode: {overlay.mode_text}", *overlay.lines, overlay.zoom_text]
        line_height = metrics.height() + 2
        width = max(metrics.horizontalAdvance(line) for line in lines) + 24
        height = line_height * len(lines) + 16

        rect = QRectF(16, self.height() - height - 16, width, height)
        bg = QColor("#111827")
        bg.setAlphaF(0.8)
        painter.setPen(QPen(QColor(COLORS["badge_border"]), 1))
        painter.setBrush(QBrush(bg))
        painter.drawRoundedRect(rect, 8, 8)

        y = rect.top() + 8
        for i, line in enumerate(lines):
            painter.setPen(QColor("white" if i == 0 else "#9ca3af"))
            painter.drawText(QRectF(rect.left() + 12, y, width - 24, line_height),
                             Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter, line)
            y += line_height

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent):
        """Handle mouse press."""
        button = MOUSE_BUTTONS.get(event.button())
        if button is None:
            super().mousePressEvent(event)
            return
        pos = event.position()
        self.setFocus()
        self.editor.pointer_down(pos.x(), pos.y(), button)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent):
        """Qt grabs the mouse while a button is held, so drags continue off-canvas."""
        pos = event.position()
        self.editor.pointer_move(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent):
        """Handle mouse release."""
        pos = event.position()
        self.editor.pointer_up(pos.x(), pos.y(), MOUSE_BUTTONS.get(event.button()))
        event.accept()

    def leaveEvent(self, event):
        if not self.editor.captures_pointer:
            self.editor.pointer_leave()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        """Handle zoom with mouse wheel."""
        # Qt reports wheel-up as positive; the editor expects scroll-down positive
        delta = -event.angleDelta().y()
        if delta:
            self.editor.wheel(delta)
        event.accept()

    def keyPressEvent(self, event: QKeyEvent):
        """Handle tool shortcuts."""
        if event.modifiers() & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier):
            super().keyPressEvent(event)
            return

        name = KEY_NAMES.get(event.key()) or event.text().upper()
        if name and self.editor.key_press(name):
            event.accept()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        self.editor.remove_listener(self._on_editor_changed)
        super().closeEvent(event)
