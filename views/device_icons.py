"""
Device icon painters.

Each device type maps to one function that draws its glyph into a
24x24 box. The canvas and the tool palette share this table.
"""

from typing import Callable

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QFont, QIcon, QPainter, QPainterPath, QPen, QPixmap

from models import DeviceType


VIEWBOX = 24.0


def _outline(painter: QPainter, color: QColor, fill_alpha: float = 0.2):
    """Stroke in the icon color, body filled with a faint version of it."""
    fill = QColor(color)
    fill.setAlphaF(fill_alpha)
    painter.setPen(QPen(color, 2, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
    painter.setBrush(QBrush(fill))


def _lines(painter: QPainter, color: QColor, width: float = 2):
    painter.setPen(QPen(color, width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
    painter.setBrush(Qt.BrushStyle.NoBrush)


def _dot(painter: QPainter, color: QColor, x: float, y: float, r: float = 1.0):
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QBrush(color))
    painter.drawEllipse(QPointF(x, y), r, r)


def _draw_router(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawEllipse(QPointF(12, 12), 10, 10)
    _lines(painter, color)
    painter.drawLine(QPointF(7, 7), QPointF(17, 17))
    painter.drawLine(QPointF(17, 7), QPointF(7, 17))


def _draw_switch(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawRoundedRect(QRectF(2, 6, 20, 12), 2, 2)
    _lines(painter, color)
    for x in (6, 15):
        painter.drawLine(QPointF(x, 10), QPointF(x + 3, 14))
        painter.drawLine(QPointF(x + 3, 10), QPointF(x, 14))


def _draw_server(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawRect(QRectF(4, 4, 16, 16))
    _lines(painter, color)
    painter.drawLine(QPointF(4, 10), QPointF(20, 10))
    painter.drawLine(QPointF(4, 16), QPointF(20, 16))
    for y in (7, 13, 19):
        _dot(painter, color, 16, y)


def _draw_pc(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawRect(QRectF(2, 4, 20, 12))
    _lines(painter, color)
    path = QPainterPath(QPointF(8, 16))
    path.lineTo(6, 20)
    path.lineTo(18, 20)
    path.lineTo(16, 16)
    painter.drawPath(path)


def _draw_cloud(painter: QPainter, color: QColor):
    _outline(painter, color)
    path = QPainterPath(QPointF(6, 20))
    path.arcTo(QRectF(0, 8, 12, 12), 270, -180)
    path.arcTo(QRectF(5, 4, 14, 12), 180, -150)
    path.arcTo(QRectF(14, 10, 10, 10), 90, -180)
    path.closeSubpath()
    painter.drawPath(path)


def _draw_access_point(painter: QPainter, color: QColor):
    _outline(painter, color, fill_alpha=0.1)
    painter.drawEllipse(QPointF(12, 12), 10, 10)
    _dot(painter, color, 12, 12, 2)
    _lines(painter, color)
    painter.drawArc(QRectF(6, 6, 12, 12), 0, 180 * 16)


def _draw_olt(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawRoundedRect(QRectF(2, 4, 20, 16), 1, 1)
    _lines(painter, color, 1)
    for y in (8, 12, 16):
        painter.drawLine(QPointF(4, y), QPointF(20, y))
    painter.fillRect(QRectF(6, 6, 2, 12), color)


def _draw_firewall(painter: QPainter, color: QColor):
    _outline(painter, color)
    path = QPainterPath(QPointF(12, 2))
    path.lineTo(4, 5)
    path.lineTo(4, 11)
    path.cubicTo(4, 16, 7.4, 20.8, 12, 22)
    path.cubicTo(16.6, 20.8, 20, 16, 20, 11)
    path.lineTo(20, 5)
    path.closeSubpath()
    painter.drawPath(path)
    _lines(painter, color)
    painter.drawLine(QPointF(12, 7), QPointF(12, 17))
    painter.drawLine(QPointF(8, 11), QPointF(16, 11))


def _draw_modem(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawRoundedRect(QRectF(7, 3, 10, 18), 2, 2)
    _lines(painter, color)
    painter.drawLine(QPointF(10, 21), QPointF(14, 21))
    for y in (7, 11, 15):
        _dot(painter, color, 12, y)


def _draw_htb(painter: QPainter, color: QColor):
    _outline(painter, color)
    painter.drawRoundedRect(QRectF(2, 6, 20, 12), 2, 2)
    painter.setPen(QPen(color))
    font = QFont("SF Pro Display")
    font.setPixelSize(6)
    font.setWeight(QFont.Weight.Bold)
    painter.setFont(font)
    painter.drawText(QRectF(2, 6, 20, 12), Qt.AlignmentFlag.AlignCenter, "HTB")


ICON_PAINTERS: dict[DeviceType, Callable[[QPainter, QColor], None]] = {
    DeviceType.ROUTER: _draw_router,
    DeviceType.SWITCH: _draw_switch,
    DeviceType.SERVER: _draw_server,
    DeviceType.PC: _draw_pc,
    DeviceType.CLOUD: _draw_cloud,
    DeviceType.ACCESS_POINT: _draw_access_point,
    DeviceType.OLT: _draw_olt,
    DeviceType.FIREWALL: _draw_firewall,
    DeviceType.MODEM: _draw_modem,
    DeviceType.HTB: _draw_htb,
}


def paint_device_icon(painter: QPainter, device_type: DeviceType, rect: QRectF, color: QColor):
    """Draw a device glyph scaled to fit rect."""
    painter.save()
    painter.translate(rect.topLeft())
    painter.scale(rect.width() / VIEWBOX, rect.height() / VIEWBOX)
    ICON_PAINTERS[device_type](painter, color)
    painter.restore()


def device_icon(device_type: DeviceType, color: str = "#9CA3AF", size: int = 32) -> QIcon:
    """Render a device glyph into a QIcon for buttons."""
    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.GlobalColor.transparent)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    paint_device_icon(painter, device_type, QRectF(2, 2, size - 4, size - 4), QColor(color))
    painter.end()

    return QIcon(pixmap)
