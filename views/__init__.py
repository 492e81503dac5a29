"""
Views package.

The render layer is plain Python and is imported here. The Qt widgets
(topology_canvas, tool_palette, property_panel, main_window) are imported
from their modules directly, so the render layer stays usable without a
display.
"""

from .render_layer import (
    COLORS,
    DEVICE_GLYPHS,
    BackgroundPrimitive,
    LabelBadge,
    LinkPrimitive,
    NodePrimitive,
    PendingLinkMarker,
    HintOverlay,
    RenderFrame,
    badge_width,
    build_frame,
    build_editor_frame,
)

__all__ = [
    "COLORS",
    "DEVICE_GLYPHS",
    "BackgroundPrimitive",
    "LabelBadge",
    "LinkPrimitive",
    "NodePrimitive",
    "PendingLinkMarker",
    "HintOverlay",
    "RenderFrame",
    "badge_width",
    "build_frame",
    "build_editor_frame",
]
