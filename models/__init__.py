"""
Models package.

This package contains the data models for the topology editor:

- Network devices and connections (NetworkNode, NetworkLink, DeviceType)
- The topology graph and its invariants (SceneGraph)
- Pan/zoom state and coordinate transforms (ViewState, ViewportController)
- Per-editor interaction state (EditorState, ToolMode, active operations)

Nothing in here depends on Qt.
"""

from .network import (
    DeviceType,
    NodeStatus,
    NetworkNode,
    NetworkLink,
    NODE_ICON_SIZE,
    NODE_HALF_ICON,
    DEFAULT_NODE_IP,
    DEFAULT_LINK_COLOR,
    DEFAULT_LINK_WIDTH,
    DEVICE_PALETTE_ORDER,
    DEVICE_DESCRIPTIONS,
    NODE_EDITABLE_FIELDS,
    LINK_EDITABLE_FIELDS,
)
from .scene_graph import SceneGraph
from .viewport import (
    ViewState,
    ViewportController,
    clamp_scale,
    MIN_SCALE,
    MAX_SCALE,
    DEFAULT_ZOOM_INTENSITY,
)
from .editor_state import (
    ToolKind,
    ToolMode,
    Dragging,
    Panning,
    PendingLink,
    ActiveOperation,
    EditorState,
)
from .hit_testing import (
    HitKind,
    HitResult,
    CANVAS_HIT,
    LINK_HIT_WIDTH,
    SELECTED_NODE_SCALE,
    hit_test,
    node_paint_order,
    point_segment_distance,
)


__all__ = [
    # Network
    "DeviceType",
    "NodeStatus",
    "NetworkNode",
    "NetworkLink",
    "NODE_ICON_SIZE",
    "NODE_HALF_ICON",
    "DEFAULT_NODE_IP",
    "DEFAULT_LINK_COLOR",
    "DEFAULT_LINK_WIDTH",
    "DEVICE_PALETTE_ORDER",
    "DEVICE_DESCRIPTIONS",
    "NODE_EDITABLE_FIELDS",
    "LINK_EDITABLE_FIELDS",
    # Graph
    "SceneGraph",
    # Viewport
    "ViewState",
    "ViewportController",
    "clamp_scale",
    "MIN_SCALE",
    "MAX_SCALE",
    "DEFAULT_ZOOM_INTENSITY",
    # Editor state
    "ToolKind",
    "ToolMode",
    "Dragging",
    "Panning",
    "PendingLink",
    "ActiveOperation",
    "EditorState",
    # Hit-testing
    "HitKind",
    "HitResult",
    "CANVAS_HIT",
    "LINK_HIT_WIDTH",
    "SELECTED_NODE_SCALE",
    "hit_test",
    "node_paint_order",
    "point_segment_distance",
]
