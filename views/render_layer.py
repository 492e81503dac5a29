"""
Render layer.

Projects the editor state into a flat list of drawable primitives.
Everything here is plain data and does not touch Qt: the canvas
widget walks a RenderFrame and paints it.

Paint order:
1. background (uploaded map or dot grid)
2. links (invisible hit halo + visible stroke, optional label badge)
3. nodes (selected node last, so it is on top)
4. pending-link marker
5. hint overlay (screen space)

Primitives 1-4 are in world space. The frame carries the single
(scale, translate) transform the canvas applies to all of them.
"""

from dataclasses import dataclass, field
from typing import Optional

from models import (
    SceneGraph, ViewportController, EditorState, ToolKind,
    DeviceType, NodeStatus, NODE_ICON_SIZE, LINK_HIT_WIDTH,
    SELECTED_NODE_SCALE, node_paint_order,
)


# Color scheme
COLORS = {
    NodeStatus.UP: "#22c55e",        # Green
    NodeStatus.DOWN: "#ef4444",      # Red
    NodeStatus.WARNING: "#eab308",   # Yellow
    "selection": "#38bdf8",          # Sky blue
    "pending": "#4ade80",            # Light green
    "node_fill": "#1f2937",
    "node_fill_hover": "#374151",
    "node_fill_selected": "#0369a1",
    "badge_fill": "#1f2937",
    "badge_border": "#374151",
    "grid_dot": "#9ca3af",
    "canvas": "#111827",
}

# Short glyph per device type, used for captions and as a text fallback
DEVICE_GLYPHS = {
    DeviceType.ROUTER: "R",
    DeviceType.SWITCH: "SW",
    DeviceType.SERVER: "SRV",
    DeviceType.PC: "PC",
    DeviceType.CLOUD: "☁",
    DeviceType.ACCESS_POINT: "AP",
    DeviceType.OLT: "OLT",
    DeviceType.FIREWALL: "FW",
    DeviceType.MODEM: "MDM",
    DeviceType.HTB: "HTB",
}

BACKGROUND_IMAGE_OPACITY = 0.5
GRID_DOT_OPACITY = 0.1
GRID_EXTENT = 5000             # World units covered by the background layer
LINK_OPACITY = 0.8
SELECTED_LINK_EXTRA_WIDTH = 2
LABEL_BADGE_HEIGHT = 18
STATUS_DOT_SIZE = 14
PENDING_MARKER_RADIUS = 6

HINT_LINES = [
    "Scroll to zoom",
    "Middle-click or Pan tool + drag to move the map",
    "Upload a map image to use as the background",
]


@dataclass(frozen=True)
class BackgroundPrimitive:
    """Either an image (data URL) or a dot grid."""
    image: Optional[str]
    opacity: float
    extent: float = GRID_EXTENT
    grid_spacing: int = 20
    dot_color: str = COLORS["grid_dot"]

    @property
    def is_image(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class LabelBadge:
    """Rounded box with text, centered on a point."""
    text: str
    cx: float
    cy: float
    width: float
    height: float
    fill: str
    border: str

    @property
    def rect(self) -> tuple[float, float, float, float]:
        return (self.cx - self.width / 2, self.cy - self.height / 2, self.width, self.height)


@dataclass(frozen=True)
class LinkPrimitive:
    link_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float
    opacity: float
    hit_width: float
    selected: bool
    badge: Optional[LabelBadge] = None

    @property
    def midpoint(self) -> tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)


@dataclass(frozen=True)
class NodePrimitive:
    node_id: str
    device_type: DeviceType
    glyph: str
    x: float
    y: float
    size: float
    tint: str           # Icon color, from status
    status_color: str   # Status dot color
    fill: str
    name: str
    ip: str
    selected: bool = False
    hovered: bool = False
    pulsing: bool = False          # Source of a pending link
    ring_color: Optional[str] = None
    scale: float = 1.0

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.size / 2, self.y + self.size / 2)


@dataclass(frozen=True)
class PendingLinkMarker:
    cx: float
    cy: float
    radius: float = PENDING_MARKER_RADIUS
    color: str = COLORS["pending"]


@dataclass(frozen=True)
class HintOverlay:
    """Screen-space help box and zoom readout."""
    mode_text: str
    lines: tuple = ()
    zoom_text: str = ""
    visible: bool = True


@dataclass
class RenderFrame:
    """Everything the canvas needs to paint one frame."""
    scale: float
    translate_x: float
    translate_y: float
    background: BackgroundPrimitive
    links: list[LinkPrimitive] = field(default_factory=list)
    nodes: list[NodePrimitive] = field(default_factory=list)
    pending_marker: Optional[PendingLinkMarker] = None
    overlay: Optional[HintOverlay] = None

    def node(self, node_id: str) -> Optional[NodePrimitive]:
        for prim in self.nodes:
            if prim.node_id == node_id:
                return prim
        return None

    def link(self, link_id: str) -> Optional[LinkPrimitive]:
        for prim in self.links:
            if prim.link_id == link_id:
                return prim
        return None


def badge_width(text: str) -> float:
    """Approximate badge width for a label (6 units per character plus padding)."""
    return len(text) * 6 + 12


def _build_links(graph: SceneGraph, state: EditorState, hit_width: float) -> list[LinkPrimitive]:
    prims = []
    for link in graph.links.values():
        x1, y1 = graph.get_node_center(link.source)
        x2, y2 = graph.get_node_center(link.target)
        selected = link.id == state.selected_link_id

        badge = None
        if link.label:
            badge = LabelBadge(
                text=link.label,
                cx=(x1 + x2) / 2,
                cy=(y1 + y2) / 2,
                width=badge_width(link.label),
                height=LABEL_BADGE_HEIGHT,
                fill=COLORS["badge_fill"],
                border=COLORS["selection"] if selected else COLORS["badge_border"],
            )

        prims.append(LinkPrimitive(
            link_id=link.id,
            x1=x1, y1=y1, x2=x2, y2=y2,
            color=COLORS["selection"] if selected else link.stroke_color,
            width=link.stroke_width + SELECTED_LINK_EXTRA_WIDTH if selected else link.stroke_width,
            opacity=LINK_OPACITY,
            hit_width=hit_width,
            selected=selected,
            badge=badge,
        ))
    return prims


def _build_nodes(graph: SceneGraph, state: EditorState) -> list[NodePrimitive]:
    pending_source = state.pending_link_source
    prims = []
    for node_id in node_paint_order(graph, state.selected_node_id):
        node = graph.nodes[node_id]
        selected = node_id == state.selected_node_id
        hovered = node_id == state.hovered_node_id
        pulsing = node_id == pending_source

        if selected:
            fill = COLORS["node_fill_selected"]
        elif hovered:
            fill = COLORS["node_fill_hover"]
        else:
            fill = COLORS["node_fill"]

        ring = None
        if pulsing:
            ring = COLORS["pending"]
        elif selected:
            ring = COLORS["selection"]

        prims.append(NodePrimitive(
            node_id=node_id,
            device_type=node.type,
            glyph=DEVICE_GLYPHS[node.type],
            x=node.x,
            y=node.y,
            size=NODE_ICON_SIZE,
            tint=COLORS[node.status],
            status_color=COLORS[node.status],
            fill=fill,
            name=node.name,
            ip=node.ip,
            selected=selected,
            hovered=hovered,
            pulsing=pulsing,
            ring_color=ring,
            scale=SELECTED_NODE_SCALE if selected else 1.0,
        ))
    return prims


def build_frame(
    graph: SceneGraph,
    viewport: ViewportController,
    state: EditorState,
    background_image: Optional[str] = None,
    grid_spacing: int = 20,
    show_overlay: bool = True,
    link_hit_width: float = LINK_HIT_WIDTH,
) -> RenderFrame:
    """Project the current editor state into a RenderFrame."""
    if background_image:
        background = BackgroundPrimitive(image=background_image, opacity=BACKGROUND_IMAGE_OPACITY,
                                         grid_spacing=grid_spacing)
    else:
        background = BackgroundPrimitive(image=None, opacity=GRID_DOT_OPACITY,
                                         grid_spacing=grid_spacing)

    marker = None
    source = state.pending_link_source
    if state.tool_mode.kind == ToolKind.LINK and source in graph.nodes:
        cx, cy = graph.get_node_center(source)
        marker = PendingLinkMarker(cx, cy)

    overlay = HintOverlay(
        mode_text=state.tool_mode.description,
        lines=tuple(HINT_LINES),
        zoom_text=f"Zoom: {viewport.zoom_percent}%",
        visible=show_overlay,
    )

    return RenderFrame(
        scale=viewport.scale,
        translate_x=viewport.translate_x,
        translate_y=viewport.translate_y,
        background=background,
        links=_build_links(graph, state, link_hit_width),
        nodes=_build_nodes(graph, state),
        pending_marker=marker,
        overlay=overlay,
    )


def build_editor_frame(editor, grid_spacing: int = 20, show_overlay: bool = True) -> RenderFrame:
    """Convenience wrapper taking a TopologyEditor."""
    return build_frame(
        editor.graph,
        editor.viewport,
        editor.state,
        background_image=editor.background_image,
        grid_spacing=grid_spacing,
        show_overlay=show_overlay,
        link_hit_width=editor.link_hit_width,
    )
