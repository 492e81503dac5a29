"""
Hit-testing in world space.

Mirrors the paint order of the canvas: whatever is drawn on top is
found first. Nodes sit above links, and the selected node is drawn
enlarged above every other node. Links are thin, so each one is hit within a
wider invisible halo around its centerline.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .scene_graph import SceneGraph


# Full width of the invisible stroke under each link (world units)
LINK_HIT_WIDTH = 15.0

# The selected node is drawn enlarged about its center and is hit at that size
SELECTED_NODE_SCALE = 1.1


class HitKind(Enum):
    NODE = auto()
    LINK = auto()
    CANVAS = auto()


@dataclass(frozen=True)
class HitResult:
    """What lies under a point. item_id is None for the canvas."""
    kind: HitKind
    item_id: Optional[str] = None


CANVAS_HIT = HitResult(HitKind.CANVAS)


def point_segment_distance(px: float, py: float,
                           ax: float, ay: float,
                           bx: float, by: float) -> float:
    """Shortest distance from point P to segment AB."""
    dx = bx - ax
    dy = by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(px - ax, py - ay)

    # Project P onto AB, clamped to the segment
    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def node_paint_order(graph: SceneGraph, selected_node_id: Optional[str]) -> list[str]:
    """Node ids bottom to top; the selected node is raised above the rest."""
    order = [nid for nid in graph.nodes if nid != selected_node_id]
    if selected_node_id in graph.nodes:
        order.append(selected_node_id)
    return order


def hit_test(graph: SceneGraph, wx: float, wy: float,
             selected_node_id: Optional[str] = None,
             link_hit_width: float = LINK_HIT_WIDTH) -> HitResult:
    """Find the topmost item under a world-space point."""
    for node_id in reversed(node_paint_order(graph, selected_node_id)):
        scale = SELECTED_NODE_SCALE if node_id == selected_node_id else 1.0
        if graph.nodes[node_id].contains(wx, wy, scale):
            return HitResult(HitKind.NODE, node_id)

    tolerance = link_hit_width / 2
    for link in reversed(list(graph.links.values())):
        sx, sy = graph.get_node_center(link.source)
        tx, ty = graph.get_node_center(link.target)
        if point_segment_distance(wx, wy, sx, sy, tx, ty) <= tolerance:
            return HitResult(HitKind.LINK, link.id)

    return CANVAS_HIT
