"""
Topology editor interaction.

TopologyEditor is the single entry point the UI talks to. It turns raw
pointer, wheel and keyboard events into changes to the scene graph and
the viewport, based on the active tool and on the operation in
progress, and exposes the command API used by toolbars and property
panels. Every change is written back through the persistence adapter
and announced to listeners.

Pointer events use screen coordinates relative to the canvas. The host
must keep delivering move/up events while an operation is active even
if the pointer leaves the canvas (see `captures_pointer`).
"""

import logging
from enum import Enum, Flag, auto
from typing import Callable, Optional

from models import (
    SceneGraph, ViewportController, EditorState,
    ToolKind, ToolMode, Dragging, Panning, PendingLink,
    DeviceType, NetworkNode, NetworkLink,
    HitKind, hit_test,
    NODE_HALF_ICON, LINK_HIT_WIDTH, DEFAULT_ZOOM_INTENSITY,
)
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


class PointerButton(Enum):
    LEFT = auto()
    MIDDLE = auto()
    RIGHT = auto()


class EditorChange(Flag):
    """What an event changed, so the host can refresh only what it needs."""
    NONE = 0
    GRAPH = auto()
    VIEW = auto()
    SELECTION = auto()
    TOOL = auto()
    BACKGROUND = auto()
    HOVER = auto()
    OPERATION = auto()


ChangeListener = Callable[[EditorChange], None]

# Key name -> action, matching ShortcutSettings defaults
DEFAULT_SHORTCUTS = {
    "V": "select",
    "Space": "pan",
    "L": "link",
    "Delete": "delete",
    "Backspace": "delete",
    "Escape": "cancel",
}


def shortcuts_from_settings(shortcuts) -> dict[str, str]:
    """Build the key -> action table from a ShortcutSettings section."""
    table = {
        shortcuts.select: "select",
        shortcuts.pan: "pan",
        shortcuts.link: "link",
        shortcuts.cancel: "cancel",
    }
    for key in shortcuts.delete:
        table[key] = "delete"
    return table


class TopologyEditor:
    """
    Interaction state machine and command API for one topology.

    Owns the scene graph, the viewport and the editor state. Several
    editors can live side by side; nothing is shared between them.
    """

    def __init__(
        self,
        persistence: Optional[PersistenceAdapter] = None,
        zoom_intensity: float = DEFAULT_ZOOM_INTENSITY,
        link_hit_width: float = LINK_HIT_WIDTH,
        shortcuts: Optional[dict[str, str]] = None,
    ):
        self.graph = SceneGraph()
        self.viewport = ViewportController(zoom_intensity=zoom_intensity)
        self.state = EditorState()
        self.background_image: Optional[str] = None
        self.link_hit_width = link_hit_width

        self._persistence = persistence
        self._shortcuts = dict(shortcuts or DEFAULT_SHORTCUTS)
        self._listeners: list[ChangeListener] = []

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def load(self):
        """Restore the last saved snapshot, if there is a store."""
        if self._persistence is None:
            return

        snapshot = self._persistence.load()
        self.graph.replace(snapshot.nodes, snapshot.links)
        self.viewport.set_view(snapshot.view)
        self.background_image = snapshot.background_image
        self.state = EditorState()
        self._notify(EditorChange.GRAPH | EditorChange.VIEW | EditorChange.BACKGROUND
                     | EditorChange.SELECTION | EditorChange.TOOL)

    def add_listener(self, listener: ChangeListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: EditorChange):
        if not change:
            return
        for listener in list(self._listeners):
            listener(change)

    def _save(self, nodes: bool = False, links: bool = False,
              view: bool = False, background: bool = False):
        if self._persistence is None:
            return
        if nodes:
            self._persistence.save_nodes(list(self.graph.nodes.values()))
        if links:
            self._persistence.save_links(list(self.graph.links.values()))
        if view:
            self._persistence.save_view(self.viewport.view)
        if background:
            self._persistence.save_background(self.background_image)

    @property
    def tool_mode(self) -> ToolMode:
        return self.state.tool_mode

    @property
    def captures_pointer(self) -> bool:
        """True while a drag or pan needs move/up events from outside the canvas."""
        return self.state.is_dragging or self.state.is_panning

    # ------------------------------------------------------------------
    # Commands: tools and selection
    # ------------------------------------------------------------------

    def set_tool_mode(self, mode: ToolMode):
        """Switch tools. Any half-made link is dropped."""
        change = EditorChange.TOOL
        if self.state.pending_link_source is not None:
            self.state.operation = None
            change |= EditorChange.OPERATION
        self.state.tool_mode = mode
        logger.debug(f"Tool mode: {mode.description}")
        self._notify(change)

    def select_node(self, node_id: Optional[str]):
        if node_id is not None and node_id not in self.graph.nodes:
            return
        self.state.selected_node_id = node_id
        self.state.selected_link_id = None
        self._notify(EditorChange.SELECTION)

    def select_link(self, link_id: Optional[str]):
        if link_id is not None and link_id not in self.graph.links:
            return
        self.state.selected_link_id = link_id
        self.state.selected_node_id = None
        self._notify(EditorChange.SELECTION)

    def clear_selection(self):
        self.state.clear_selection()
        self._notify(EditorChange.SELECTION)

    @property
    def selected_node(self) -> Optional[NetworkNode]:
        if self.state.selected_node_id is None:
            return None
        return self.graph.get_node(self.state.selected_node_id)

    @property
    def selected_link(self) -> Optional[NetworkLink]:
        if self.state.selected_link_id is None:
            return None
        return self.graph.get_link(self.state.selected_link_id)

    # ------------------------------------------------------------------
    # Commands: graph
    # ------------------------------------------------------------------

    def add_node(self, device_type: DeviceType, x: float, y: float) -> NetworkNode:
        node = self.graph.add_node(device_type, x, y)
        self._save(nodes=True)
        self._notify(EditorChange.GRAPH)
        return node

    def update_node(self, node_id: str, **changes) -> Optional[NetworkNode]:
        node = self.graph.update_node(node_id, **changes)
        if node is not None:
            self._save(nodes=True)
            self._notify(EditorChange.GRAPH)
        return node

    def remove_node(self, node_id: str) -> Optional[NetworkNode]:
        removed_links = [link.id for link in self.graph.links_for_node(node_id)]
        node = self.graph.remove_node(node_id)
        if node is None:
            return None

        self.state.forget_node(node_id)
        for link_id in removed_links:
            self.state.forget_link(link_id)
        self._save(nodes=True, links=True)
        self._notify(EditorChange.GRAPH | EditorChange.SELECTION | EditorChange.OPERATION)
        return node

    def add_link(self, source_id: str, target_id: str) -> Optional[NetworkLink]:
        link = self.graph.add_link(source_id, target_id)
        if link is not None:
            self._save(links=True)
            self._notify(EditorChange.GRAPH)
        return link

    def update_link(self, link_id: str, **changes) -> Optional[NetworkLink]:
        link = self.graph.update_link(link_id, **changes)
        if link is not None:
            self._save(links=True)
            self._notify(EditorChange.GRAPH)
        return link

    def remove_link(self, link_id: str) -> Optional[NetworkLink]:
        link = self.graph.remove_link(link_id)
        if link is None:
            return None
        self.state.forget_link(link_id)
        self._save(links=True)
        self._notify(EditorChange.GRAPH | EditorChange.SELECTION)
        return link

    def delete_selected(self) -> bool:
        """Delete the selected node (with its links) or the selected link."""
        if self.state.selected_node_id is not None:
            removed = self.remove_node(self.state.selected_node_id) is not None
        elif self.state.selected_link_id is not None:
            removed = self.remove_link(self.state.selected_link_id) is not None
        else:
            return False

        self.state.clear_selection()
        self._notify(EditorChange.SELECTION)
        return removed

    def clear_all(self):
        """Reset everything: graph, background and view."""
        self.graph.clear()
        self.background_image = None
        self.viewport.reset()
        self.state.clear_selection()
        self.state.operation = None
        self.state.hovered_node_id = None
        self._save(nodes=True, links=True, view=True, background=True)
        logger.info("Topology cleared")
        self._notify(EditorChange.GRAPH | EditorChange.VIEW | EditorChange.BACKGROUND
                     | EditorChange.SELECTION | EditorChange.OPERATION)

    # ------------------------------------------------------------------
    # Commands: view and background
    # ------------------------------------------------------------------

    def zoom(self, delta_y: float) -> float:
        scale = self.viewport.zoom(delta_y)
        self._save(view=True)
        self._notify(EditorChange.VIEW)
        return scale

    def pan(self, dx: float, dy: float):
        self.viewport.pan(dx, dy)
        self._save(view=True)
        self._notify(EditorChange.VIEW)

    def reset_view(self):
        self.viewport.reset()
        self._save(view=True)
        self._notify(EditorChange.VIEW)

    def set_background_image(self, data_url: Optional[str]):
        """Set the background map (a data URL), or None for the dot grid."""
        self.background_image = data_url or None
        self._save(background=True)
        self._notify(EditorChange.BACKGROUND)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float,
                     button: PointerButton = PointerButton.LEFT) -> EditorChange:
        """Handle a press on the canvas at a screen point."""
        state = self.state

        # A drag or pan is already running; it only ends on release
        if self.captures_pointer:
            return EditorChange.NONE

        if button == PointerButton.MIDDLE or state.tool_mode.kind == ToolKind.PAN:
            state.operation = Panning(sx, sy)
            change = EditorChange.OPERATION
        elif button == PointerButton.LEFT:
            wx, wy = self.viewport.screen_to_world(sx, sy)
            change = self._primary_down(wx, wy)
        else:
            change = EditorChange.NONE

        self._notify(change)
        return change

    def _primary_down(self, wx: float, wy: float) -> EditorChange:
        state = self.state
        kind = state.tool_mode.kind
        hit = hit_test(self.graph, wx, wy, state.selected_node_id, self.link_hit_width)

        if kind == ToolKind.SELECT:
            if hit.kind == HitKind.NODE:
                node = self.graph.nodes[hit.item_id]
                state.selected_node_id = node.id
                state.selected_link_id = None
                state.operation = Dragging(node.id, wx - node.x, wy - node.y)
                return EditorChange.SELECTION | EditorChange.OPERATION
            if hit.kind == HitKind.LINK:
                state.selected_link_id = hit.item_id
                state.selected_node_id = None
                return EditorChange.SELECTION
            state.clear_selection()
            return EditorChange.SELECTION

        if kind == ToolKind.LINK:
            if hit.kind == HitKind.NODE:
                return self._link_click(hit.item_id)
            if hit.kind == HitKind.CANVAS and state.pending_link_source is not None:
                state.operation = None
                return EditorChange.OPERATION
            return EditorChange.NONE

        if kind == ToolKind.ADD_DEVICE and hit.kind == HitKind.CANVAS:
            node = self.graph.add_node(
                state.tool_mode.device_type, wx - NODE_HALF_ICON, wy - NODE_HALF_ICON
            )
            self._save(nodes=True)
            state.tool_mode = ToolMode.select()
            logger.debug(f"Placed {node.type.value} {node.id}")
            return EditorChange.GRAPH | EditorChange.TOOL

        return EditorChange.NONE

    def _link_click(self, node_id: str) -> EditorChange:
        source_id = self.state.pending_link_source
        if source_id is None:
            self.state.operation = PendingLink(node_id)
            return EditorChange.OPERATION
        if source_id == node_id:
            return EditorChange.NONE

        # Duplicates and self-links are dropped silently
        link = self.graph.add_link(source_id, node_id)
        self.state.operation = None
        if link is None:
            return EditorChange.OPERATION
        self._save(links=True)
        return EditorChange.GRAPH | EditorChange.OPERATION

    def pointer_move(self, sx: float, sy: float) -> EditorChange:
        """Handle pointer motion, on or off the canvas."""
        op = self.state.operation

        if isinstance(op, Panning):
            self.viewport.pan(sx - op.last_x, sy - op.last_y)
            self.state.operation = Panning(sx, sy)
            self._save(view=True)
            change = EditorChange.VIEW
        elif isinstance(op, Dragging):
            wx, wy = self.viewport.screen_to_world(sx, sy)
            if self.graph.move_node(op.node_id, wx - op.offset_x, wy - op.offset_y) is None:
                self.state.operation = None
                change = EditorChange.OPERATION
            else:
                self._save(nodes=True)
                change = EditorChange.GRAPH
        else:
            change = self._update_hover(sx, sy)

        self._notify(change)
        return change

    def _update_hover(self, sx: float, sy: float) -> EditorChange:
        wx, wy = self.viewport.screen_to_world(sx, sy)
        hit = hit_test(self.graph, wx, wy, self.state.selected_node_id, self.link_hit_width)
        hovered = hit.item_id if hit.kind == HitKind.NODE else None
        if hovered == self.state.hovered_node_id:
            return EditorChange.NONE
        self.state.hovered_node_id = hovered
        return EditorChange.HOVER

    def pointer_up(self, sx: float = 0.0, sy: float = 0.0,
                   button: Optional[PointerButton] = None) -> EditorChange:
        """Handle a release anywhere. Ends any drag or pan."""
        if not self.captures_pointer:
            return EditorChange.NONE
        self.state.operation = None
        self._notify(EditorChange.OPERATION)
        return EditorChange.OPERATION

    def pointer_leave(self) -> EditorChange:
        """The pointer left the canvas without an operation running."""
        if self.state.hovered_node_id is None:
            return EditorChange.NONE
        self.state.hovered_node_id = None
        self._notify(EditorChange.HOVER)
        return EditorChange.HOVER

    def wheel(self, delta_y: float) -> EditorChange:
        """Mouse wheel always zooms, whatever the tool."""
        self.zoom(delta_y)
        return EditorChange.VIEW

    def key_press(self, key: str) -> bool:
        """
        Handle a shortcut key by name (e.g. "V", "Delete").

        Returns True if the key was handled.
        """
        action = self._shortcuts.get(key)
        if action is None:
            return False

        if action == "select":
            self.set_tool_mode(ToolMode.select())
        elif action == "pan":
            self.set_tool_mode(ToolMode.pan())
        elif action == "link":
            self.set_tool_mode(ToolMode.link())
        elif action == "delete":
            self.delete_selected()
        elif action == "cancel":
            if self.state.pending_link_source is not None:
                self.state.operation = None
                self._notify(EditorChange.OPERATION)
            else:
                self.clear_selection()
        return True
