"""
Editor interaction state.

Holds the per-editor UI state: which tool is active, which
interaction is in progress, and what is selected or hovered.
One instance per editor; nothing here is module-global.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union

from .network import DeviceType


class ToolKind(Enum):
    """Interaction behaviors offered by the toolbar."""
    SELECT = auto()
    PAN = auto()
    LINK = auto()
    ADD_DEVICE = auto()


@dataclass(frozen=True)
class ToolMode:
    """
    A toolbar tool. ADD_DEVICE carries the device type to place.
    """
    kind: ToolKind = ToolKind.SELECT
    device_type: Optional[DeviceType] = None

    def __post_init__(self):
        if (self.kind == ToolKind.ADD_DEVICE) != (self.device_type is not None):
            raise ValueError("device_type is required for ADD_DEVICE and only for it")

    @classmethod
    def select(cls) -> "ToolMode":
        return cls(ToolKind.SELECT)

    @classmethod
    def pan(cls) -> "ToolMode":
        return cls(ToolKind.PAN)

    @classmethod
    def link(cls) -> "ToolMode":
        return cls(ToolKind.LINK)

    @classmethod
    def add_device(cls, device_type: DeviceType) -> "ToolMode":
        return cls(ToolKind.ADD_DEVICE, device_type)

    @property
    def description(self) -> str:
        """Text shown in the hint overlay."""
        if self.kind == ToolKind.ADD_DEVICE:
            return f"Add {self.device_type.value}"
        return {
            ToolKind.SELECT: "Select & Move",
            ToolKind.PAN: "Pan View",
            ToolKind.LINK: "Connect Link",
        }[self.kind]


# ----------------------------------------------------------------------
# Active operations (at most one in progress)
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Dragging:
    """A node follows the pointer, keeping the grab offset."""
    node_id: str
    offset_x: float   # mouse_world - node position, captured at drag start
    offset_y: float


@dataclass(frozen=True)
class Panning:
    """The view follows the pointer."""
    last_x: float     # last pointer position, screen space
    last_y: float


@dataclass(frozen=True)
class PendingLink:
    """First endpoint of a link has been clicked."""
    source_node_id: str


ActiveOperation = Union[None, Dragging, Panning, PendingLink]


@dataclass
class EditorState:
    """Session UI state for one editor instance."""
    tool_mode: ToolMode = field(default_factory=ToolMode.select)
    operation: ActiveOperation = None
    selected_node_id: Optional[str] = None
    selected_link_id: Optional[str] = None
    hovered_node_id: Optional[str] = None

    @property
    def pending_link_source(self) -> Optional[str]:
        if isinstance(self.operation, PendingLink):
            return self.operation.source_node_id
        return None

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.operation, Dragging)

    @property
    def is_panning(self) -> bool:
        return isinstance(self.operation, Panning)

    @property
    def has_selection(self) -> bool:
        return self.selected_node_id is not None or self.selected_link_id is not None

    def clear_selection(self):
        self.selected_node_id = None
        self.selected_link_id = None

    def forget_node(self, node_id: str):
        """Drop every reference to a node that no longer exists."""
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        if self.hovered_node_id == node_id:
            self.hovered_node_id = None
        op = self.operation
        if isinstance(op, Dragging) and op.node_id == node_id:
            self.operation = None
        elif isinstance(op, PendingLink) and op.source_node_id == node_id:
            self.operation = None

    def forget_link(self, link_id: str):
        if self.selected_link_id == link_id:
            self.selected_link_id = None
