"""
Network topology data models.

These models represent the devices and connections drawn on the
topology canvas. Positions are stored in world space; the viewport
decides where they land on screen.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


# Fixed size of the square icon box every node is drawn in (world units).
NODE_ICON_SIZE = 48
NODE_HALF_ICON = NODE_ICON_SIZE // 2

DEFAULT_NODE_IP = "192.168.1.1"
DEFAULT_LINK_COLOR = "#94a3b8"   # Mid-gray
DEFAULT_LINK_WIDTH = 2


def _required_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, not {type(value).__name__}")
    return value


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{key} must be a string, not {type(value).__name__}")
    return value


def _finite_number(value, key: str) -> float:
    # bool is an int subclass but never a valid coordinate or width
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, not {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise ValueError(f"{key} is out of range") from None
    if not math.isfinite(number):
        raise ValueError(f"{key} must be finite")
    return number


class DeviceType(Enum):
    """
    Types of network devices that can be placed on the canvas.

    The value is the short name used in persisted snapshots.
    """
    ROUTER = "router"
    SWITCH = "switch"
    SERVER = "server"
    PC = "pc"
    CLOUD = "cloud"
    ACCESS_POINT = "ap"
    OLT = "olt"           # Optical line terminal
    FIREWALL = "firewall"
    MODEM = "modem"
    HTB = "htb"           # Hierarchical token bucket shaper

    @property
    def label(self) -> str:
        """Display label, e.g. 'Router', 'Ap'."""
        return self.value[:1].upper() + self.value[1:]


# Order in which device tools appear in the palette
DEVICE_PALETTE_ORDER = [
    DeviceType.ROUTER,
    DeviceType.SWITCH,
    DeviceType.OLT,
    DeviceType.SERVER,
    DeviceType.PC,
    DeviceType.ACCESS_POINT,
    DeviceType.FIREWALL,
    DeviceType.CLOUD,
    DeviceType.MODEM,
    DeviceType.HTB,
]

DEVICE_DESCRIPTIONS = {
    DeviceType.ROUTER: "Routes between networks",
    DeviceType.SWITCH: "L2 network switch",
    DeviceType.SERVER: "Server / service host",
    DeviceType.PC: "End user workstation",
    DeviceType.CLOUD: "Upstream / internet",
    DeviceType.ACCESS_POINT: "WiFi access point",
    DeviceType.OLT: "Optical line terminal",
    DeviceType.FIREWALL: "Packet filter",
    DeviceType.MODEM: "Customer modem / ONT",
    DeviceType.HTB: "Bandwidth shaper (HTB)",
}


class NodeStatus(Enum):
    """Operational status shown on a node."""
    UP = "up"
    DOWN = "down"
    WARNING = "warning"


@dataclass
class NetworkNode:
    """
    A network device on the canvas.

    Attributes:
        id: Unique identifier, assigned once at creation
        type: Device type (selects the icon)
        x, y: World-space position of the top-left of the icon box
        name: Display name
        ip: Display IP address (not validated)
        status: Operational status (tints the icon)
    """
    id: str
    type: DeviceType = DeviceType.ROUTER
    x: float = 0.0
    y: float = 0.0
    name: str = ""
    ip: str = DEFAULT_NODE_IP
    status: NodeStatus = NodeStatus.UP

    def __post_init__(self):
        if not self.name:
            self.name = f"New {self.type.label}"

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + NODE_HALF_ICON, self.y + NODE_HALF_ICON)

    def contains(self, wx: float, wy: float, scale: float = 1.0) -> bool:
        """Check if a world point falls inside the icon box, scaled about its center."""
        half = NODE_HALF_ICON * scale
        cx, cy = self.center
        return abs(wx - cx) <= half and abs(wy - cy) <= half

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "x": self.x,
            "y": self.y,
            "name": self.name,
            "ip": self.ip,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkNode":
        """
        Create from a persisted dictionary.

        Raises:
            KeyError, ValueError, TypeError: if the entry is malformed
        """
        ip = _optional_str(data, "ip")
        return cls(
            id=_required_str(data, "id"),
            type=DeviceType(data["type"]),
            x=_finite_number(data["x"], "x"),
            y=_finite_number(data["y"], "y"),
            # Missing or null names get the per-type default in __post_init__
            name=_optional_str(data, "name") or "",
            ip=DEFAULT_NODE_IP if ip is None else ip,
            status=NodeStatus(data.get("status", NodeStatus.UP.value)),
        )


@dataclass
class NetworkLink:
    """
    A connection between two nodes.

    Attributes:
        id: Unique identifier, assigned once at creation
        source: ID of source node
        target: ID of target node
        label: Optional badge text (bandwidth, distance...)
        color: Stroke color, None means the default mid-gray
        width: Stroke weight, None means the default of 2
    """
    id: str
    source: str
    target: str
    label: Optional[str] = None
    color: Optional[str] = DEFAULT_LINK_COLOR
    width: Optional[float] = DEFAULT_LINK_WIDTH

    @property
    def stroke_color(self) -> str:
        return self.color or DEFAULT_LINK_COLOR

    @property
    def stroke_width(self) -> float:
        return self.width or DEFAULT_LINK_WIDTH

    def connects(self, a: str, b: str) -> bool:
        """Check if this link joins a and b, in either direction."""
        return ((self.source == a and self.target == b) or
                (self.source == b and self.target == a))

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkLink":
        """
        Create from a persisted dictionary.

        Raises:
            KeyError, ValueError, TypeError: if the entry is malformed
        """
        width = data.get("width")
        return cls(
            id=_required_str(data, "id"),
            source=_required_str(data, "source"),
            target=_required_str(data, "target"),
            label=_optional_str(data, "label"),
            color=_optional_str(data, "color"),
            width=_finite_number(width, "width") if width is not None else None,
        )


# Fields the property panel may change
NODE_EDITABLE_FIELDS = frozenset({"type", "x", "y", "name", "ip", "status"})
LINK_EDITABLE_FIELDS = frozenset({"label", "color", "width"})
