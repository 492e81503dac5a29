"""
Unit tests for network model classes.

Tests:
- DeviceType labels and lookup tables
- NetworkNode defaults, geometry and serialization
- NetworkLink defaults, endpoints and serialization
"""

import pytest
from models.network import (
    DeviceType, NodeStatus, NetworkNode, NetworkLink,
    DEVICE_PALETTE_ORDER, DEVICE_DESCRIPTIONS,
    DEFAULT_NODE_IP, DEFAULT_LINK_COLOR, DEFAULT_LINK_WIDTH,
)


class TestDeviceType:
    """Tests for the DeviceType enum."""

    def test_values_match_persisted_names(self):
        """Test the stored string values."""
        assert {t.value for t in DeviceType} == {
            "router", "switch", "server", "pc", "cloud",
            "ap", "olt", "firewall", "modem", "htb",
        }

    def test_label_capitalizes(self):
        """Test display labels."""
        assert DeviceType.ROUTER.label == "Router"
        assert DeviceType.ACCESS_POINT.label == "Ap"

    def test_palette_covers_every_type(self):
        """Test every device appears once in the palette and has a description."""
        assert sorted(DEVICE_PALETTE_ORDER, key=lambda t: t.value) == \
            sorted(DeviceType, key=lambda t: t.value)
        assert set(DEVICE_DESCRIPTIONS) == set(DeviceType)


class TestNetworkNode:
    """Tests for NetworkNode class."""

    def test_defaults(self):
        """Test a node gets a default name, ip and status."""
        node = NetworkNode(id="node-1", type=DeviceType.SWITCH, x=10, y=20)
        assert node.name == "New Switch"
        assert node.ip == DEFAULT_NODE_IP
        assert node.status == NodeStatus.UP

    def test_from_dict_null_name_gets_default(self):
        """Test a stored null name is replaced, not shown as text."""
        node = NetworkNode.from_dict({"id": "a", "type": "switch", "x": 0, "y": 0,
                                      "name": None, "ip": None})
        assert node.name == "New Switch"
        assert node.ip == DEFAULT_NODE_IP

    def test_explicit_name_kept(self):
        """Test an explicit name is not replaced."""
        node = NetworkNode(id="n", type=DeviceType.PC, name="Desk 4")
        assert node.name == "Desk 4"

    def test_center(self):
        """Test the center is half an icon from the corner."""
        node = NetworkNode(id="n", x=100, y=50)
        assert node.center == (124, 74)

    def test_contains_is_inclusive(self):
        """Test the icon box includes its edges."""
        node = NetworkNode(id="n", x=0, y=0)
        assert node.contains(0, 0)
        assert node.contains(48, 48)
        assert not node.contains(48.5, 10)
        assert not node.contains(-0.1, 10)

    def test_contains_scaled(self):
        """Test a scaled box grows about the center."""
        node = NetworkNode(id="n", x=0, y=0)
        assert not node.contains(50, 24)
        assert node.contains(50, 24, scale=1.1)
        assert node.contains(24, 24, scale=0.1)
        assert not node.contains(0, 0, scale=0.5)

    def test_round_trip(self):
        """Test to_dict/from_dict preserve every field."""
        node = NetworkNode(
            id="node-7", type=DeviceType.FIREWALL, x=1.5, y=-2,
            name="Edge FW", ip="10.0.0.1", status=NodeStatus.WARNING,
        )
        data = node.to_dict()
        assert data["type"] == "firewall"
        assert data["status"] == "warning"
        assert NetworkNode.from_dict(data) == node

    def test_from_dict_fills_optional_fields(self):
        """Test missing optional fields fall back to defaults."""
        node = NetworkNode.from_dict({"id": "a", "type": "olt", "x": 0, "y": 0})
        assert node.name == "New Olt"
        assert node.ip == DEFAULT_NODE_IP
        assert node.status == NodeStatus.UP

    @pytest.mark.parametrize("data", [
        {"type": "router", "x": 0, "y": 0},
        {"id": "a", "type": "toaster", "x": 0, "y": 0},
        {"id": "a", "type": "router", "x": "left", "y": 0},
        {"id": "a", "type": "router", "x": None, "y": 0},
        {"id": "a", "type": "router", "x": 0, "y": 0, "status": "sleepy"},
        {"id": 7, "type": "router", "x": 0, "y": 0},
        {"id": "a", "type": "router", "x": "12", "y": 0},
        {"id": "a", "type": "router", "x": True, "y": 0},
        {"id": "a", "type": "router", "x": float("nan"), "y": 0},
        {"id": "a", "type": "router", "x": 10**400, "y": 0},
        {"id": "a", "type": "router", "x": 0, "y": 0, "name": 42},
        {"id": "a", "type": "router", "x": 0, "y": 0, "ip": ["10.0.0.1"]},
        "node-1",
    ])
    def test_from_dict_rejects_malformed(self, data):
        """Test malformed entries raise."""
        with pytest.raises((KeyError, ValueError, TypeError)):
            NetworkNode.from_dict(data)


class TestNetworkLink:
    """Tests for NetworkLink class."""

    def test_defaults(self):
        """Test new links use the default stroke."""
        link = NetworkLink(id="link-1", source="a", target="b")
        assert link.label is None
        assert link.stroke_color == DEFAULT_LINK_COLOR
        assert link.stroke_width == DEFAULT_LINK_WIDTH

    def test_missing_style_falls_back(self):
        """Test None color/width still render with defaults."""
        link = NetworkLink(id="l", source="a", target="b", color=None, width=None)
        assert link.stroke_color == "#94a3b8"
        assert link.stroke_width == 2

    def test_connects_either_direction(self):
        """Test pair matching ignores direction."""
        link = NetworkLink(id="l", source="a", target="b")
        assert link.connects("a", "b")
        assert link.connects("b", "a")
        assert not link.connects("a", "c")

    def test_touches(self):
        """Test endpoint membership."""
        link = NetworkLink(id="l", source="a", target="b")
        assert link.touches("a")
        assert link.touches("b")
        assert not link.touches("c")

    def test_to_dict_omits_none(self):
        """Test unset optional fields are not written."""
        link = NetworkLink(id="l", source="a", target="b", color=None)
        assert link.to_dict() == {"id": "l", "source": "a", "target": "b", "width": 2}

    def test_from_dict(self):
        """Test loading a link with a label and style."""
        link = NetworkLink.from_dict({
            "id": "link-3", "source": "a", "target": "b",
            "label": "1G", "color": "#ff0000", "width": 4,
        })
        assert link.label == "1G"
        assert link.color == "#ff0000"
        assert link.width == 4.0

    def test_from_dict_requires_endpoints(self):
        """Test a link without a target is malformed."""
        with pytest.raises(KeyError):
            NetworkLink.from_dict({"id": "l", "source": "a"})

    @pytest.mark.parametrize("extra", [
        {"label": 100},
        {"color": 16711680},
        {"width": "4"},
        {"width": False},
        {"width": float("inf")},
        {"source": 1},
    ])
    def test_from_dict_rejects_wrong_types(self, extra):
        """Test style and endpoint fields must have their stored types."""
        data = {"id": "l", "source": "a", "target": "b", **extra}
        with pytest.raises((ValueError, TypeError)):
            NetworkLink.from_dict(data)

    def test_from_dict_null_style(self):
        """Test explicit nulls mean the default style."""
        link = NetworkLink.from_dict({"id": "l", "source": "a", "target": "b",
                                      "label": None, "color": None, "width": None})
        assert link.label is None
        assert link.stroke_color == DEFAULT_LINK_COLOR
        assert link.stroke_width == DEFAULT_LINK_WIDTH
