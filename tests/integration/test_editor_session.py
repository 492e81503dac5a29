"""
Integration tests for editor sessions.

Tests:
- A full editing session written to a JSON store file
- Restoring that session in a new editor
- Partial corruption of the store file between sessions
- Settings-driven wiring of store path, key prefix and shortcuts
"""

import json
import pytest

from models import DeviceType, ToolMode, NodeStatus, ViewState
from services.kv_store import JsonFileKeyValueStore
from services.persistence import PersistenceAdapter
from services.interaction import TopologyEditor, shortcuts_from_settings


def open_editor(path, key_prefix: str = "topology_v3", **kwargs) -> TopologyEditor:
    """Open an editor session over a store file, as main.py does."""
    persistence = PersistenceAdapter(JsonFileKeyValueStore(path), key_prefix=key_prefix)
    editor = TopologyEditor(persistence=persistence, **kwargs)
    editor.load()
    return editor


def build_topology(editor: TopologyEditor):
    """Place an OLT and two modems, link them and style one link."""
    for device_type, sx, sy in (
        (DeviceType.OLT, 100, 100),
        (DeviceType.MODEM, 400, 50),
        (DeviceType.MODEM, 400, 250),
    ):
        editor.set_tool_mode(ToolMode.add_device(device_type))
        editor.pointer_down(sx, sy)
        editor.pointer_up(sx, sy)

    editor.set_tool_mode(ToolMode.link())
    for sx, sy in ((100, 100), (400, 50), (100, 100), (400, 250)):
        editor.pointer_down(sx, sy)
        editor.pointer_up(sx, sy)

    first_link = next(iter(editor.graph.links))
    editor.update_link(first_link, label="PON 1", color="#f97316", width=3)
    editor.set_tool_mode(ToolMode.select())


class TestSessionRoundTrip:
    """Tests for saving in one session and loading in the next."""

    def test_session_restored(self, temp_dir):
        path = temp_dir / "store.json"
        first = open_editor(path)
        build_topology(first)
        first.update_node("node-2", name="CPE North", status=NodeStatus.WARNING)
        first.zoom(-500)
        first.pan(30, -15)
        first.set_background_image("data:image/png;base64,AAAA")

        second = open_editor(path)
        assert [n.to_dict() for n in second.graph.nodes.values()] == \
            [n.to_dict() for n in first.graph.nodes.values()]
        assert [l.to_dict() for l in second.graph.links.values()] == \
            [l.to_dict() for l in first.graph.links.values()]
        assert second.graph.get_node("node-2").status == NodeStatus.WARNING
        assert second.viewport.view == ViewState(1.5, 30, -15)
        assert second.background_image == "data:image/png;base64,AAAA"

    def test_session_state_not_restored(self, temp_dir):
        """Test tool, selection and operations start fresh."""
        path = temp_dir / "store.json"
        first = open_editor(path)
        build_topology(first)
        first.set_tool_mode(ToolMode.link())
        first.pointer_down(100, 100)

        second = open_editor(path)
        assert second.tool_mode == ToolMode.select()
        assert second.state.operation is None
        assert not second.state.has_selection

    def test_new_ids_after_reload(self, temp_dir):
        """Test ids keep counting past what was loaded."""
        path = temp_dir / "store.json"
        first = open_editor(path)
        build_topology(first)
        existing = set(first.graph.nodes) | set(first.graph.links)

        second = open_editor(path)
        node = second.add_node(DeviceType.PC, 0, 0)
        assert node.id not in existing

    def test_drag_persisted_mid_gesture(self, temp_dir):
        """Test a crash mid-drag still leaves the last position on disk."""
        path = temp_dir / "store.json"
        first = open_editor(path)
        build_topology(first)
        first.pointer_down(100, 100)
        first.pointer_move(160, 130)

        second = open_editor(path)
        olt = second.graph.get_node("node-1")
        assert (olt.x, olt.y) == (136, 106)

    def test_delete_persisted(self, temp_dir):
        path = temp_dir / "store.json"
        first = open_editor(path)
        build_topology(first)
        first.select_node("node-1")
        first.key_press("Delete")

        second = open_editor(path)
        assert "node-1" not in second.graph.nodes
        assert second.graph.links == {}

    def test_drag_does_not_rewrite_background(self, temp_dir, monkeypatch):
        """Test each drag step writes only the small index, not the map."""
        written = []
        original = JsonFileKeyValueStore._write_atomic

        def recording(store, path, text):
            written.append((path.name, len(text)))
            original(store, path, text)

        monkeypatch.setattr(JsonFileKeyValueStore, "_write_atomic", recording)

        path = temp_dir / "store.json"
        editor = open_editor(path)
        background = "data:image/png;base64," + "A" * 2_000_000
        editor.set_background_image(background)
        editor.add_node(DeviceType.OLT, 76, 76)
        written.clear()

        editor.pointer_down(100, 100)
        for step in range(20):
            editor.pointer_move(105 + step * 5, 100)
        editor.pointer_up(200, 100)

        assert len(written) == 20
        assert {name for name, _ in written} == {"store.json"}
        assert max(size for _, size in written) < 4096

        reopened = open_editor(path)
        assert reopened.background_image == background
        assert reopened.graph.get_node("node-1").x == 76 + 100


class TestCorruptStoreFile:
    """Tests for damaged store files between sessions."""

    def test_one_corrupt_field(self, temp_dir):
        path = temp_dir / "store.json"
        build_topology(open_editor(path))

        data = json.loads(path.read_text(encoding="utf-8"))
        data["topology_v3_links"] = "[[[["
        path.write_text(json.dumps(data), encoding="utf-8")

        editor = open_editor(path)
        assert len(editor.graph.nodes) == 3
        assert editor.graph.links == {}

    def test_dangling_links_dropped(self, temp_dir):
        path = temp_dir / "store.json"
        build_topology(open_editor(path))

        data = json.loads(path.read_text(encoding="utf-8"))
        nodes = json.loads(data["topology_v3_nodes"])
        data["topology_v3_nodes"] = json.dumps([n for n in nodes if n["id"] != "node-2"])
        path.write_text(json.dumps(data), encoding="utf-8")

        editor = open_editor(path)
        assert len(editor.graph.links) == 1
        for link in editor.graph.links.values():
            assert "node-2" not in (link.source, link.target)

    def test_truncated_file(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text('{"topology_v3_nodes": "[', encoding="utf-8")
        editor = open_editor(path)
        assert editor.graph.nodes == {}
        editor.add_node(DeviceType.PC, 0, 0)
        assert json.loads(path.read_text(encoding="utf-8"))["topology_v3_nodes"].startswith("[")


class TestSettingsWiring:
    """Tests for building an editor from settings."""

    def test_prefix_isolates_topologies(self, temp_dir):
        path = temp_dir / "store.json"
        build_topology(open_editor(path, key_prefix="site_a"))
        assert open_editor(path, key_prefix="site_b").graph.nodes == {}
        assert len(open_editor(path, key_prefix="site_a").graph.nodes) == 3

    def test_editor_from_settings(self, settings_manager):
        settings_manager.editor.zoom_intensity = 0.002
        settings_manager.shortcuts.pan = "H"
        settings_manager.storage.key_prefix = "lab"

        editor = open_editor(
            settings_manager.get_store_path(),
            key_prefix=settings_manager.storage.key_prefix,
            zoom_intensity=settings_manager.editor.zoom_intensity,
            link_hit_width=settings_manager.editor.link_hit_width,
            shortcuts=shortcuts_from_settings(settings_manager.shortcuts),
        )
        editor.wheel(100)
        assert editor.viewport.scale == pytest.approx(0.8)
        assert editor.key_press("H")
        assert editor.tool_mode == ToolMode.pan()

        editor.add_node(DeviceType.PC, 0, 0)
        stored = json.loads(settings_manager.get_store_path().read_text(encoding="utf-8"))
        assert "lab_nodes" in stored
