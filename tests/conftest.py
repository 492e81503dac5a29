"""
Pytest configuration and shared fixtures for topology editor tests.

Nothing here imports Qt: the editor core is exercised headless.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import SceneGraph, DeviceType, ViewportController, ViewState
from services.kv_store import MemoryKeyValueStore, JsonFileKeyValueStore, StoreError
from services.persistence import PersistenceAdapter
from services.settings_manager import SettingsManager, reset_settings_manager
from services.interaction import TopologyEditor


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="topology_editor_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


# ============== Model Fixtures ==============

@pytest.fixture
def empty_graph() -> SceneGraph:
    """Create an empty scene graph."""
    return SceneGraph()


@pytest.fixture
def simple_graph() -> SceneGraph:
    """Create a router and a switch joined by one link."""
    graph = SceneGraph()
    router = graph.add_node(DeviceType.ROUTER, 100, 100)
    switch = graph.add_node(DeviceType.SWITCH, 300, 100)
    graph.add_link(router.id, switch.id)
    return graph


@pytest.fixture
def star_graph() -> SceneGraph:
    """Create a router with three PCs linked to it."""
    graph = SceneGraph()
    hub = graph.add_node(DeviceType.ROUTER, 300, 300)
    for i in range(3):
        pc = graph.add_node(DeviceType.PC, 100 + i * 200, 500)
        graph.add_link(hub.id, pc.id)
    return graph


@pytest.fixture
def viewport() -> ViewportController:
    """Create an identity viewport."""
    return ViewportController()


@pytest.fixture
def zoomed_viewport() -> ViewportController:
    """Create a viewport at 2x with a pan offset."""
    return ViewportController(ViewState(scale=2.0, translate_x=40.0, translate_y=-20.0))


# ============== Storage Fixtures ==============

@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    """Create an empty in-memory store."""
    return MemoryKeyValueStore()


@pytest.fixture
def file_store(temp_dir: Path) -> JsonFileKeyValueStore:
    """Create a file store in a temp directory."""
    return JsonFileKeyValueStore(temp_dir / "store.json")


class BrokenStore:
    """A store whose every operation fails."""

    def get(self, key):
        raise StoreError("store is broken")

    def set(self, key, value):
        raise StoreError("store is broken")

    def remove(self, key):
        raise StoreError("store is broken")


@pytest.fixture
def broken_store() -> BrokenStore:
    """Create a store that always raises."""
    return BrokenStore()


@pytest.fixture
def persistence(memory_store: MemoryKeyValueStore) -> PersistenceAdapter:
    """Create a persistence adapter over an in-memory store."""
    return PersistenceAdapter(memory_store)


# ============== Editor Fixtures ==============

@pytest.fixture
def editor(persistence: PersistenceAdapter) -> TopologyEditor:
    """Create an editor with in-memory persistence."""
    ed = TopologyEditor(persistence=persistence)
    ed.load()
    return ed


@pytest.fixture
def headless_editor() -> TopologyEditor:
    """Create an editor with no persistence at all."""
    return TopologyEditor()


@pytest.fixture
def recorded_changes(editor: TopologyEditor) -> list:
    """Collect every change notification the editor sends."""
    changes = []
    editor.add_listener(changes.append)
    return changes


# ============== Settings Fixtures ==============

@pytest.fixture
def settings_manager(temp_dir: Path) -> Generator[SettingsManager, None, None]:
    """Create a settings manager writing to a temp file."""
    manager = SettingsManager(config_override=str(temp_dir / "settings.json"))
    yield manager
    reset_settings_manager()
