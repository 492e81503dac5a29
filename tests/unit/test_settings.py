"""
Unit tests for the settings manager.

Tests:
- Defaults and save/load round trip
- Unknown and malformed settings files
- Store path resolution
- Window geometry encoding
- Global accessor
"""

import json
from pathlib import Path

from services.settings_manager import (
    SettingsManager, AppSettings, EditorSettings, ShortcutSettings,
    get_settings, reset_settings_manager,
)
from services.interaction import shortcuts_from_settings, DEFAULT_SHORTCUTS


class TestDefaults:
    """Tests for default settings."""

    def test_editor_defaults(self, settings_manager):
        editor = settings_manager.editor
        assert editor.zoom_intensity == 0.001
        assert editor.grid_spacing == 20
        assert editor.show_hint_overlay is True
        assert editor.link_hit_width == 15.0

    def test_storage_defaults(self, settings_manager):
        assert settings_manager.storage.key_prefix == "topology_v3"
        assert settings_manager.storage.store_path == ""

    def test_default_shortcuts_match_editor_table(self):
        assert shortcuts_from_settings(ShortcutSettings()) == DEFAULT_SHORTCUTS


class TestSaveLoad:
    """Tests for persisting settings."""

    def test_round_trip(self, settings_manager):
        settings_manager.editor.grid_spacing = 40
        settings_manager.storage.key_prefix = "lab"
        settings_manager.shortcuts.link = "K"
        assert settings_manager.save()

        reloaded = SettingsManager(config_override=settings_manager.settings_path)
        assert reloaded.editor.grid_spacing == 40
        assert reloaded.storage.key_prefix == "lab"
        assert reloaded.shortcuts.link == "K"

    def test_unknown_keys_ignored(self, temp_dir):
        path = temp_dir / "settings.json"
        path.write_text(json.dumps({
            "editor": {"grid_spacing": 10, "retro_mode": True},
            "plugins": {"x": 1},
        }), encoding="utf-8")
        manager = SettingsManager(config_override=str(path))
        assert manager.editor.grid_spacing == 10
        assert manager.editor.zoom_intensity == 0.001

    def test_corrupt_file_keeps_defaults(self, temp_dir):
        path = temp_dir / "settings.json"
        path.write_text("not json", encoding="utf-8")
        manager = SettingsManager(config_override=str(path))
        assert manager.settings == AppSettings()

    def test_reset(self, settings_manager):
        settings_manager.editor.grid_spacing = 99
        settings_manager.reset()
        assert settings_manager.editor == EditorSettings()


class TestStorePath:
    """Tests for locating the topology store."""

    def test_next_to_settings_by_default(self, settings_manager):
        expected = Path(settings_manager.settings_path).parent / "topology_store.json"
        assert settings_manager.get_store_path() == expected

    def test_explicit_path(self, settings_manager, temp_dir):
        settings_manager.storage.store_path = str(temp_dir / "elsewhere.json")
        assert settings_manager.get_store_path() == temp_dir / "elsewhere.json"


class TestWindowGeometry:
    """Tests for window geometry persistence."""

    def test_round_trip(self, settings_manager):
        settings_manager.save_window_geometry(b"\x01\x02geo", b"\x03state")
        assert settings_manager.get_window_geometry() == (b"\x01\x02geo", b"\x03state")

    def test_empty(self, settings_manager):
        assert settings_manager.get_window_geometry() == (None, None)

    def test_stored_as_text(self, settings_manager):
        settings_manager.save_window_geometry(b"abc", b"def")
        data = json.loads(Path(settings_manager.settings_path).read_text(encoding="utf-8"))
        assert data["window_geometry"] == {"geometry": "YWJj", "state": "ZGVm"}


class TestGlobalAccessor:
    """Tests for get_settings."""

    def test_singleton(self, temp_dir):
        reset_settings_manager()
        try:
            first = get_settings(str(temp_dir / "settings.json"))
            assert get_settings() is first
        finally:
            reset_settings_manager()
